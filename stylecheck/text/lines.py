"""Line/column positions and the per-file line index."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
import re

_NEWLINE = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """1-based line/column pair used to anchor and order diagnostics."""

    line: int
    column: int

    def __post_init__(self):
        if self.line < 1 or self.column < 1:
            raise ValueError("Position line and column are 1-based")

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class LineIndex:
    """Maps offsets to positions and back for one source text.

    A trailing newline does not start a new line: `"a\\n"` has one line.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._starts: list[int] = [0]
        self._ends: list[int] = []
        for match in _NEWLINE.finditer(text):
            self._ends.append(match.start())
            self._starts.append(match.end())
        self._ends.append(len(text))
        if len(self._starts) > 1 and self._starts[-1] == len(text):
            self._starts.pop()
            self._ends.pop()

    @property
    def line_count(self) -> int:
        if not self._text:
            return 0
        return len(self._starts)

    def position(self, offset: int) -> Position:
        """Position of a character offset; `len(text)` maps past the last character."""
        if offset < 0 or offset > len(self._text):
            raise ValueError(f"Offset {offset} is outside the text")
        line = bisect_right(self._starts, offset)
        return Position(line, offset - self._starts[line - 1] + 1)

    def offset(self, position: Position) -> int:
        if position.line > len(self._starts):
            raise ValueError(f"Line {position.line} is outside the text")
        return self._starts[position.line - 1] + position.column - 1

    def line_start(self, line: int) -> int:
        return self._starts[line - 1]

    def line_text(self, line: int) -> str:
        return self._text[self._starts[line - 1] : self._ends[line - 1]]

    def lines(self) -> list[str]:
        return [self.line_text(line) for line in range(1, self.line_count + 1)]
