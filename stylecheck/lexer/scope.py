"""Scope frames tracked while brackets are scanned."""

from __future__ import annotations

from dataclasses import dataclass

from stylecheck.text import Position

TEMPLATE_OPENER = "<"


@dataclass(frozen=True, slots=True)
class ScopeFrame:
    """One open bracket, brace, parenthesis or template angle."""

    opener: str
    position: Position
    indent: int
    offset: int

    @property
    def is_template(self) -> bool:
        return self.opener == TEMPLATE_OPENER


class ScopeStack:
    """Bracket stack with speculative template frames.

    Template frames are pushed on a guess and silently dropped when a statement
    boundary or a closer of an enclosing bracket shows the guess was wrong.
    """

    def __init__(self) -> None:
        self._frames: list[ScopeFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    @property
    def frames(self) -> tuple[ScopeFrame, ...]:
        return tuple(self._frames)

    @property
    def top(self) -> ScopeFrame | None:
        return self._frames[-1] if self._frames else None

    def in_template(self) -> bool:
        top = self.top
        return top is not None and top.is_template

    def push(self, frame: ScopeFrame) -> None:
        self._frames.append(frame)

    def drop_templates(self) -> None:
        while self._frames and self._frames[-1].is_template:
            self._frames.pop()

    def close(self, opener: str) -> ScopeFrame | None:
        """Pop the frame matching `opener`; `None` when the closer is unmatched.

        Unmatched closers leave the stack untouched apart from speculative
        template frames sitting above a matching opener.
        """
        if opener == TEMPLATE_OPENER:
            if self.in_template():
                return self._frames.pop()
            return None
        for index in range(len(self._frames) - 1, -1, -1):
            frame = self._frames[index]
            if frame.opener == opener:
                del self._frames[index:]
                return frame
            if not frame.is_template:
                return None
        return None
