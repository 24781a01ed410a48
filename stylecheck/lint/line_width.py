"""Line width limit."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Final

from stylecheck.diagnostics import Diagnostic, RuleSpec
from stylecheck.diagnostics.codes import LINE_TOO_LONG
from stylecheck.lexer import TokenKind
from stylecheck.lint.context import LineInfo, LintContext
from stylecheck.source import SourceFile
from stylecheck.text import Position

_URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"\S+://\S+")
_STRING_TRAILERS: Final[frozenset[str]] = frozenset({",", ";", ")", "}"})


@dataclass(frozen=True, slots=True)
class LineWidthEvaluator:
    name: str = "line-width"
    category: str = "line-width"
    rules: tuple[RuleSpec, ...] = (LINE_TOO_LONG,)

    def applies_to(self, source: SourceFile) -> bool:
        return True

    def run(self, context: LintContext) -> list[Diagnostic]:
        width = context.options.line_width
        diagnostics: list[Diagnostic] = []
        for line in context.lines:
            length = len(line.text)
            if length <= width:
                continue
            if context.is_indent_aligned(line.number) or _is_lone_string(line):
                continue
            if _has_unsplittable_url(line.text, width):
                continue
            diagnostics.append(
                context.registry.diagnostic(
                    LINE_TOO_LONG,
                    f"Line is {length} columns long, limit is {width}",
                    Position(line.number, width + 1),
                )
            )
        return diagnostics


def _is_lone_string(line: LineInfo) -> bool:
    """A string literal alone on its line, possibly followed by closing punctuation."""
    if not line.tokens or line.tokens[0].kind != TokenKind.STRING:
        return False
    return all(token.kind == TokenKind.PUNCT and token.text in _STRING_TRAILERS for token in line.tokens[1:])


def _has_unsplittable_url(text: str, width: int) -> bool:
    return any(match.start() < width < match.end() for match in _URL_PATTERN.finditer(text))
