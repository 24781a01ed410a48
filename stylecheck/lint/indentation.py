"""Indentation against scope depth."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from stylecheck.diagnostics import Diagnostic, RuleSpec
from stylecheck.diagnostics.codes import INDENT_CLOSER, INDENT_DEPTH, INDENT_MULTIPLE
from stylecheck.lexer import Token, TokenKind
from stylecheck.lint.context import LineInfo, LintContext
from stylecheck.source import SourceFile
from stylecheck.text import Position

ACCESS_SPECIFIERS: Final[frozenset[str]] = frozenset({"public", "protected", "private"})
CASE_LABELS: Final[frozenset[str]] = frozenset({"case", "default"})

# A previous line ending in one of these finishes its statement.
STATEMENT_ENDS: Final[frozenset[str]] = frozenset({";", "{", "}", ":"})


@dataclass(frozen=True, slots=True)
class IndentationEvaluator:
    name: str = "indentation"
    category: str = "indentation"
    rules: tuple[RuleSpec, ...] = (INDENT_MULTIPLE, INDENT_DEPTH, INDENT_CLOSER)

    def applies_to(self, source: SourceFile) -> bool:
        return True

    def run(self, context: LintContext) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        width = context.options.indent_width
        case_depths: set[int] = set()
        previous_code: LineInfo | None = None

        for line in context.lines:
            if line.is_blank or line.continued or context.is_unparseable(line.number):
                continue
            first = line.first
            if first is not None and context.is_cpp and first.kind == TokenKind.DIRECTIVE:
                continue
            if first is not None and first.kind == TokenKind.MALFORMED:
                continue

            case_depths = {depth for depth in case_depths if depth <= line.depth}
            is_case_label = first is not None and first.is_keyword and first.text in CASE_LABELS

            diagnostic = None
            if not context.is_aligned(line.number):
                if first is not None and first.is_closer and not first.is_template_close:
                    diagnostic = _check_closer(context, line, first)
                elif not _accepted(context, line, previous_code, in_case=line.depth in case_depths and not is_case_label):
                    diagnostic = _depth_diagnostic(context, line, width)
            if diagnostic is not None:
                diagnostics.append(diagnostic)

            if is_case_label:
                case_depths.add(line.depth)
            if first is not None:
                previous_code = line
        return diagnostics


def _check_closer(context: LintContext, line: LineInfo, closer: Token) -> Diagnostic | None:
    opener = context.partner(closer)
    if opener is None:
        return None
    expected = context.line(opener.start.line).indent
    if line.indent == expected:
        return None
    return context.registry.diagnostic(
        INDENT_CLOSER,
        f"Closing `{closer.text}` is indented {line.indent}, its opening line is indented {expected}",
        Position(line.number, 1),
    )


def _accepted(context: LintContext, line: LineInfo, previous_code: LineInfo | None, *, in_case: bool) -> bool:
    width = context.options.indent_width
    expected = line.expected_indent
    first = line.first
    if line.indent == expected:
        return True
    if in_case and line.indent == expected + width:
        return True
    if first is None:
        return False

    if context.is_cpp:
        if first.is_punct("<<") and line.indent >= expected:
            return True
        if first.text in ACCESS_SPECIFIERS and _followed_by_colon(context, first) and line.indent == expected - width:
            return True
        if previous_code is not None and line.indent == expected + width and _continues(previous_code):
            return True

    return _aligned_with_argument(context, line)


def _continues(previous: LineInfo) -> bool:
    last = previous.last
    if last is None or last.kind == TokenKind.DIRECTIVE:
        return False
    return not (last.kind == TokenKind.PUNCT and last.text in STATEMENT_ENDS)


def _followed_by_colon(context: LintContext, token: Token) -> bool:
    following = context.next(context.index_of(token))
    return following is not None and following.is_punct(":")


def _aligned_with_argument(context: LintContext, line: LineInfo) -> bool:
    """Continuation lines may line up with the first argument after the innermost open bracket."""
    if not line.frames:
        return False
    opener = context.token_at(line.frames[-1].offset)
    if opener is None:
        return False
    argument = context.next(context.index_of(opener))
    if argument is None or argument.start.line != opener.start.line:
        return False
    return line.indent == argument.start.column - 1


def _depth_diagnostic(context: LintContext, line: LineInfo, width: int) -> Diagnostic:
    if line.indent % width:
        return context.registry.diagnostic(
            INDENT_MULTIPLE,
            f"Indentation of {line.indent} is not a multiple of {width}",
            Position(line.number, 1),
        )
    return context.registry.diagnostic(
        INDENT_DEPTH,
        f"Expected indentation of {line.expected_indent}, found {line.indent}",
        Position(line.number, 1),
    )
