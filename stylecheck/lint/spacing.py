"""Spacing between adjacent tokens on a line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from stylecheck.diagnostics import Diagnostic, RuleSpec, TextEdit
from stylecheck.diagnostics.codes import (
    SPACING_BETWEEN_TOKENS,
    SPACING_CALL_PAREN,
    SPACING_COMMA,
    SPACING_EMPTY_SCOPE,
    SPACING_INSIDE_SCOPE,
    SPACING_MEMBER_ACCESS,
    SPACING_SEMICOLON,
    SPACING_SUBSCRIPT,
    SPACING_TEMPLATE_ANGLE,
    SPACING_TRAILING_WHITESPACE,
    SPACING_UNARY,
)
from stylecheck.lexer import Token, TokenFlags, TokenKind
from stylecheck.lint.context import LintContext
from stylecheck.source import SourceFile
from stylecheck.text import Position, TextRange

# Keywords written directly against their `(`.
CALL_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "if",
        "for",
        "while",
        "switch",
        "catch",
        "sizeof",
        "alignof",
        "decltype",
        "typeid",
        "noexcept",
        "static_assert",
        "alignas",
        "operator",
        "defined",
        "static_cast",
        "dynamic_cast",
        "const_cast",
        "reinterpret_cast",
    }
)

# Keywords that may be followed directly by `[`.
SUBSCRIPT_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "operator",
        "this",
        "auto",
        "bool",
        "char",
        "char8_t",
        "char16_t",
        "char32_t",
        "double",
        "float",
        "int",
        "long",
        "short",
        "signed",
        "unsigned",
        "void",
        "wchar_t",
    }
)

MEMBER_ACCESS: Final[frozenset[str]] = frozenset({".", "->", ".*", "->*"})
UNCHECKED: Final[frozenset[str]] = frozenset({"*", "&", "&&", "#", "##", "..."})
INCREMENTS: Final[frozenset[str]] = frozenset({"++", "--"})


@dataclass(frozen=True, slots=True)
class _Expectation:
    rule: RuleSpec
    allowed: tuple[int, ...]
    message: str


@dataclass(frozen=True, slots=True)
class SpacingEvaluator:
    name: str = "spacing"
    category: str = "spacing"
    rules: tuple[RuleSpec, ...] = (
        SPACING_INSIDE_SCOPE,
        SPACING_EMPTY_SCOPE,
        SPACING_MEMBER_ACCESS,
        SPACING_CALL_PAREN,
        SPACING_SUBSCRIPT,
        SPACING_SEMICOLON,
        SPACING_TEMPLATE_ANGLE,
        SPACING_UNARY,
        SPACING_COMMA,
        SPACING_BETWEEN_TOKENS,
        SPACING_TRAILING_WHITESPACE,
    )

    def applies_to(self, source: SourceFile) -> bool:
        return True

    def run(self, context: LintContext) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        attributes = _attribute_brackets(context)
        tokens = context.significant

        for index in range(len(tokens) - 1):
            left = tokens[index]
            right = tokens[index + 1]
            if left.range.start in attributes or right.range.start in attributes:
                continue
            if left.kind == TokenKind.MALFORMED or right.kind == TokenKind.MALFORMED:
                continue
            if context.is_unparseable(left.start.line):
                continue
            gap = context.gap(left, right)
            if gap is None:
                continue
            expectation = _expectation(context, index, left, right)
            if expectation is None:
                continue
            width = len(gap)
            if width in expectation.allowed:
                continue
            if width > 1 and 1 in expectation.allowed and context.is_aligned(left.start.line):
                continue
            replacement = " " if 1 in expectation.allowed else ""
            diagnostics.append(
                context.registry.diagnostic(
                    expectation.rule,
                    expectation.message,
                    left.end,
                    edits=(TextEdit(TextRange(left.range.end, right.range.start), replacement),),
                )
            )

        diagnostics.extend(_inside_scope(context, attributes))
        diagnostics.extend(_trailing_whitespace(context))
        return diagnostics


def _expectation(context: LintContext, index: int, left: Token, right: Token) -> _Expectation | None:
    """What the gap between two adjacent tokens must be; `None` leaves it unchecked."""
    pair = f"`{left.text}` and `{right.text}`"

    # Commas.
    if right.is_punct(","):
        return _Expectation(SPACING_COMMA, (0,), "Unexpected space before `,`")
    if left.is_punct(","):
        if right.is_closer:
            return None
        return _Expectation(SPACING_COMMA, (1,), "Expected one space after `,`")

    # Semicolons.
    if right.is_punct(";"):
        if left.is_opener:
            return None
        allowed = (0, 1) if _is_streaming_statement(context, right) else (0,)
        return _Expectation(SPACING_SEMICOLON, allowed, "Unexpected space before `;`")

    # Empty pairs.
    if left.is_opener and context.partner(left) is right:
        return _Expectation(SPACING_EMPTY_SCOPE, (0,), f"Unexpected space inside empty `{left.text}{right.text}`")

    # Template angles.
    if right.is_template_open:
        return _Expectation(SPACING_TEMPLATE_ANGLE, (0,), "Unexpected space before template `<`")
    if left.is_template_open:
        return _Expectation(SPACING_TEMPLATE_ANGLE, (0,), "Unexpected space after template `<`")
    if right.is_template_close:
        return _Expectation(SPACING_TEMPLATE_ANGLE, (0,), "Unexpected space before template `>`")

    # Inner sides of bracket pairs are checked per pair.
    if (left.text in ("(", "[", "{") and left.kind == TokenKind.PUNCT) or (
        right.text in (")", "]", "}") and right.kind == TokenKind.PUNCT
    ):
        return None

    # Member access and scope resolution.
    if left.is_punct("...") or right.is_punct("..."):
        return None
    if left.is_punct("::"):
        return _Expectation(SPACING_MEMBER_ACCESS, (0,), "Unexpected space after `::`")
    if right.is_punct("::"):
        if left.is_word or left.is_template_close:
            return _Expectation(SPACING_MEMBER_ACCESS, (0,), "Unexpected space before `::`")
        return None
    if left.is_punct(*MEMBER_ACCESS):
        return _Expectation(SPACING_MEMBER_ACCESS, (0,), f"Unexpected space after `{left.text}`")
    if right.is_punct(*MEMBER_ACCESS):
        return _Expectation(SPACING_MEMBER_ACCESS, (0,), f"Unexpected space before `{right.text}`")

    # Unary operators.
    if _is_unary(context, index, left):
        return _Expectation(SPACING_UNARY, (0,), f"Unexpected space after unary `{left.text}`")
    if right.is_punct(*INCREMENTS) and _ends_operand(left):
        return _Expectation(SPACING_UNARY, (0,), f"Unexpected space before `{right.text}`")

    # Pointers, references, pack expansions and token pasting.
    if left.is_punct(*UNCHECKED) or right.is_punct(*UNCHECKED):
        return None

    # Calls and flow-control keywords.
    if right.is_punct("("):
        if _is_callee(context, index, left):
            return _Expectation(SPACING_CALL_PAREN, (0,), f"Unexpected space between `{left.text}` and `(`")
        return _Expectation(SPACING_BETWEEN_TOKENS, (1,), f"Expected one space between {pair}")

    # Subscripts.
    if right.is_punct("["):
        if left.is_word or left.text in SUBSCRIPT_KEYWORDS or left.is_punct(")", "]") or left.is_template_close:
            return _Expectation(SPACING_SUBSCRIPT, (0,), f"Unexpected space between `{left.text}` and `[`")
        return _Expectation(SPACING_BETWEEN_TOKENS, (1,), f"Expected one space between {pair}")

    # Overloaded operator names.
    if left.kind == TokenKind.IDENTIFIER and left.text == "operator" and right.kind == TokenKind.PUNCT:
        return _Expectation(SPACING_BETWEEN_TOKENS, (0,), f"Unexpected space between {pair}")

    if right.is_punct(":"):
        return None

    return _Expectation(SPACING_BETWEEN_TOKENS, (1,), f"Expected one space between {pair}")


def _is_callee(context: LintContext, index: int, left: Token) -> bool:
    if not context.is_cpp:
        return left.kind == TokenKind.DIRECTIVE
    match left.kind:
        case TokenKind.DIRECTIVE:
            return True
        case TokenKind.IDENTIFIER:
            return not left.is_keyword or left.text in CALL_KEYWORDS
        case TokenKind.PUNCT:
            if left.is_punct(")", "]") or left.is_template_close:
                return True
            before = context.previous(index)
            return before is not None and before.kind == TokenKind.IDENTIFIER and before.text == "operator"
        case _:
            return False


def _is_unary(context: LintContext, index: int, left: Token) -> bool:
    if left.kind != TokenKind.PUNCT:
        return False
    if left.is_punct("!", "~") or left.has_flag(TokenFlags.UNARY):
        return True
    if left.is_punct(*INCREMENTS):
        before = context.previous(index)
        return before is None or not _ends_operand(before)
    return False


def _ends_operand(token: Token) -> bool:
    if token.kind in (TokenKind.NUMBER, TokenKind.STRING):
        return True
    return token.is_word or token.is_punct(")", "]") or token.is_template_close


def _is_streaming_statement(context: LintContext, semicolon: Token) -> bool:
    first = context.line(semicolon.start.line).first
    return first is not None and first.is_punct("<<") and first is not semicolon


def _attribute_brackets(context: LintContext) -> frozenset[int]:
    """Offsets of the brackets of `[[attribute]]` groups."""
    found: set[int] = set()
    tokens = context.significant
    for index in range(len(tokens) - 1):
        outer = tokens[index]
        inner = tokens[index + 1]
        if not (outer.is_punct("[") and inner.is_punct("[") and outer.range.end == inner.range.start):
            continue
        inner_close = context.partner(inner)
        outer_close = context.partner(outer)
        if inner_close is None or outer_close is None:
            continue
        found.update(token.range.start for token in (outer, inner, inner_close, outer_close))
    return frozenset(found)


def _inside_scope(context: LintContext, attributes: frozenset[int]) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    tokens = context.significant
    source = context.source.text
    for index, opener in enumerate(tokens):
        if opener.kind != TokenKind.PUNCT or opener.text not in ("(", "[", "{"):
            continue
        if opener.range.start in attributes or context.is_unparseable(opener.start.line):
            continue
        closer = context.partner(opener)
        if closer is None or tokens[index + 1] is closer:
            continue
        first_inner = tokens[index + 1]
        last_inner = context.previous(context.index_of(closer))
        if last_inner is None:
            continue

        edits: list[TextEdit] = []
        anchor: Position | None = None
        for left, right in ((opener, first_inner), (last_inner, closer)):
            gap = context.gap(left, right)
            if gap is None or left.kind == TokenKind.MALFORMED or right.kind == TokenKind.MALFORMED:
                continue
            if len(gap) == 1 or (len(gap) > 1 and context.is_aligned(left.start.line)):
                continue
            anchor = anchor or left.end
            edits.append(TextEdit(TextRange(left.range.end, right.range.start), " "))
        if anchor is None:
            continue

        fix = None
        if opener.start.line == closer.start.line:
            inner = source[opener.range.end : closer.range.start].strip(" \t")
            callee = context.previous(index)
            prefix = callee.text if callee is not None and callee.range.end == opener.range.start else ""
            fix = f"{prefix}{opener.text} {inner} {closer.text}"
        diagnostics.append(
            context.registry.diagnostic(
                SPACING_INSIDE_SCOPE,
                f"Expected one space inside `{opener.text}{closer.text}`",
                anchor,
                fix=fix,
                edits=tuple(edits),
            )
        )
    return diagnostics


def _trailing_whitespace(context: LintContext) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    line_index = context.source.lines
    for line in context.lines:
        stripped = line.text.rstrip(" \t")
        if stripped == line.text:
            continue
        if line.number < len(context.lines) and context.line(line.number + 1).continued:
            # The line ends inside a multi-line token.
            continue
        start = line_index.line_start(line.number)
        diagnostics.append(
            context.registry.diagnostic(
                SPACING_TRAILING_WHITESPACE,
                "Trailing whitespace",
                Position(line.number, len(stripped) + 1),
                edits=(TextEdit(TextRange(start + len(stripped), start + len(line.text)), ""),),
            )
        )
    return diagnostics
