"""Naming conventions for declared names."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
import re
from typing import Final

from stylecheck.diagnostics import Diagnostic, RuleSpec
from stylecheck.diagnostics.codes import (
    NAMING_CASE,
    NAMING_NOISE_WORD,
    NAMING_TEMPLATE_PARAMETER,
    NAMING_WORD_COUNT,
)
from stylecheck.lexer import Token, TokenKind
from stylecheck.lint.context import LintContext
from stylecheck.source import SourceFile

SNAKE_CASE: Final[re.Pattern[str]] = re.compile(r"_?[a-z][a-z0-9]*(?:_[a-z0-9]+)*_?")
PASCAL_CASE: Final[re.Pattern[str]] = re.compile(r"[A-Z][A-Za-z0-9]*")
_WORD_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+|[0-9]+")

TYPE_DECLARATORS: Final[frozenset[str]] = frozenset({"class", "struct", "union", "enum"})
TYPE_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
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
DECL_SPECIFIERS: Final[frozenset[str]] = frozenset(
    {
        "const",
        "volatile",
        "static",
        "inline",
        "constexpr",
        "consteval",
        "constinit",
        "extern",
        "mutable",
        "virtual",
        "explicit",
        "thread_local",
        "typename",
        "register",
        "typedef",
        "friend",
        "struct",
        "class",
        "enum",
        "union",
    }
)
DECLARATOR_PUNCT: Final[frozenset[str]] = frozenset({"*", "&", "&&", "::"})
BOUNDARY_PUNCT: Final[frozenset[str]] = frozenset({";", "{", "}", "(", ",", ":"})
FOLLOWERS: Final[frozenset[str]] = frozenset({"=", ";", "(", "{", ",", "[", ")", ":"})
QUALIFIERS: Final[frozenset[str]] = frozenset({".", "->", "::", "~", ".*", "->*"})

CMAKE_NAMED_COMMANDS: Final[frozenset[str]] = frozenset({"set", "option", "function", "macro", "foreach"})


class NameKind(StrEnum):
    SYMBOL = "symbol"
    TEMPLATE_PARAMETER = "template-parameter"


@dataclass(frozen=True, slots=True)
class DeclaredName:
    token: Token
    kind: NameKind = NameKind.SYMBOL


@dataclass(frozen=True, slots=True)
class NamingEvaluator:
    name: str = "naming"
    category: str = "naming"
    rules: tuple[RuleSpec, ...] = (NAMING_CASE, NAMING_TEMPLATE_PARAMETER, NAMING_WORD_COUNT, NAMING_NOISE_WORD)

    def applies_to(self, source: SourceFile) -> bool:
        return True

    def run(self, context: LintContext) -> list[Diagnostic]:
        declared = cpp_declarations(context) if context.is_cpp else cmake_declarations(context)
        diagnostics: list[Diagnostic] = []
        seen: set[int] = set()
        for item in declared:
            if item.token.range.start in seen:
                continue
            seen.add(item.token.range.start)
            diagnostics.extend(check_name(context, item))
        return diagnostics


def check_name(context: LintContext, item: DeclaredName) -> list[Diagnostic]:
    """Case, word-count and noise-word checks for one declared name."""
    name = item.token.text
    registry = context.registry
    if registry.is_name_exception(name):
        return []

    diagnostics: list[Diagnostic] = []
    position = item.token.start
    if item.kind == NameKind.TEMPLATE_PARAMETER:
        if not PASCAL_CASE.fullmatch(name):
            diagnostics.append(
                registry.diagnostic(NAMING_TEMPLATE_PARAMETER, f"Template parameter `{name}` should be PascalCase", position)
            )
    elif not SNAKE_CASE.fullmatch(name):
        diagnostics.append(registry.diagnostic(NAMING_CASE, f"`{name}` should be lower_snake_case", position))

    words = split_words(name)
    limit = context.options.max_name_words
    if len(words) > limit:
        diagnostics.append(
            registry.diagnostic(NAMING_WORD_COUNT, f"`{name}` has {len(words)} words, the limit is {limit}", position)
        )
    noise = next((word for word in words if word.lower() in context.options.noise_words), None)
    if noise is not None:
        diagnostics.append(
            registry.diagnostic(NAMING_NOISE_WORD, f"`{name}` contains the noise word `{noise.lower()}`", position)
        )
    return diagnostics


def split_words(name: str) -> list[str]:
    """Split on underscores and case changes: `parseHTTPHeader_v2` -> parse, HTTP, Header, v2."""
    words: list[str] = []
    for part in name.split("_"):
        words.extend(_WORD_PATTERN.findall(part))
    return words


# -------------------------
# C++
# -------------------------


def cpp_declarations(context: LintContext) -> list[DeclaredName]:
    tokens = context.significant
    template_lists = _template_parameter_lists(context)
    inside_templates = {
        token.range.start for start, end in template_lists for token in tokens[start + 1 : end]
    }

    declared: list[DeclaredName] = []
    for start, end in template_lists:
        declared.extend(_template_parameters(tokens, start, end))

    for index, token in enumerate(tokens):
        if token.range.start in inside_templates or context.is_unparseable(token.start.line):
            continue
        if token.kind != TokenKind.IDENTIFIER:
            continue
        if token.text in TYPE_DECLARATORS:
            declared.extend(_type_declaration(context, index))
        elif token.text == "namespace":
            declared.extend(_namespace_names(tokens, index))
        elif token.text == "using":
            following = context.next(index)
            after = context.next(index + 1)
            if following is not None and following.is_word and after is not None and after.is_punct("="):
                declared.append(DeclaredName(following))
        elif token.is_word and _is_declarator_name(context, index):
            declared.append(DeclaredName(token))
    return declared


def _template_parameter_lists(context: LintContext) -> list[tuple[int, int]]:
    """Index pairs of `<`/`>` for every `template<...>` parameter list."""
    lists: list[tuple[int, int]] = []
    tokens = context.significant
    for index, token in enumerate(tokens):
        if not (token.is_keyword and token.text == "template"):
            continue
        opener = context.next(index)
        if opener is None or not opener.is_template_open:
            continue
        closer = context.partner(opener)
        if closer is not None:
            lists.append((index + 1, context.index_of(closer)))
    return lists


def _template_parameters(tokens: tuple[Token, ...], start: int, end: int) -> Iterator[DeclaredName]:
    level = tokens[start].depth + 1
    segment: list[Token] = []
    for token in (*tokens[start + 1 : end], None):
        if token is not None and not (token.is_punct(",") and token.depth == level):
            segment.append(token)
            continue
        head: list[Token] = []
        for item in segment:
            if item.is_punct("=") and item.depth == level:
                break
            head.append(item)
        if len(head) >= 2 and head[-1].is_word:
            yield DeclaredName(head[-1], NameKind.TEMPLATE_PARAMETER)
        segment = []


def _type_declaration(context: LintContext, index: int) -> Iterator[DeclaredName]:
    tokens = context.significant
    keyword = tokens[index]
    cursor = index + 1
    if keyword.text == "enum" and cursor < len(tokens) and tokens[cursor].text in ("class", "struct"):
        cursor += 1

    name: Token | None = None
    while cursor < len(tokens):
        token = tokens[cursor]
        if token.is_word:
            name = token
        elif not token.is_punct("::"):
            break
        cursor += 1
    if name is None or cursor >= len(tokens):
        return
    stop = tokens[cursor]
    if not (stop.is_punct("{", ":", ";") or (stop.kind == TokenKind.IDENTIFIER and stop.text == "final")):
        return
    yield DeclaredName(name)

    if keyword.text == "enum":
        brace = stop
        if not brace.is_punct("{"):
            brace_index = next(
                (position for position in range(cursor, len(tokens)) if tokens[position].is_punct("{", ";")), None
            )
            if brace_index is None or not tokens[brace_index].is_punct("{"):
                return
            brace = tokens[brace_index]
        yield from _enumerators(context, brace)


def _enumerators(context: LintContext, brace: Token) -> Iterator[DeclaredName]:
    closer = context.partner(brace)
    if closer is None:
        return
    tokens = context.significant
    start = context.index_of(brace)
    end = context.index_of(closer)
    for position in range(start + 1, end):
        token = tokens[position]
        previous = tokens[position - 1]
        following = tokens[position + 1]
        if not token.is_word or token.depth != brace.depth + 1:
            continue
        if previous.is_punct("{", ",") and following.is_punct(",", "=", "}"):
            yield DeclaredName(token)


def _namespace_names(tokens: tuple[Token, ...], index: int) -> Iterator[DeclaredName]:
    cursor = index + 1
    while cursor < len(tokens):
        token = tokens[cursor]
        if token.is_word:
            yield DeclaredName(token)
        elif not (token.is_punct("::") or (token.kind == TokenKind.IDENTIFIER and token.text == "inline")):
            return
        cursor += 1


def _is_declarator_name(context: LintContext, index: int) -> bool:
    """Backward type scan: a name is declared when a type sits between it and a boundary."""
    tokens = context.significant
    following = context.next(index)
    if following is None or not following.is_punct(*FOLLOWERS):
        return False
    previous = context.previous(index)
    if previous is None or previous.is_punct(*QUALIFIERS):
        return False

    cursor = index - 1
    has_type = False
    while cursor >= 0:
        token = tokens[cursor]
        if token.is_template_close:
            opener = context.partner(token)
            if opener is None:
                return False
            cursor = context.index_of(opener) - 1
            before = tokens[cursor] if cursor >= 0 else None
            if before is not None and before.kind == TokenKind.IDENTIFIER and before.text == "template":
                return has_type
            continue
        if token.is_word or (token.kind == TokenKind.IDENTIFIER and token.text in TYPE_KEYWORDS):
            has_type = True
        elif token.kind == TokenKind.IDENTIFIER and token.text in DECL_SPECIFIERS:
            pass
        elif token.is_punct(*DECLARATOR_PUNCT):
            pass
        else:
            return has_type and _is_boundary(token)
        cursor -= 1
    return has_type


def _is_boundary(token: Token) -> bool:
    if token.kind == TokenKind.DIRECTIVE:
        return True
    return token.is_template_open or token.is_punct(*BOUNDARY_PUNCT)


# -------------------------
# CMake
# -------------------------


def cmake_declarations(context: LintContext) -> list[DeclaredName]:
    declared: list[DeclaredName] = []
    tokens = context.significant
    for index, token in enumerate(tokens[:-2]):
        if token.kind != TokenKind.DIRECTIVE or token.text.lower() not in CMAKE_NAMED_COMMANDS:
            continue
        paren = tokens[index + 1]
        argument = tokens[index + 2]
        if not paren.is_punct("(") or argument.kind != TokenKind.IDENTIFIER:
            continue
        if "{" in argument.text or "$" in argument.text:
            continue
        declared.append(DeclaredName(argument))
    return declared
