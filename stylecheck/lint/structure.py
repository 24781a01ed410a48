"""File section organization as an explicit state machine.

Sections must appear in this order, each introduced by its marker:

    START -> GUARD_OPEN -> INCLUDES -> PRIVATE_NAMESPACES -> NAMESPACES -> GUARD_CLOSE -> END

Any step that the transition table does not list is an invalid transition;
the state is left unchanged so a single misplaced marker yields a single
diagnostic.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum, StrEnum
import re
from typing import Final

from stylecheck.diagnostics import Diagnostic, RuleSpec
from stylecheck.diagnostics.codes import (
    STRUCTURE_INVALID_TRANSITION,
    STRUCTURE_MISSING_GUARD,
    STRUCTURE_SECTION_SEPARATOR,
)
from stylecheck.lexer import Token, TokenKind
from stylecheck.lint.context import LintContext
from stylecheck.source import FileRole, Language, SourceFile
from stylecheck.text import Position

_DIRECTIVE_PATTERN: Final[re.Pattern[str]] = re.compile(r"#\s*(?P<name>[A-Za-z_]+)\s*(?P<argument>[A-Za-z0-9_]*)")
_CONDITIONAL_OPENERS: Final[frozenset[str]] = frozenset({"if", "ifdef", "ifndef"})


class SectionState(IntEnum):
    START = 0
    GUARD_OPEN = 1
    INCLUDES = 2
    PRIVATE_NAMESPACES = 3
    NAMESPACES = 4
    GUARD_CLOSE = 5
    END = 6

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", " ")


class Marker(StrEnum):
    GUARD = "include guard"
    INCLUDE = "`#include`"
    PRIVATE_NAMESPACE = "private namespace"
    NAMESPACE = "namespace"
    GUARD_END = "include guard end"
    EOF = "end of file"


_TRANSITIONS: Final[dict[tuple[SectionState, Marker], SectionState]] = {
    (SectionState.START, Marker.GUARD): SectionState.GUARD_OPEN,
    (SectionState.START, Marker.INCLUDE): SectionState.INCLUDES,
    (SectionState.START, Marker.PRIVATE_NAMESPACE): SectionState.PRIVATE_NAMESPACES,
    (SectionState.START, Marker.NAMESPACE): SectionState.NAMESPACES,
    (SectionState.START, Marker.EOF): SectionState.END,
    (SectionState.GUARD_OPEN, Marker.INCLUDE): SectionState.INCLUDES,
    (SectionState.GUARD_OPEN, Marker.PRIVATE_NAMESPACE): SectionState.PRIVATE_NAMESPACES,
    (SectionState.GUARD_OPEN, Marker.NAMESPACE): SectionState.NAMESPACES,
    (SectionState.GUARD_OPEN, Marker.GUARD_END): SectionState.GUARD_CLOSE,
    (SectionState.INCLUDES, Marker.INCLUDE): SectionState.INCLUDES,
    (SectionState.INCLUDES, Marker.PRIVATE_NAMESPACE): SectionState.PRIVATE_NAMESPACES,
    (SectionState.INCLUDES, Marker.NAMESPACE): SectionState.NAMESPACES,
    (SectionState.INCLUDES, Marker.GUARD_END): SectionState.GUARD_CLOSE,
    (SectionState.INCLUDES, Marker.EOF): SectionState.END,
    (SectionState.PRIVATE_NAMESPACES, Marker.PRIVATE_NAMESPACE): SectionState.PRIVATE_NAMESPACES,
    (SectionState.PRIVATE_NAMESPACES, Marker.NAMESPACE): SectionState.NAMESPACES,
    (SectionState.PRIVATE_NAMESPACES, Marker.GUARD_END): SectionState.GUARD_CLOSE,
    (SectionState.PRIVATE_NAMESPACES, Marker.EOF): SectionState.END,
    (SectionState.NAMESPACES, Marker.NAMESPACE): SectionState.NAMESPACES,
    (SectionState.NAMESPACES, Marker.GUARD_END): SectionState.GUARD_CLOSE,
    (SectionState.NAMESPACES, Marker.EOF): SectionState.END,
    (SectionState.GUARD_CLOSE, Marker.EOF): SectionState.END,
}


@dataclass(frozen=True, slots=True)
class MarkerHit:
    marker: Marker
    line: int


@dataclass(frozen=True, slots=True)
class GuardInfo:
    opened_at: int | None  # line of `#pragma once` / `#ifndef`
    closed_at: int | None  # line of the matching `#endif`
    pragma: bool = False


@dataclass(frozen=True, slots=True)
class StructureEvaluator:
    name: str = "structure"
    category: str = "structure"
    rules: tuple[RuleSpec, ...] = (
        STRUCTURE_INVALID_TRANSITION,
        STRUCTURE_SECTION_SEPARATOR,
        STRUCTURE_MISSING_GUARD,
    )

    def applies_to(self, source: SourceFile) -> bool:
        return source.language == Language.CPP

    def run(self, context: LintContext) -> list[Diagnostic]:
        guard = find_guard(context)
        diagnostics = _guard_diagnostics(context, guard)
        registry = context.registry
        separator = context.options.section_separator_lines

        state = SectionState.START
        for hit in (*section_markers(context, guard), MarkerHit(Marker.EOF, max(len(context.lines), 1))):
            target = _TRANSITIONS.get((state, hit.marker))
            if target is None:
                if hit.marker == Marker.EOF:
                    break
                diagnostics.append(
                    registry.diagnostic(
                        STRUCTURE_INVALID_TRANSITION,
                        f"Unexpected {hit.marker.value} after the {state.label} section",
                        Position(hit.line, 1),
                    )
                )
                continue
            if target != state and state != SectionState.START and hit.marker != Marker.EOF:
                found = blank_lines_before(context, hit.line)
                if found != separator:
                    diagnostics.append(
                        registry.diagnostic(
                            STRUCTURE_SECTION_SEPARATOR,
                            f"Expected {separator} blank lines before the {target.label} section, found {found}",
                            Position(hit.line, 1),
                        )
                    )
            state = target
        return diagnostics


def find_guard(context: LintContext) -> GuardInfo:
    """Locate the include guard: `#pragma once` or `#ifndef X` + `#define X` as the first code."""
    directives = [token for token in context.significant if token.kind == TokenKind.DIRECTIVE]
    first = context.significant[0] if context.significant else None
    if first is None or first.kind != TokenKind.DIRECTIVE:
        return GuardInfo(opened_at=None, closed_at=None)

    opening = _DIRECTIVE_PATTERN.match(first.text)
    if opening is None:
        return GuardInfo(opened_at=None, closed_at=None)
    if opening.group("name") == "pragma" and opening.group("argument") == "once":
        return GuardInfo(opened_at=first.start.line, closed_at=None, pragma=True)
    if opening.group("name") != "ifndef" or len(directives) < 2:
        return GuardInfo(opened_at=None, closed_at=None)
    definition = _DIRECTIVE_PATTERN.match(directives[1].text)
    if (
        definition is None
        or definition.group("name") != "define"
        or definition.group("argument") != opening.group("argument")
    ):
        return GuardInfo(opened_at=None, closed_at=None)

    depth = 0
    for directive in directives:
        match = _DIRECTIVE_PATTERN.match(directive.text)
        if match is None:
            continue
        if match.group("name") in _CONDITIONAL_OPENERS:
            depth += 1
        elif match.group("name") == "endif":
            depth -= 1
            if depth == 0:
                return GuardInfo(opened_at=first.start.line, closed_at=directive.start.line)
    return GuardInfo(opened_at=first.start.line, closed_at=None)


def section_markers(context: LintContext, guard: GuardInfo) -> Iterator[MarkerHit]:
    """Marker tokens in file order."""
    private_names = frozenset(context.options.private_namespace_names)
    skip_lines: set[int] = set()
    if guard.opened_at is not None:
        yield MarkerHit(Marker.GUARD, guard.opened_at)
        skip_lines.add(guard.opened_at)
    tokens = context.significant
    for index, token in enumerate(tokens):
        if token.start.line in skip_lines:
            continue
        if token.kind == TokenKind.DIRECTIVE:
            match = _DIRECTIVE_PATTERN.match(token.text)
            if match is None:
                continue
            if match.group("name") == "include":
                yield MarkerHit(Marker.INCLUDE, token.start.line)
            elif guard.closed_at == token.start.line:
                yield MarkerHit(Marker.GUARD_END, token.start.line)
            continue
        if token.depth != 0 or not (token.is_keyword and token.text == "namespace"):
            continue
        previous = context.previous(index)
        if previous is not None and previous.kind == TokenKind.IDENTIFIER and previous.text == "using":
            continue
        names = _namespace_components(tokens, index)
        if names is None:
            continue
        private = not names or any(name in private_names for name in names)
        yield MarkerHit(Marker.PRIVATE_NAMESPACE if private else Marker.NAMESPACE, token.start.line)


def _namespace_components(tokens: tuple[Token, ...], index: int) -> list[str] | None:
    """Names of a namespace definition; `None` for aliases and anything without a body."""
    names: list[str] = []
    for token in tokens[index + 1 :]:
        if token.is_word:
            names.append(token.text)
        elif token.is_punct("{"):
            return names
        elif not (token.is_punct("::") or (token.kind == TokenKind.IDENTIFIER and token.text == "inline")):
            return None
    return None


def blank_lines_before(context: LintContext, line: int) -> int:
    """Blank lines directly above `line`, looking past a comment block attached to it."""
    number = line - 1
    while number >= 1 and _is_comment_line(context, number):
        number -= 1
    count = 0
    while number >= 1 and context.line(number).is_blank:
        count += 1
        number -= 1
    return count


def _is_comment_line(context: LintContext, number: int) -> bool:
    info = context.line(number)
    return not info.tokens and not info.is_blank and (bool(info.comments) or info.continued)


def _guard_diagnostics(context: LintContext, guard: GuardInfo) -> list[Diagnostic]:
    if context.source.role != FileRole.HEADER:
        return []
    registry = context.registry
    if guard.opened_at is None:
        return [registry.diagnostic(STRUCTURE_MISSING_GUARD, "Header has no include guard", Position(1, 1))]
    if not guard.pragma and guard.closed_at is None:
        return [
            registry.diagnostic(
                STRUCTURE_MISSING_GUARD,
                "Include guard is never closed",
                Position(guard.opened_at, 1),
            )
        ]
    return []
