"""Include grouping and ordering in implementation files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import PurePosixPath
import re
from typing import Final

from stylecheck.diagnostics import Diagnostic, RuleSpec
from stylecheck.diagnostics.codes import INCLUDE_ALPHABETICAL, INCLUDE_GROUP_ORDER, INCLUDE_SEPARATOR
from stylecheck.lexer import TokenKind
from stylecheck.lint.context import LintContext
from stylecheck.source import FileRole, Language, SourceFile
from stylecheck.text import Position

_INCLUDE_PATTERN: Final[re.Pattern[str]] = re.compile(r"#\s*include\s*([<\"])([^>\"]+)[>\"]")

# C library headers reached through angle brackets with a `.h` suffix.
C_STANDARD_HEADERS: Final[frozenset[str]] = frozenset(
    {
        "assert.h",
        "complex.h",
        "ctype.h",
        "errno.h",
        "fenv.h",
        "float.h",
        "inttypes.h",
        "iso646.h",
        "limits.h",
        "locale.h",
        "math.h",
        "setjmp.h",
        "signal.h",
        "stdalign.h",
        "stdarg.h",
        "stdatomic.h",
        "stdbool.h",
        "stddef.h",
        "stdint.h",
        "stdio.h",
        "stdlib.h",
        "stdnoreturn.h",
        "string.h",
        "tgmath.h",
        "threads.h",
        "time.h",
        "uchar.h",
        "wchar.h",
        "wctype.h",
    }
)

# C++ standard library headers, including the `<cxxx>` forms of the C headers.
CPP_STANDARD_HEADERS: Final[frozenset[str]] = frozenset(
    {
        "algorithm",
        "any",
        "array",
        "atomic",
        "barrier",
        "bit",
        "bitset",
        "cassert",
        "ccomplex",
        "cctype",
        "cerrno",
        "cfenv",
        "cfloat",
        "charconv",
        "chrono",
        "cinttypes",
        "ciso646",
        "climits",
        "clocale",
        "cmath",
        "codecvt",
        "compare",
        "complex",
        "concepts",
        "condition_variable",
        "coroutine",
        "csetjmp",
        "csignal",
        "cstdalign",
        "cstdarg",
        "cstdbool",
        "cstddef",
        "cstdint",
        "cstdio",
        "cstdlib",
        "cstring",
        "ctgmath",
        "ctime",
        "cuchar",
        "cwchar",
        "cwctype",
        "deque",
        "exception",
        "execution",
        "expected",
        "filesystem",
        "flat_map",
        "flat_set",
        "format",
        "forward_list",
        "fstream",
        "functional",
        "future",
        "generator",
        "initializer_list",
        "iomanip",
        "ios",
        "iosfwd",
        "iostream",
        "istream",
        "iterator",
        "latch",
        "limits",
        "list",
        "locale",
        "map",
        "mdspan",
        "memory",
        "memory_resource",
        "mutex",
        "new",
        "numbers",
        "numeric",
        "optional",
        "ostream",
        "print",
        "queue",
        "random",
        "ranges",
        "ratio",
        "regex",
        "scoped_allocator",
        "semaphore",
        "set",
        "shared_mutex",
        "source_location",
        "span",
        "spanstream",
        "sstream",
        "stack",
        "stacktrace",
        "stdexcept",
        "stdfloat",
        "stop_token",
        "streambuf",
        "string",
        "string_view",
        "strstream",
        "syncstream",
        "system_error",
        "thread",
        "tuple",
        "type_traits",
        "typeindex",
        "typeinfo",
        "unordered_map",
        "unordered_set",
        "utility",
        "valarray",
        "variant",
        "vector",
        "version",
    }
)


class IncludeGroup(IntEnum):
    OWN_HEADER = 1
    LOCAL = 2
    PROJECT = 3
    THIRD_PARTY = 4
    STANDARD = 5

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True, slots=True)
class IncludeLine:
    line: int
    path: str
    quoted: bool
    group: IncludeGroup
    block: int  # includes separated by other code belong to different blocks


@dataclass(frozen=True, slots=True)
class IncludeOrderEvaluator:
    name: str = "include-order"
    category: str = "include-order"
    rules: tuple[RuleSpec, ...] = (INCLUDE_GROUP_ORDER, INCLUDE_ALPHABETICAL, INCLUDE_SEPARATOR)

    def applies_to(self, source: SourceFile) -> bool:
        return source.language == Language.CPP and source.role == FileRole.IMPLEMENTATION

    def run(self, context: LintContext) -> list[Diagnostic]:
        includes = collect_includes(context)
        diagnostics: list[Diagnostic] = []
        registry = context.registry
        highest: IncludeGroup | None = None
        misordered: set[int] = set()

        for include in includes:
            if highest is not None and include.group < highest:
                misordered.add(include.line)
                diagnostics.append(
                    registry.diagnostic(
                        INCLUDE_GROUP_ORDER,
                        f"`{include.path}` ({include.group.label}) belongs before the {highest.label} includes",
                        Position(include.line, 1),
                    )
                )
            else:
                highest = include.group

        for previous, current in zip(includes, includes[1:]):
            if previous.block != current.block:
                continue
            if previous.group == current.group and _sort_key(current.path) < _sort_key(previous.path):
                diagnostics.append(
                    registry.diagnostic(
                        INCLUDE_ALPHABETICAL,
                        f"`{current.path}` should come before `{previous.path}`",
                        Position(current.line, 1),
                    )
                )
            if current.line in misordered or previous.line in misordered:
                continue
            blanks = sum(1 for number in range(previous.line + 1, current.line) if context.line(number).is_blank)
            if previous.group != current.group and blanks != 1:
                diagnostics.append(
                    registry.diagnostic(
                        INCLUDE_SEPARATOR,
                        f"Expected one blank line between the {previous.group.label} and {current.group.label} includes",
                        Position(current.line, 1),
                    )
                )
            elif previous.group == current.group and blanks:
                diagnostics.append(
                    registry.diagnostic(
                        INCLUDE_SEPARATOR,
                        f"Unexpected blank line inside the {current.group.label} includes",
                        Position(current.line, 1),
                    )
                )
        return diagnostics


def collect_includes(context: LintContext) -> list[IncludeLine]:
    """`#include` lines in file order, grouped into blocks of consecutive include/blank lines."""
    stem = context.source.stem
    includes: list[IncludeLine] = []
    block = 0
    for line in context.lines:
        if line.is_blank or line.continued:
            continue
        first = line.first
        match = _INCLUDE_PATTERN.match(first.text) if first is not None and first.kind == TokenKind.DIRECTIVE else None
        if match is None:
            if first is not None:
                block += 1
            continue
        quoted = match.group(1) == '"'
        path = match.group(2).strip()
        group = classify_include(path, quoted=quoted, stem=stem)
        includes.append(IncludeLine(line=line.number, path=path, quoted=quoted, group=group, block=block))
    return includes


def classify_include(path: str, *, quoted: bool, stem: str) -> IncludeGroup:
    pure = PurePosixPath(path)
    if quoted:
        if pure.stem == stem:
            return IncludeGroup.OWN_HEADER
        return IncludeGroup.PROJECT if "/" in path else IncludeGroup.LOCAL
    if path in CPP_STANDARD_HEADERS or path in C_STANDARD_HEADERS:
        return IncludeGroup.STANDARD
    return IncludeGroup.THIRD_PARTY


def _sort_key(path: str) -> tuple[str, str]:
    return (path.lower(), path)
