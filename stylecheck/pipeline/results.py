"""Per-file run result carriers for the lint and format runners."""

from __future__ import annotations

from dataclasses import dataclass

from stylecheck.diagnostics import Diagnostic
from stylecheck.lexer import LexResult
from stylecheck.source import SourceFile


@dataclass(frozen=True, slots=True)
class LintRunResult:
    """Result of running the evaluators over one tokenized file."""

    source: SourceFile
    lexed: LexResult
    diagnostics: list[Diagnostic]
    cancelled: bool = False
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class FormatRunResult:
    """Result of applying mechanical fixes to one file."""

    source: SourceFile
    formatted_text: str
    applied: list[Diagnostic]
    changed: bool
