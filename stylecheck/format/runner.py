"""Apply the mechanical edits attached to diagnostics."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Final

from stylecheck.diagnostics import Diagnostic, TextEdit
from stylecheck.lint.runner import run_lint
from stylecheck.pipeline.results import FormatRunResult
from stylecheck.registry import Registry
from stylecheck.source import SourceFile
from stylecheck.text import TextRange

# Fixing one gap can expose another (e.g. a line that only fits after trimming).
MAX_PASSES: Final[int] = 4


def run_format(
    source: SourceFile,
    registry: Registry | None = None,
    *,
    max_passes: int = MAX_PASSES,
) -> FormatRunResult:
    """Re-lint and apply non-conflicting edits until nothing changes."""
    if max_passes < 1:
        raise ValueError("max_passes must be at least 1")
    resolved_registry = registry if registry is not None else Registry.build()
    current = source
    applied: list[Diagnostic] = []
    for _ in range(max_passes):
        lint = run_lint(current, resolved_registry)
        text, used = apply_edits(current.text, lint.diagnostics)
        if not used:
            break
        applied.extend(used)
        current = replace(current, text=text)

    return FormatRunResult(
        source=source,
        formatted_text=current.text,
        applied=applied,
        changed=current.text != source.text,
    )


def apply_edits(text: str, diagnostics: Iterable[Diagnostic]) -> tuple[str, list[Diagnostic]]:
    """Apply the edits of each diagnostic unless one of them conflicts with an earlier one.

    A diagnostic's edits are taken all together or not at all. Edits are
    applied from the end of the text backwards so offsets stay valid.
    """
    accepted: list[TextEdit] = []
    used: list[Diagnostic] = []
    for diagnostic in diagnostics:
        if not diagnostic.edits:
            continue
        if any(_conflicts(edit.range, other.range) for edit in diagnostic.edits for other in accepted):
            continue
        accepted.extend(diagnostic.edits)
        used.append(diagnostic)

    result = text
    for edit in sorted(accepted, key=lambda item: item.range.start, reverse=True):
        result = result[: edit.range.start] + edit.replacement + result[edit.range.end :]
    return result, used


def _conflicts(left: TextRange, right: TextRange) -> bool:
    if left.start == right.start:
        return True
    return left.start < right.end and right.start < left.end
