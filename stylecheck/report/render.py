"""Rendering of run results and the rule list, and the process exit code."""

from __future__ import annotations

from enum import StrEnum
import json
from typing import Any, Final, Literal, TypeAlias

from stylecheck.diagnostics import Severity, at_or_above
from stylecheck.pipeline.result import RunResult
from stylecheck.registry import Registry

EXIT_OK: Final[int] = 0
EXIT_VIOLATIONS: Final[int] = 1
EXIT_ERROR: Final[int] = 2

RunStatus: TypeAlias = Literal["pass", "fail", "error"]


class OutputFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


def run_status(result: RunResult, fail_on: Severity = Severity.WARNING) -> RunStatus:
    if result.errors:
        return "error"
    if any(at_or_above(file.diagnostics, fail_on) for file in result.files):
        return "fail"
    return "pass"


def exit_code(result: RunResult, fail_on: Severity = Severity.WARNING) -> int:
    """0 when clean, 1 when a diagnostic reaches `fail_on`, 2 when any file could not be checked."""
    match run_status(result, fail_on):
        case "error":
            return EXIT_ERROR
        case "fail":
            return EXIT_VIOLATIONS
        case _:
            return EXIT_OK


def render(
    result: RunResult,
    fmt: OutputFormat = OutputFormat.TEXT,
    fail_on: Severity = Severity.WARNING,
) -> str:
    match fmt:
        case OutputFormat.JSON:
            return json.dumps(to_json(result, fail_on), indent=2)
        case OutputFormat.TEXT:
            return render_text(result, fail_on)


def render_text(result: RunResult, fail_on: Severity = Severity.WARNING) -> str:
    """`path:line:column: severity [rule-id] message` lines, file errors, then a summary."""
    lines: list[str] = []
    for path, diagnostic in result.diagnostics:
        location = f"{path}:{diagnostic.line}:{diagnostic.column}"
        lines.append(f"{location}: {diagnostic.severity} [{diagnostic.rule_id}] {diagnostic.message}")
        if diagnostic.fix is not None:
            lines.append(f"    expected: {diagnostic.fix}")
    for error in result.errors:
        lines.append(f"{error.path}: {error.kind} error: {error.message}")
    for file in result.files:
        if file.fixes_applied:
            lines.append(f"{file.path}: applied {file.fixes_applied} fixes")

    counts = result.counts
    summary = (
        f"{result.file_count} files checked: {counts[Severity.ERROR]} errors, "
        f"{counts[Severity.WARNING]} warnings, {counts[Severity.INFO]} info"
    )
    if result.errors:
        summary += f", {len(result.errors)} files could not be checked"
    if result.cancelled:
        summary += f" (cancelled, {len(result.skipped)} files skipped)"
    lines.append(f"{summary} [{run_status(result, fail_on)}]")
    return "\n".join(lines)


def to_json(result: RunResult, fail_on: Severity = Severity.WARNING) -> dict[str, Any]:
    counts = result.counts
    return {
        "diagnostics": [
            {
                "file": path,
                "line": diagnostic.line,
                "column": diagnostic.column,
                "rule_id": diagnostic.rule_id,
                "severity": diagnostic.severity.value,
                "message": diagnostic.message,
            }
            for path, diagnostic in result.diagnostics
        ],
        "errors": [{"file": error.path, "kind": error.kind, "message": error.message} for error in result.errors],
        "summary": {
            "counts": {severity.value: counts[severity] for severity in Severity},
            "files": result.file_count,
            "status": run_status(result, fail_on),
        },
    }


def render_rules(registry: Registry) -> str:
    """One row per rule: id, category, effective severity, state and description."""
    settings = list(registry.settings.values())
    id_width = max((len(setting.id) for setting in settings), default=0)
    category_width = max((len(setting.rule.category) for setting in settings), default=0)
    rows: list[str] = []
    for setting in settings:
        state = "on" if setting.enabled else "off"
        rows.append(
            f"{setting.id:<{id_width}}  {setting.rule.category:<{category_width}}  "
            f"{setting.severity.value:<7}  {state:<3}  {setting.rule.description}"
        )
    return "\n".join(rows)
