"""Diagnostics helpers: collection, counting and severity thresholds."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from stylecheck.diagnostics.codes import Severity
from stylecheck.diagnostics.diagnostic import Diagnostic

if TYPE_CHECKING:
    from stylecheck.lexer.suppressions import Suppressions
    from stylecheck.registry import Registry


def collect_diagnostics(
    *groups: Iterable[Diagnostic],
    registry: Registry | None = None,
    suppressions: Suppressions | None = None,
) -> list[Diagnostic]:
    """Merge evaluator outputs into one sorted, deduplicated list.

    Disabled rules are dropped, severities are taken from the registry and
    diagnostics on suppressed lines are removed.
    """
    seen: set[Diagnostic] = set()
    collected: list[Diagnostic] = []
    for group in groups:
        for diagnostic in group:
            if registry is not None:
                if not registry.is_enabled(diagnostic.rule_id):
                    continue
                severity = registry.severity(diagnostic.rule_id)
                if severity != diagnostic.severity:
                    diagnostic = replace(diagnostic, severity=severity)
            if suppressions is not None and suppressions.is_suppressed(diagnostic.rule_id, diagnostic.line):
                continue
            if diagnostic in seen:
                continue
            seen.add(diagnostic)
            collected.append(diagnostic)
    return sort_diagnostics(collected)


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    return sorted(diagnostics, key=Diagnostic.sort_key)


def count_by_severity(diagnostics: Iterable[Diagnostic]) -> dict[Severity, int]:
    counts = Counter(diagnostic.severity for diagnostic in diagnostics)
    return {severity: counts.get(severity, 0) for severity in Severity}


def at_or_above(diagnostics: Iterable[Diagnostic], threshold: Severity) -> list[Diagnostic]:
    return [diagnostic for diagnostic in diagnostics if diagnostic.severity.rank >= threshold.rank]


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity == Severity.ERROR for d in diagnostics)
