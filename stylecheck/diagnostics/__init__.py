"""Diagnostics."""

from stylecheck.diagnostics.codes import DEFAULT_RULES, RuleSpec, Severity
from stylecheck.diagnostics.diagnostic import Diagnostic, TextEdit
from stylecheck.diagnostics.report import (
    at_or_above,
    collect_diagnostics,
    count_by_severity,
    has_errors,
    sort_diagnostics,
)

__all__ = [
    "DEFAULT_RULES",
    "Diagnostic",
    "RuleSpec",
    "Severity",
    "TextEdit",
    "at_or_above",
    "collect_diagnostics",
    "count_by_severity",
    "has_errors",
    "sort_diagnostics",
]
