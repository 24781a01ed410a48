"""Reporting: text/JSON rendering, the rule list and exit codes."""

from stylecheck.report.render import (
    EXIT_ERROR,
    EXIT_OK,
    EXIT_VIOLATIONS,
    OutputFormat,
    exit_code,
    render,
    render_rules,
    render_text,
    run_status,
    to_json,
)

__all__ = [
    "EXIT_ERROR",
    "EXIT_OK",
    "EXIT_VIOLATIONS",
    "OutputFormat",
    "exit_code",
    "render",
    "render_rules",
    "render_text",
    "run_status",
    "to_json",
]
