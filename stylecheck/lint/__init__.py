"""Style evaluators and the lint runner."""

from stylecheck.lint.context import LineInfo, LintContext, build_context
from stylecheck.lint.rules import StyleEvaluator, default_evaluators, validate_evaluators
from stylecheck.lint.runner import run_lint

__all__ = [
    "LineInfo",
    "LintContext",
    "StyleEvaluator",
    "build_context",
    "default_evaluators",
    "run_lint",
    "validate_evaluators",
]
