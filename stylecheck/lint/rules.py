"""Evaluator contract and the explicit evaluator list."""

from __future__ import annotations

from typing import Final, Protocol

from stylecheck.diagnostics import Diagnostic, RuleSpec
from stylecheck.lint.context import LintContext
from stylecheck.lint.include_order import IncludeOrderEvaluator
from stylecheck.lint.indentation import IndentationEvaluator
from stylecheck.lint.line_width import LineWidthEvaluator
from stylecheck.lint.naming import NamingEvaluator
from stylecheck.lint.spacing import SpacingEvaluator
from stylecheck.lint.structure import StructureEvaluator
from stylecheck.source import SourceFile

EVALUATOR_CATEGORIES: Final[frozenset[str]] = frozenset(
    {"spacing", "indentation", "line-width", "naming", "include-order", "structure"}
)


class StyleEvaluator(Protocol):
    """One rule category: scan a file's context, emit diagnostics.

    Evaluators are pure: they read the context and registry and never touch
    each other's output.
    """

    @property
    def name(self) -> str: ...

    @property
    def category(self) -> str: ...

    @property
    def rules(self) -> tuple[RuleSpec, ...]: ...

    def applies_to(self, source: SourceFile) -> bool: ...

    def run(self, context: LintContext) -> list[Diagnostic]: ...


def default_evaluators() -> tuple[StyleEvaluator, ...]:
    return (
        SpacingEvaluator(),
        IndentationEvaluator(),
        LineWidthEvaluator(),
        NamingEvaluator(),
        IncludeOrderEvaluator(),
        StructureEvaluator(),
    )


def validate_evaluators(evaluators: tuple[StyleEvaluator, ...]) -> None:
    seen: set[str] = set()
    for evaluator in evaluators:
        if evaluator.name in seen:
            raise ValueError(f"Evaluator `{evaluator.name}` is registered twice.")
        seen.add(evaluator.name)
        if evaluator.category not in EVALUATOR_CATEGORIES:
            raise ValueError(
                f"Evaluator `{evaluator.name}` has invalid category `{evaluator.category}`; "
                f"expected one of {', '.join(sorted(EVALUATOR_CATEGORIES))}."
            )
        for rule in evaluator.rules:
            if rule.category != evaluator.category:
                raise ValueError(
                    f"Evaluator `{evaluator.name}` owns rule `{rule.id}` from category `{rule.category}`."
                )
