"""Lint runner over one tokenized source file."""

from __future__ import annotations

from collections.abc import Sequence
import logging
import threading
import time

from stylecheck.diagnostics import Diagnostic, collect_diagnostics
from stylecheck.diagnostics.codes import UNPARSEABLE_REGION
from stylecheck.lexer import LexResult, tokenize
from stylecheck.lint.context import build_context
from stylecheck.lint.rules import StyleEvaluator, default_evaluators, validate_evaluators
from stylecheck.pipeline.results import LintRunResult
from stylecheck.registry import Registry
from stylecheck.source import SourceFile
from stylecheck.text import Position

logger = logging.getLogger(__name__)


def run_lint(
    source: SourceFile,
    registry: Registry | None = None,
    *,
    lexed: LexResult | None = None,
    evaluators: Sequence[StyleEvaluator] | None = None,
    cancel: threading.Event | None = None,
    deadline: float | None = None,
) -> LintRunResult:
    """Tokenize once and run every applicable evaluator over the shared context.

    `cancel` and `deadline` (a `time.monotonic()` value; defaults to the
    configured per-file budget) are checked between evaluators. Running out of
    time keeps what was found so far and reports an `unparseable-region`.
    """
    resolved_registry = registry if registry is not None else Registry.build()
    resolved_lexed = _resolve_lexed(source, lexed)
    resolved_evaluators = tuple(evaluators) if evaluators is not None else default_evaluators()
    validate_evaluators(resolved_evaluators)
    budget = resolved_registry.options.file_time_budget
    resolved_deadline = deadline if deadline is not None else time.monotonic() + budget

    context = build_context(source, resolved_registry, lexed=resolved_lexed)
    groups: list[Sequence[Diagnostic]] = [resolved_lexed.diagnostics, context.diagnostics]
    timed_out = False

    for evaluator in resolved_evaluators:
        if cancel is not None and cancel.is_set():
            logger.debug("%s: cancelled before %s", source.path, evaluator.name)
            return LintRunResult(source=source, lexed=resolved_lexed, diagnostics=[], cancelled=True)
        if time.monotonic() > resolved_deadline:
            timed_out = True
            logger.warning("%s: time budget exhausted before %s", source.path, evaluator.name)
            groups.append(
                [
                    resolved_registry.diagnostic(
                        UNPARSEABLE_REGION,
                        f"Analysis stopped before `{evaluator.name}` after exceeding the {budget:g}s time budget",
                        Position(1, 1),
                    )
                ]
            )
            break
        if not evaluator.applies_to(source) or not resolved_registry.any_enabled(evaluator.rules):
            continue
        groups.append(evaluator.run(context))

    diagnostics = collect_diagnostics(
        *groups,
        registry=resolved_registry,
        suppressions=resolved_lexed.suppressions,
    )
    return LintRunResult(
        source=source,
        lexed=resolved_lexed,
        diagnostics=diagnostics,
        timed_out=timed_out,
    )


def _resolve_lexed(source: SourceFile, lexed: LexResult | None) -> LexResult:
    if lexed is not None:
        if lexed.text != source.text or lexed.language != source.language:
            raise ValueError("Provided tokens must come from the same source text and language")
        return lexed
    return tokenize(source.text, source.language)
