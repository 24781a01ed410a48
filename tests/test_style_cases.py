import pytest

from stylecheck.config import RuleOverride
from stylecheck.lint import default_evaluators, run_lint
from stylecheck.pipeline import check_text
from stylecheck.registry import Registry
from stylecheck.source import SourceFile
from tests._debug import debug_dump_diagnostics
from tests._shared_cases import CLEAN_CASES, VIOLATION_CASES, StyleCase, ViolationCase, case_id

ALL_SOURCES: tuple[StyleCase, ...] = CLEAN_CASES + tuple(
    StyleCase(name=case.name, source=case.source, path=case.path) for case in VIOLATION_CASES
)


@pytest.mark.parametrize("case", CLEAN_CASES, ids=case_id)
def test_clean_sources_have_no_diagnostics(case: StyleCase) -> None:
    result = check_text(case.source, path=case.path)
    debug_dump_diagnostics(case.name, result.diagnostics, case.source)

    assert result.diagnostics == []
    assert result.timed_out is False


@pytest.mark.parametrize("case", VIOLATION_CASES, ids=case_id)
def test_single_violation_is_reported_once(case: ViolationCase) -> None:
    result = check_text(case.source, path=case.path)
    debug_dump_diagnostics(case.name, result.diagnostics, case.source)

    assert [(d.rule_id, d.line, d.column) for d in result.diagnostics] == [(case.rule_id, case.line, case.column)]


@pytest.mark.parametrize("case", VIOLATION_CASES, ids=case_id)
def test_disabling_the_rule_silences_the_violation(case: ViolationCase) -> None:
    registry = Registry.build(overrides={case.rule_id: RuleOverride(enabled=False)})

    result = check_text(case.source, path=case.path, registry=registry)

    assert all(d.rule_id != case.rule_id for d in result.diagnostics)


@pytest.mark.parametrize("case", ALL_SOURCES, ids=case_id)
def test_checking_twice_gives_identical_output(case: StyleCase) -> None:
    first = check_text(case.source, path=case.path)
    second = check_text(case.source, path=case.path)

    assert first.diagnostics == second.diagnostics
    assert [d.severity for d in first.diagnostics] == [d.severity for d in second.diagnostics]


@pytest.mark.parametrize("case", ALL_SOURCES, ids=case_id)
def test_evaluator_order_does_not_change_output(case: StyleCase) -> None:
    source = SourceFile.from_text(case.source, path=case.path)

    forward = run_lint(source, evaluators=default_evaluators())
    backward = run_lint(source, evaluators=tuple(reversed(default_evaluators())))

    assert forward.diagnostics == backward.diagnostics
