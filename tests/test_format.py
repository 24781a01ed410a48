import pytest

from stylecheck.diagnostics import Diagnostic, TextEdit
from stylecheck.format import apply_edits, run_format
from stylecheck.source import SourceFile
from stylecheck.text import Position, TextRange
from tests._shared_cases import CLEAN_CASES, case_id


def edit_diag(rule_id: str, *edits: tuple[int, int, str]) -> Diagnostic:
    return Diagnostic(
        rule_id=rule_id,
        message="fixable",
        position=Position(1, 1),
        edits=tuple(TextEdit(TextRange(start, end), replacement) for start, end, replacement in edits),
    )


def test_apply_edits_from_the_end_backwards() -> None:
    text, used = apply_edits(
        "a,b,c",
        [edit_diag("spacing-comma", (2, 2, " ")), edit_diag("spacing-comma", (4, 4, " "))],
    )

    assert text == "a, b, c"
    assert len(used) == 2


def test_overlapping_edit_is_skipped() -> None:
    first = edit_diag("first", (0, 3, "x"))
    second = edit_diag("second", (2, 4, "y"))

    text, used = apply_edits("abcdef", [first, second])

    assert text == "xdef"
    assert used == [first]


def test_same_start_conflicts_even_when_empty() -> None:
    first = edit_diag("first", (1, 1, "x"))
    second = edit_diag("second", (1, 1, "y"))

    text, used = apply_edits("ab", [first, second])

    assert text == "axb"
    assert used == [first]


def test_diagnostic_edits_are_all_or_nothing() -> None:
    first = edit_diag("first", (0, 1, "A"))
    second = edit_diag("second", (3, 4, "D"), (0, 1, "Z"))

    text, used = apply_edits("abcd", [first, second])

    assert text == "Abcd"
    assert used == [first]


def test_diagnostics_without_edits_are_ignored() -> None:
    text, used = apply_edits("abc", [edit_diag("no-edits")])

    assert (text, used) == ("abc", [])


def test_run_format_fixes_scope_spacing() -> None:
    result = run_format(SourceFile.from_text("foo(x);\n"))

    assert result.formatted_text == "foo( x );\n"
    assert result.changed
    assert [d.rule_id for d in result.applied] == ["spacing-inside-scope"]


def test_run_format_trims_trailing_whitespace() -> None:
    result = run_format(SourceFile.from_text("int value = 0;   \n"))

    assert result.formatted_text == "int value = 0;\n"
    assert [d.rule_id for d in result.applied] == ["spacing-trailing-whitespace"]


def test_run_format_is_idempotent() -> None:
    first = run_format(SourceFile.from_text("foo(x);   \n"))
    second = run_format(SourceFile.from_text(first.formatted_text))

    assert not second.changed
    assert second.applied == []


@pytest.mark.parametrize("case", CLEAN_CASES, ids=case_id)
def test_clean_sources_are_left_alone(case) -> None:
    result = run_format(SourceFile.from_text(case.source, path=case.path))

    assert result.formatted_text == case.source
    assert not result.changed


def test_run_format_rejects_zero_passes() -> None:
    with pytest.raises(ValueError):
        run_format(SourceFile.from_text(""), max_passes=0)
