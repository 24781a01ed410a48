import pytest

from stylecheck.config import CheckerConfig, RuleOptions
from stylecheck.lint.aligned import AlignmentBudgetExceeded, AlignmentLine, detect_aligned_lines
from stylecheck.pipeline import check_text


def line(number: int, indent: int = 0, expected: int = 0, starts=(1,), gaps=(), code: bool = True) -> AlignmentLine:
    return AlignmentLine(
        number=number,
        indent=indent,
        expected_indent=expected,
        starts=tuple(starts),
        gaps=tuple(gaps),
        code=code,
    )


def test_deeper_lines_sharing_an_indent_form_a_block() -> None:
    lines = [line(1), line(2, indent=8, starts=(9,)), line(3, indent=8, starts=(9,)), line(4)]

    blocks = detect_aligned_lines(lines, min_lines=2, max_iterations=100)

    assert blocks.indented == {2, 3}
    assert blocks.lines == {2, 3}


def test_single_deeper_line_is_not_a_block() -> None:
    lines = [line(1), line(2, indent=8, starts=(9,)), line(3)]

    assert detect_aligned_lines(lines, min_lines=2, max_iterations=100).lines == frozenset()


def test_gap_ending_at_a_neighbours_token_column() -> None:
    lines = [line(1, starts=(1, 12), gaps=(12,)), line(2, starts=(1, 12)), line(3, starts=(1, 5))]

    blocks = detect_aligned_lines(lines, min_lines=2, max_iterations=100)

    assert blocks.columns == {1, 2}
    assert blocks.indented == frozenset()


def test_minimum_block_length_is_respected() -> None:
    lines = [line(1), line(2, indent=8, starts=(9,)), line(3, indent=8, starts=(9,))]

    assert detect_aligned_lines(lines, min_lines=3, max_iterations=100).lines == frozenset()


def test_budget_is_enforced() -> None:
    with pytest.raises(AlignmentBudgetExceeded) as info:
        detect_aligned_lines([line(1), line(2), line(3)], min_lines=2, max_iterations=1)

    assert (info.value.line, info.value.budget) == (2, 1)


def test_exhausted_budget_degrades_to_unparseable_region() -> None:
    config = CheckerConfig(options=RuleOptions(aligned_max_iterations=1))

    result = check_text("int a = 1;\nint b = 2;\nint c = 3;\n", config=config)

    assert [(d.rule_id, str(d.position), d.message) for d in result.diagnostics] == [
        ("unparseable-region", "2:1", "Aligned-block analysis gave up after 1 iterations"),
    ]
