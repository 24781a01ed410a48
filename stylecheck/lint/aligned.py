"""Aligned-block detection shared by the indentation, width and spacing rules.

An aligned block is a run of consecutive lines formatted to line up repeated
sub-expressions. Two shapes are recognised:

- lines sharing an indent deeper than their scope implies;
- lines where a run of two or more blanks ends at a column that a
  neighbouring line also starts a token at.

Only the first shape relaxes the width limit.

Both checks are bounded by an iteration budget so pathological input cannot
stall a file.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


class AlignmentBudgetExceeded(RuntimeError):
    """The aligned-block search ran out of iterations."""

    def __init__(self, line: int, budget: int) -> None:
        self.line = line
        self.budget = budget
        super().__init__(f"aligned-block analysis exceeded {budget} iterations near line {line}")


@dataclass(frozen=True, slots=True)
class AlignmentLine:
    """What the heuristic needs to know about one line."""

    number: int
    indent: int
    expected_indent: int
    starts: tuple[int, ...]  # columns where tokens (comments included) start
    gaps: tuple[int, ...]  # columns reached after a run of two or more blanks
    code: bool  # has tokens and starts outside a multi-line token


class _Budget:
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.used = 0

    def spend(self, line: int, amount: int = 1) -> None:
        self.used += amount
        if self.used > self.limit:
            raise AlignmentBudgetExceeded(line, self.limit)


@dataclass(frozen=True, slots=True)
class AlignedBlocks:
    """Line numbers of each block shape."""

    indented: frozenset[int] = frozenset()
    columns: frozenset[int] = frozenset()

    @property
    def lines(self) -> frozenset[int]:
        return self.indented | self.columns


def detect_aligned_lines(
    lines: Sequence[AlignmentLine],
    *,
    min_lines: int,
    max_iterations: int,
) -> AlignedBlocks:
    """Find the lines that belong to an aligned block, by shape."""
    budget = _Budget(max_iterations)
    return AlignedBlocks(
        indented=frozenset(_indent_blocks(lines, min_lines=min_lines, budget=budget)),
        columns=frozenset(_column_blocks(lines, min_lines=min_lines, budget=budget)),
    )


def _indent_blocks(lines: Sequence[AlignmentLine], *, min_lines: int, budget: _Budget) -> set[int]:
    found: set[int] = set()
    run: list[AlignmentLine] = []
    for line in lines:
        budget.spend(line.number)
        deeper = line.code and line.indent > line.expected_indent
        if deeper and run and run[-1].number == line.number - 1 and run[-1].indent == line.indent:
            run.append(line)
            continue
        if len(run) >= min_lines:
            found.update(item.number for item in run)
        run = [line] if deeper else []
    if len(run) >= min_lines:
        found.update(item.number for item in run)
    return found


def _column_blocks(lines: Sequence[AlignmentLine], *, min_lines: int, budget: _Budget) -> set[int]:
    # Pairs of adjacent lines whose interior gap lines up with the other line.
    linked: list[bool] = [False] * len(lines)
    for index in range(1, len(lines)):
        above = lines[index - 1]
        below = lines[index]
        if not (above.code and below.code) or above.number != below.number - 1:
            continue
        budget.spend(below.number, len(above.gaps) + len(below.gaps) + 1)
        if _shares_column(above.gaps, below.starts) or _shares_column(below.gaps, above.starts):
            linked[index] = True

    found: set[int] = set()
    run_start = 0
    for index in range(1, len(lines) + 1):
        if index < len(lines) and linked[index]:
            continue
        if index - run_start >= min_lines and index - 1 > run_start:
            found.update(lines[item].number for item in range(run_start, index))
        run_start = index
    return found


def _shares_column(gaps: tuple[int, ...], starts: tuple[int, ...]) -> bool:
    return any(column in starts for column in gaps)
