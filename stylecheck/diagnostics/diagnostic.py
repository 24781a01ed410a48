"""Diagnostics core types."""

from dataclasses import dataclass, field

from stylecheck.diagnostics.codes import Severity
from stylecheck.text import Position, TextRange


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Mechanical replacement of one source range."""

    range: TextRange
    replacement: str


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One reported violation.

    Equality and hashing use (rule_id, message, position) only, which is what
    deduplication collapses on.
    """

    rule_id: str
    message: str
    position: Position
    severity: Severity = field(default=Severity.WARNING, compare=False)
    fix: str | None = field(default=None, compare=False)
    edits: tuple[TextEdit, ...] = field(default=(), compare=False)

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    def sort_key(self) -> tuple[int, int, str, str]:
        return (self.position.line, self.position.column, self.rule_id, self.message)
