"""Per-file and per-run result carriers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from stylecheck.diagnostics import Diagnostic, Severity, count_by_severity

FileErrorKind: TypeAlias = Literal["read", "write", "internal"]


@dataclass(frozen=True, slots=True)
class FileError:
    """A file that could not be checked. Reported, never raised."""

    path: str
    kind: FileErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class FileResult:
    path: str
    diagnostics: list[Diagnostic]
    fixed_text: str | None = None  # set when `--fix` changed the file
    fixes_applied: int = 0
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class RunResult:
    """Everything a run produced, sorted by path.

    `cancelled` is set when dispatch stopped early; `skipped` lists the files
    that were never checked (or stopped mid-flight) because of it.
    """

    files: tuple[FileResult, ...] = ()
    errors: tuple[FileError, ...] = ()
    cancelled: bool = False
    skipped: tuple[str, ...] = ()

    @property
    def diagnostics(self) -> list[tuple[str, Diagnostic]]:
        return [(result.path, diagnostic) for result in self.files for diagnostic in result.diagnostics]

    @property
    def counts(self) -> dict[Severity, int]:
        return count_by_severity(diagnostic for result in self.files for diagnostic in result.diagnostics)

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def has_file_errors(self) -> bool:
        return bool(self.errors)
