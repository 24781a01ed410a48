"""Result carriers and lazy pipeline entrypoint exports."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import threading
from typing import TYPE_CHECKING

from stylecheck.pipeline.result import FileError, FileErrorKind, FileResult, RunResult
from stylecheck.pipeline.results import FormatRunResult, LintRunResult

if TYPE_CHECKING:
    from stylecheck.config import CheckerConfig
    from stylecheck.registry import Registry
    from stylecheck.source import FileRole, Language


def check_text(
    text: str,
    *,
    path: str = "<memory>",
    config: CheckerConfig | None = None,
    registry: Registry | None = None,
    language: Language | None = None,
    role: FileRole | None = None,
) -> FileResult:
    from stylecheck.pipeline.entrypoints import check_text as _check_text

    return _check_text(text, path=path, config=config, registry=registry, language=language, role=role)


def check_paths(
    paths: Iterable[str | Path],
    *,
    config: CheckerConfig | None = None,
    registry: Registry | None = None,
    jobs: int = 1,
    fail_fast: bool = False,
    fix: bool = False,
    cancel: threading.Event | None = None,
    abort_in_flight: bool = False,
    progress: bool = False,
) -> RunResult:
    from stylecheck.pipeline.entrypoints import check_paths as _check_paths

    return _check_paths(
        paths,
        config=config,
        registry=registry,
        jobs=jobs,
        fail_fast=fail_fast,
        fix=fix,
        cancel=cancel,
        abort_in_flight=abort_in_flight,
        progress=progress,
    )


__all__ = [
    "FileError",
    "FileErrorKind",
    "FileResult",
    "FormatRunResult",
    "LintRunResult",
    "RunResult",
    "check_paths",
    "check_text",
]
