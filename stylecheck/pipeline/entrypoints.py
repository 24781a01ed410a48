"""Run entrypoints: one text, or every source file under a set of paths."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import replace
import logging
from pathlib import Path
import threading

from tqdm import tqdm

from stylecheck.config import CheckerConfig
from stylecheck.errors import SourceReadError
from stylecheck.format import run_format
from stylecheck.lint import run_lint
from stylecheck.pipeline.result import FileError, FileResult, RunResult
from stylecheck.registry import Registry
from stylecheck.source import FileRole, Language, SourceFile, discover_sources, load_source

logger = logging.getLogger(__name__)


def check_text(
    text: str,
    *,
    path: str = "<memory>",
    config: CheckerConfig | None = None,
    registry: Registry | None = None,
    language: Language | None = None,
    role: FileRole | None = None,
) -> FileResult:
    """Check one in-memory text. The path only drives language/role classification."""
    resolved_config = config if config is not None else CheckerConfig()
    resolved_registry = _resolve_registry(resolved_config, registry)
    source = SourceFile.from_text(
        text,
        path=path,
        options=resolved_registry.options,
        language=language,
        role=role,
    )
    lint = run_lint(source, resolved_registry)
    return FileResult(path=source.path, diagnostics=lint.diagnostics, timed_out=lint.timed_out)


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
    """Discover, load and check files on a worker pool.

    Configuration problems raise `ConfigurationError` before any file is read.
    Unreadable files become `FileError` records; with `fail_fast` the first
    one stops the run before scanning starts. Setting `cancel` stops dispatch
    of new files, and `abort_in_flight` also stops files already running.
    """
    if jobs < 1:
        raise ValueError("jobs must be at least 1")
    resolved_config = config if config is not None else CheckerConfig()
    resolved_registry = _resolve_registry(resolved_config, registry)
    options = resolved_registry.options
    event = cancel if cancel is not None else threading.Event()

    discovery = discover_sources(paths, options)
    errors: list[FileError] = []
    for missing in discovery.missing:
        logger.error("%s: no such file or directory", missing)
        errors.append(FileError(path=str(missing), kind="read", message="no such file or directory"))

    sources: list[SourceFile] = []
    for path in discovery.paths:
        try:
            sources.append(load_source(path, options))
        except SourceReadError as exc:
            logger.error("%s", exc)
            errors.append(FileError(path=exc.path, kind="read", message=exc.reason))
    logger.debug("Loaded %d files (%d unreadable)", len(sources), len(errors))

    if fail_fast and errors:
        event.set()

    files, scan_errors, skipped = _scan(
        sources,
        resolved_registry,
        jobs=jobs,
        fix=fix,
        fail_fast=fail_fast,
        cancel=event,
        abort_in_flight=abort_in_flight,
        progress=progress,
    )
    errors.extend(scan_errors)
    return RunResult(
        files=tuple(sorted(files, key=lambda item: item.path)),
        errors=tuple(sorted(errors, key=lambda item: (item.path, item.kind))),
        cancelled=event.is_set(),
        skipped=tuple(sorted(skipped)),
    )


def _scan(
    sources: list[SourceFile],
    registry: Registry,
    *,
    jobs: int,
    fix: bool,
    fail_fast: bool,
    cancel: threading.Event,
    abort_in_flight: bool,
    progress: bool,
) -> tuple[list[FileResult], list[FileError], list[str]]:
    files: list[FileResult] = []
    errors: list[FileError] = []
    skipped: list[str] = []
    if cancel.is_set():
        return files, errors, [source.path for source in sources]

    worker_cancel = cancel if abort_in_flight else None
    pending: dict[Future[FileResult | None], SourceFile] = {}
    recorded: set[Future[FileResult | None]] = set()

    def record(future: Future[FileResult | None]) -> None:
        recorded.add(future)
        source = pending[future]
        if future.cancelled():
            skipped.append(source.path)
            return
        exc = future.exception()
        if exc is not None:
            logger.error("%s: internal error", source.path, exc_info=exc)
            errors.append(FileError(path=source.path, kind="internal", message=f"{type(exc).__name__}: {exc}"))
            if fail_fast:
                _stop(cancel, pending)
            return
        result = future.result()
        if result is None:
            skipped.append(source.path)
            return
        if result.fixed_text is not None:
            error = _write_fixed(result.path, result.fixed_text, result.fixes_applied)
            if error is not None:
                errors.append(error)
        files.append(result)

    bar = tqdm(total=len(sources), desc="stylecheck", unit="file", disable=not progress)
    executor = ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="stylecheck")
    try:
        for source in sources:
            pending[executor.submit(_check_source, source, registry, fix=fix, cancel=worker_cancel)] = source
        for future in as_completed(pending):
            record(future)
            bar.update(1)
            if cancel.is_set():
                _stop(cancel, pending)
    except KeyboardInterrupt:
        logger.warning("Interrupted; keeping results of completed files")
        _stop(cancel, pending)
        executor.shutdown(wait=True, cancel_futures=True)
        for future in pending:
            if future not in recorded:
                record(future)
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
        bar.close()
    return files, errors, skipped


def _check_source(
    source: SourceFile,
    registry: Registry,
    *,
    fix: bool,
    cancel: threading.Event | None,
) -> FileResult | None:
    """Worker body: CPU-only, never touches the filesystem. `None` means cancelled."""
    fixed_text: str | None = None
    fixes_applied = 0
    checked = source
    if fix:
        formatted = run_format(source, registry)
        if formatted.changed:
            fixed_text = formatted.formatted_text
            fixes_applied = len(formatted.applied)
            checked = replace(source, text=formatted.formatted_text)
    lint = run_lint(checked, registry, cancel=cancel)
    if lint.cancelled:
        return None
    return FileResult(
        path=source.path,
        diagnostics=lint.diagnostics,
        fixed_text=fixed_text,
        fixes_applied=fixes_applied,
        timed_out=lint.timed_out,
    )


def _write_fixed(path: str, text: str, count: int) -> FileError | None:
    try:
        Path(path).write_text(text, encoding="utf-8", newline="")
    except OSError as exc:
        logger.error("%s: cannot write fixes: %s", path, exc)
        return FileError(path=path, kind="write", message=exc.strerror or str(exc))
    logger.info("%s: applied %d fixes", path, count)
    return None


def _stop(cancel: threading.Event, pending: dict[Future[FileResult | None], SourceFile]) -> None:
    cancel.set()
    for future in pending:
        future.cancel()


def _resolve_registry(config: CheckerConfig, registry: Registry | None) -> Registry:
    if registry is not None:
        return registry
    return Registry.build(overrides=config.overrides, options=config.options)
