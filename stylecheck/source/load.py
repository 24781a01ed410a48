"""Filesystem discovery and loading of source files."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from stylecheck.config.options import RuleOptions
from stylecheck.errors import SourceReadError
from stylecheck.source.model import FileRole, Language, SourceFile, classify_path

_SKIPPED_DIRECTORIES = frozenset({".git", ".hg", ".svn", "build", "__pycache__"})


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    """Files found under the requested paths, plus paths that do not exist."""

    paths: tuple[Path, ...]
    missing: tuple[Path, ...]


def discover_sources(paths: Iterable[str | Path], options: RuleOptions) -> DiscoveryResult:
    """Expand files and directories into a sorted, de-duplicated file list.

    Explicit file arguments are always kept; directory contents are filtered by
    the configured header/implementation/CMake patterns.
    """
    found: set[Path] = set()
    missing: list[Path] = []
    for path_like in paths:
        path = Path(path_like)
        if path.is_file():
            found.add(path)
            continue
        if not path.is_dir():
            missing.append(path)
            continue
        for candidate in path.rglob("*"):
            if not candidate.is_file():
                continue
            if _SKIPPED_DIRECTORIES.intersection(candidate.relative_to(path).parts[:-1]):
                continue
            if classify_path(candidate, options) is not None:
                found.add(candidate)
    return DiscoveryResult(paths=tuple(sorted(found)), missing=tuple(missing))


def load_source(path: str | Path, options: RuleOptions) -> SourceFile:
    """Read and decode one file; raises SourceReadError instead of OSError."""
    file_path = Path(path)
    try:
        decoded = file_path.read_bytes().decode("utf-8")
    except OSError as exc:
        raise SourceReadError(str(file_path), exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise SourceReadError(str(file_path), f"not valid UTF-8 ({exc.reason})") from exc
    text = decoded[1:] if decoded.startswith("\ufeff") else decoded
    language, role = classify_path(file_path, options) or (Language.CPP, FileRole.OTHER)
    return SourceFile(
        path=str(file_path).replace("\\", "/"),
        text=text,
        language=language,
        role=role,
    )
