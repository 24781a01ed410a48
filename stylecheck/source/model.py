"""Source file model and file classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from fnmatch import fnmatchcase
from pathlib import PurePath

from stylecheck.config.options import RuleOptions
from stylecheck.text import LineIndex


class Language(StrEnum):
    """Lexing mode for a source file."""

    CPP = "cpp"
    CMAKE = "cmake"


class FileRole(StrEnum):
    """Role of a file as declared by the configured path patterns."""

    HEADER = "header"
    IMPLEMENTATION = "implementation"
    BUILD_SCRIPT = "build-script"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SourceFile:
    """One loaded source file. Read-only for the lifetime of a run."""

    path: str
    text: str
    language: Language = Language.CPP
    role: FileRole = FileRole.OTHER
    lines: LineIndex = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", LineIndex(self.text))

    @property
    def stem(self) -> str:
        return PurePath(self.path).stem

    @property
    def is_cpp(self) -> bool:
        return self.language == Language.CPP

    @staticmethod
    def from_text(
        text: str,
        *,
        path: str = "<memory>",
        options: RuleOptions | None = None,
        language: Language | None = None,
        role: FileRole | None = None,
    ) -> "SourceFile":
        """Build a SourceFile, classifying it from its path unless told otherwise."""
        classified = classify_path(path, options or RuleOptions())
        default_language, default_role = classified or (Language.CPP, FileRole.OTHER)
        return SourceFile(
            path=path,
            text=text,
            language=language or default_language,
            role=role or default_role,
        )


def classify_path(path: str | PurePath, options: RuleOptions) -> tuple[Language, FileRole] | None:
    """Classify a path by the configured patterns; `None` when no pattern matches."""
    name = PurePath(path).name
    if _matches(name, options.cmake_patterns):
        return Language.CMAKE, FileRole.BUILD_SCRIPT
    if _matches(name, options.header_patterns):
        return Language.CPP, FileRole.HEADER
    if _matches(name, options.implementation_patterns):
        return Language.CPP, FileRole.IMPLEMENTATION
    return None


def _matches(name: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)
