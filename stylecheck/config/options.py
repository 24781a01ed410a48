"""Rule parameters and file classification options."""

from dataclasses import dataclass
from typing import Final

from stylecheck.diagnostics.codes import Severity

DEFAULT_NOISE_WORDS: Final[tuple[str, ...]] = (
    "get",
    "list",
    "vector",
    "map",
    "array",
    "class",
    "struct",
)

DEFAULT_NAME_EXCEPTION_PATTERNS: Final[tuple[str, ...]] = (
    r"CMAKE_[A-Z0-9_]+",
    r"[A-Za-z][A-Za-z0-9]*_(VERSION(_MAJOR|_MINOR|_PATCH|_TWEAK)?|FOUND|DIR|ROOT"
    r"|INCLUDE_DIRS?|LIBRARIES|LIBRARY|DEFINITIONS|COMPONENTS|SOURCE_DIR|BINARY_DIR)",
)


@dataclass(frozen=True, slots=True)
class RuleOverride:
    """User override for one rule; `None` keeps the default."""

    enabled: bool | None = None
    severity: Severity | None = None


@dataclass(frozen=True, slots=True)
class RuleOptions:
    """Parameters shared by the rule evaluators, validated once per run."""

    line_width: int = 80
    indent_width: int = 4
    indent_namespace_bodies: bool = True
    max_name_words: int = 5
    noise_words: tuple[str, ...] = DEFAULT_NOISE_WORDS
    name_exception_patterns: tuple[str, ...] = DEFAULT_NAME_EXCEPTION_PATTERNS
    private_namespace_names: tuple[str, ...] = ("detail", "internal", "impl")
    section_separator_lines: int = 2
    aligned_min_lines: int = 2
    aligned_max_iterations: int = 200_000
    file_time_budget: float = 10.0
    header_patterns: tuple[str, ...] = ("*.h", "*.hh", "*.hpp", "*.hxx", "*.inl")
    implementation_patterns: tuple[str, ...] = ("*.c", "*.cc", "*.cpp", "*.cxx")
    cmake_patterns: tuple[str, ...] = ("CMakeLists.txt", "*.cmake")
