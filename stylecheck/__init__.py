"""Style-conformance checker for C++ and CMake sources."""

from stylecheck.config import CheckerConfig, RuleOptions, RuleOverride, load_config
from stylecheck.diagnostics import DEFAULT_RULES, Diagnostic, RuleSpec, Severity
from stylecheck.errors import ConfigurationError, SourceReadError, StylecheckError
from stylecheck.lexer import tokenize
from stylecheck.pipeline import FileError, FileResult, RunResult, check_paths, check_text
from stylecheck.registry import Registry
from stylecheck.source import FileRole, Language, SourceFile

__all__ = [
    "DEFAULT_RULES",
    "CheckerConfig",
    "ConfigurationError",
    "Diagnostic",
    "FileError",
    "FileResult",
    "FileRole",
    "Language",
    "Registry",
    "RuleOptions",
    "RuleOverride",
    "RuleSpec",
    "RunResult",
    "Severity",
    "SourceFile",
    "SourceReadError",
    "StylecheckError",
    "check_paths",
    "check_text",
    "tokenize",
]
