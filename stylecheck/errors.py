"""Exception types raised by stylecheck."""

from __future__ import annotations


class StylecheckError(Exception):
    """Base class for stylecheck errors."""


class ConfigurationError(StylecheckError, ValueError):
    """Invalid rule id, option value or config file. Fatal before scanning."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class SourceReadError(StylecheckError):
    """A source file could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
