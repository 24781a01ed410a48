"""Loading and validation of TOML configuration files."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
import logging
from pathlib import Path
import tomllib
from types import MappingProxyType
from typing import Any, Final

from stylecheck.config.options import RuleOptions, RuleOverride
from stylecheck.diagnostics.codes import Severity
from stylecheck.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES: Final[tuple[str, ...]] = ("stylecheck.toml", ".stylecheck.toml")
PYPROJECT_FILE_NAME: Final[str] = "pyproject.toml"

_TOP_LEVEL_KEYS: Final[frozenset[str]] = frozenset({"rules", "options", "fail_on"})
_RULE_KEYS: Final[frozenset[str]] = frozenset({"enabled", "severity"})


@dataclass(frozen=True, slots=True)
class CheckerConfig:
    """Validated configuration: rule overrides, rule options and failure threshold."""

    overrides: Mapping[str, RuleOverride] = field(default_factory=lambda: MappingProxyType({}))
    options: RuleOptions = field(default_factory=RuleOptions)
    fail_on: Severity = Severity.WARNING
    source: str | None = None


def find_config(start: Path) -> Path | None:
    """Search `start` and its parents for a config file.

    A `pyproject.toml` only counts when it has a `[tool.stylecheck]` table.
    """
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
        pyproject = candidate_dir / PYPROJECT_FILE_NAME
        if pyproject.is_file() and _pyproject_has_section(pyproject):
            return pyproject
    return None


def load_config(path: str | Path | None) -> CheckerConfig:
    """Load a config file; `None` yields the defaults."""
    if path is None:
        return CheckerConfig()
    config_path = Path(path)
    try:
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"cannot read config: {exc.strerror or exc}", source=str(config_path)) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"malformed TOML: {exc}", source=str(config_path)) from exc

    if config_path.name == PYPROJECT_FILE_NAME:
        raw = raw.get("tool", {}).get("stylecheck", {})
    logger.debug("Loaded configuration from %s", config_path)
    return parse_config(raw, source=str(config_path))


def parse_config(data: Mapping[str, Any], *, source: str | None = None) -> CheckerConfig:
    """Validate an already-decoded config mapping."""
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigurationError(f"unknown top-level keys: {', '.join(unknown)}", source=source)

    fail_on = _parse_severity(data.get("fail_on", Severity.WARNING.value), where="fail_on", source=source)
    overrides = _parse_rules(data.get("rules", {}), source=source)
    options = _parse_options(data.get("options", {}), source=source)
    return CheckerConfig(
        overrides=MappingProxyType(overrides),
        options=options,
        fail_on=fail_on,
        source=source,
    )


def _parse_rules(data: object, *, source: str | None) -> dict[str, RuleOverride]:
    if not isinstance(data, Mapping):
        raise ConfigurationError("`rules` must be a table", source=source)
    overrides: dict[str, RuleOverride] = {}
    for rule_id, entry in data.items():
        if isinstance(entry, bool):
            overrides[rule_id] = RuleOverride(enabled=entry)
            continue
        if not isinstance(entry, Mapping):
            raise ConfigurationError(f"rule `{rule_id}` must be a table or a boolean", source=source)
        unknown = sorted(set(entry) - _RULE_KEYS)
        if unknown:
            raise ConfigurationError(f"rule `{rule_id}` has unknown keys: {', '.join(unknown)}", source=source)
        enabled = entry.get("enabled")
        if enabled is not None and not isinstance(enabled, bool):
            raise ConfigurationError(f"rule `{rule_id}`: `enabled` must be a boolean", source=source)
        severity = entry.get("severity")
        overrides[rule_id] = RuleOverride(
            enabled=enabled,
            severity=None if severity is None else _parse_severity(severity, where=rule_id, source=source),
        )
    return overrides


def _parse_options(data: object, *, source: str | None) -> RuleOptions:
    if not isinstance(data, Mapping):
        raise ConfigurationError("`options` must be a table", source=source)
    defaults = RuleOptions()
    known = {item.name for item in fields(RuleOptions)}
    values: dict[str, object] = {}
    for name, value in data.items():
        if name not in known:
            raise ConfigurationError(f"unknown option `{name}`", source=source)
        values[name] = _coerce_option(name, value, getattr(defaults, name), source=source)
    return RuleOptions(**values)  # type: ignore[arg-type]


def _coerce_option(name: str, value: object, default: object, *, source: str | None) -> object:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigurationError(f"option `{name}` must be a boolean", source=source)
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"option `{name}` must be an integer", source=source)
        return value
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"option `{name}` must be a number", source=source)
        return float(value)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"option `{name}` must be a list of strings", source=source)
    return tuple(value)


def _parse_severity(value: object, *, where: str, source: str | None) -> Severity:
    try:
        return Severity(value)
    except ValueError:
        choices = ", ".join(severity.value for severity in Severity)
        raise ConfigurationError(f"{where}: invalid severity {value!r} (expected one of {choices})", source=source) from None


def _pyproject_has_section(path: Path) -> bool:
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        logger.debug("Ignoring unreadable %s during config discovery", path)
        return False
    return isinstance(raw.get("tool", {}).get("stylecheck"), Mapping)
