"""Immutable rule registry built once per run."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
import re
from types import MappingProxyType

from stylecheck.config.options import RuleOptions, RuleOverride
from stylecheck.diagnostics.codes import DEFAULT_RULES, RuleSpec, Severity
from stylecheck.diagnostics.diagnostic import Diagnostic, TextEdit
from stylecheck.errors import ConfigurationError
from stylecheck.text import Position


@dataclass(frozen=True, slots=True)
class RuleSetting:
    rule: RuleSpec
    enabled: bool
    severity: Severity

    @property
    def id(self) -> str:
        return self.rule.id


@dataclass(frozen=True, slots=True)
class Registry:
    """Enabled rules, their severities and the validated rule options.

    Shared read-only by every evaluator and every file of a run.
    """

    settings: Mapping[str, RuleSetting]
    options: RuleOptions
    name_exceptions: tuple[re.Pattern[str], ...]

    @staticmethod
    def build(
        defaults: Iterable[RuleSpec] = DEFAULT_RULES,
        overrides: Mapping[str, RuleOverride] | None = None,
        options: RuleOptions | None = None,
    ) -> "Registry":
        """Apply overrides by id to the default catalogue and validate options."""
        resolved_options = options if options is not None else RuleOptions()
        # Name words are compared lower-cased.
        resolved_options = replace(
            resolved_options, noise_words=tuple(word.lower() for word in resolved_options.noise_words)
        )
        settings: dict[str, RuleSetting] = {}
        for rule in defaults:
            if rule.id in settings:
                raise ConfigurationError(f"Duplicate rule id `{rule.id}` in rule catalogue")
            settings[rule.id] = RuleSetting(rule=rule, enabled=True, severity=rule.severity)

        for rule_id, override in sorted((overrides or {}).items()):
            current = settings.get(rule_id)
            if current is None:
                raise ConfigurationError(f"Unknown rule id `{rule_id}`")
            settings[rule_id] = RuleSetting(
                rule=current.rule,
                enabled=current.enabled if override.enabled is None else override.enabled,
                severity=current.severity if override.severity is None else override.severity,
            )

        return Registry(
            settings=MappingProxyType(settings),
            options=resolved_options,
            name_exceptions=validate_options(resolved_options),
        )

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self.settings

    def is_enabled(self, rule_id: str) -> bool:
        setting = self.settings.get(rule_id)
        return setting is not None and setting.enabled

    def severity(self, rule_id: str) -> Severity:
        return self.settings[rule_id].severity

    def any_enabled(self, rules: Iterable[RuleSpec]) -> bool:
        return any(self.is_enabled(rule.id) for rule in rules)

    def enabled_rules(self) -> tuple[RuleSetting, ...]:
        return tuple(setting for setting in self.settings.values() if setting.enabled)

    def diagnostic(
        self,
        rule: RuleSpec,
        message: str,
        position: Position,
        *,
        fix: str | None = None,
        edits: tuple[TextEdit, ...] = (),
    ) -> Diagnostic:
        """Create a diagnostic stamped with the configured severity of `rule`."""
        setting = self.settings.get(rule.id)
        return Diagnostic(
            rule_id=rule.id,
            message=message,
            position=position,
            severity=setting.severity if setting is not None else rule.severity,
            fix=fix,
            edits=edits,
        )

    def is_name_exception(self, name: str) -> bool:
        return any(pattern.fullmatch(name) for pattern in self.name_exceptions)


def validate_options(options: RuleOptions) -> tuple[re.Pattern[str], ...]:
    """Check option bounds and compile the naming exception patterns."""
    for name in ("line_width", "indent_width", "max_name_words", "aligned_min_lines", "aligned_max_iterations"):
        value = getattr(options, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"Option `{name}` must be a positive integer, got {value!r}")
    if options.section_separator_lines < 0:
        raise ConfigurationError("Option `section_separator_lines` cannot be negative")
    if options.file_time_budget <= 0:
        raise ConfigurationError("Option `file_time_budget` must be positive")

    compiled: list[re.Pattern[str]] = []
    for pattern in options.name_exception_patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigurationError(f"Invalid name exception pattern `{pattern}`: {exc}") from exc
    return tuple(compiled)
