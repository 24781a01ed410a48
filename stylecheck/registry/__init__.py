"""Rule registry."""

from stylecheck.config.options import RuleOverride
from stylecheck.registry.registry import Registry, RuleSetting, validate_options

__all__ = [
    "Registry",
    "RuleOverride",
    "RuleSetting",
    "validate_options",
]
