"""Configuration: rule options, overrides and config file loading."""

from stylecheck.config.load import CheckerConfig, find_config, load_config, parse_config
from stylecheck.config.options import (
    DEFAULT_NAME_EXCEPTION_PATTERNS,
    DEFAULT_NOISE_WORDS,
    RuleOptions,
    RuleOverride,
)

__all__ = [
    "DEFAULT_NAME_EXCEPTION_PATTERNS",
    "DEFAULT_NOISE_WORDS",
    "CheckerConfig",
    "RuleOptions",
    "RuleOverride",
    "find_config",
    "load_config",
    "parse_config",
]
