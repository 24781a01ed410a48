"""Command line interface."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import replace
import logging
import os
from pathlib import Path
import sys
from types import MappingProxyType

from stylecheck.config import CheckerConfig, RuleOverride, find_config, load_config
from stylecheck.diagnostics import Severity
from stylecheck.errors import ConfigurationError
from stylecheck.pipeline import check_paths
from stylecheck.registry import Registry
from stylecheck.report import EXIT_ERROR, EXIT_OK, OutputFormat, exit_code, render, render_rules

logger = logging.getLogger(__name__)

_SEVERITY_CHOICES = [severity.value for severity in Severity]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stylecheck",
        description="Check C++ and CMake sources against the house style rules",
    )
    parser.add_argument("paths", nargs="*", type=Path, help="Files or directories to check")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: stylecheck.toml, .stylecheck.toml or pyproject.toml found upward from the cwd)",
    )
    parser.add_argument("--enable", action="append", default=[], metavar="ID", help="Enable a rule (repeatable)")
    parser.add_argument("--disable", action="append", default=[], metavar="ID", help="Disable a rule (repeatable)")
    parser.add_argument(
        "--severity",
        action="append",
        default=[],
        metavar="ID=LEVEL",
        help="Override a rule severity (repeatable)",
    )
    parser.add_argument(
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--fail-on",
        choices=_SEVERITY_CHOICES,
        default=None,
        help="Lowest severity that fails the run (default: from config, else warning)",
    )
    parser.add_argument("--list-rules", action="store_true", help="List rules with their effective settings and exit")
    parser.add_argument(
        "--jobs",
        type=int,
        default=os.cpu_count() or 1,
        help="Worker threads (default: CPU count)",
    )
    parser.add_argument("--fail-fast", action="store_true", help="Stop at the first file that cannot be checked")
    parser.add_argument("--fix", action="store_true", help="Apply mechanical spacing fixes in place")
    parser.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = resolve_config(args)
        registry = Registry.build(overrides=config.overrides, options=config.options)
    except ConfigurationError as exc:
        print(f"stylecheck: configuration error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if args.list_rules:
        print(render_rules(registry))
        return EXIT_OK
    if not args.paths:
        parser.error("at least one PATH is required")
    if args.jobs < 1:
        parser.error("--jobs must be at least 1")

    fail_on = Severity(args.fail_on) if args.fail_on is not None else config.fail_on
    result = check_paths(
        args.paths,
        config=config,
        registry=registry,
        jobs=args.jobs,
        fail_fast=args.fail_fast,
        fix=args.fix,
        progress=not args.no_progress and sys.stderr.isatty(),
    )
    print(render(result, OutputFormat(args.format), fail_on))
    return exit_code(result, fail_on)


def resolve_config(args: argparse.Namespace) -> CheckerConfig:
    """Load the config file, then layer the command line rule overrides on top."""
    path = args.config if args.config is not None else find_config(Path.cwd())
    config = load_config(path)
    if path is not None:
        logger.debug("Using configuration %s", path)

    overrides = dict(config.overrides)
    for rule_id in args.enable:
        overrides[rule_id] = replace(overrides.get(rule_id, RuleOverride()), enabled=True)
    for rule_id in args.disable:
        overrides[rule_id] = replace(overrides.get(rule_id, RuleOverride()), enabled=False)
    for item in args.severity:
        rule_id, separator, level = item.partition("=")
        if not separator or not rule_id:
            raise ConfigurationError(f"--severity expects ID=LEVEL, got {item!r}")
        try:
            severity = Severity(level.strip())
        except ValueError:
            raise ConfigurationError(
                f"--severity {rule_id}: invalid level {level!r} (expected one of {', '.join(_SEVERITY_CHOICES)})"
            ) from None
        overrides[rule_id.strip()] = replace(overrides.get(rule_id.strip(), RuleOverride()), severity=severity)
    return replace(config, overrides=MappingProxyType(overrides))


if __name__ == "__main__":
    raise SystemExit(main())
