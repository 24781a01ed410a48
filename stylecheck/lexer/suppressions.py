"""Inline suppression markers found in comments."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import re
from types import MappingProxyType
from typing import Final, Literal, TypeAlias

ALL_RULES: Final[str] = "all"

_MARKER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"stylecheck:\s*(?P<action>ignore|disable|enable)\[(?P<rules>[^\]]*)\]"
)

MarkerAction: TypeAlias = Literal["ignore", "disable", "enable"]


@dataclass(frozen=True, slots=True)
class SuppressionMarker:
    """One marker as written in a comment."""

    action: MarkerAction
    rules: frozenset[str]
    line: int
    standalone: bool  # comment is the first thing on its line


@dataclass(frozen=True, slots=True)
class SuppressedRange:
    rules: frozenset[str]
    start_line: int
    end_line: int | None  # None runs to end of file

    def covers(self, rule_id: str, line: int) -> bool:
        if line < self.start_line or (self.end_line is not None and line > self.end_line):
            return False
        return rule_id in self.rules or ALL_RULES in self.rules


@dataclass(frozen=True, slots=True)
class Suppressions:
    """Per-line and range suppressions for one file."""

    lines: Mapping[int, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    ranges: tuple[SuppressedRange, ...] = ()

    def is_suppressed(self, rule_id: str, line: int) -> bool:
        rules = self.lines.get(line)
        if rules is not None and (rule_id in rules or ALL_RULES in rules):
            return True
        return any(suppressed.covers(rule_id, line) for suppressed in self.ranges)

    def __bool__(self) -> bool:
        return bool(self.lines) or bool(self.ranges)


def parse_markers(comment_text: str, *, line: int, standalone: bool) -> list[SuppressionMarker]:
    """Find markers inside one comment (or directive) text starting on `line`.

    Markers on later lines of a multi-line comment are always standalone.
    """
    markers: list[SuppressionMarker] = []
    for match in _MARKER_PATTERN.finditer(comment_text):
        rules = frozenset(part.strip() for part in match.group("rules").split(",") if part.strip())
        if not rules:
            continue
        markers.append(
            SuppressionMarker(
                action=match.group("action"),  # type: ignore[arg-type]
                rules=rules,
                line=line + comment_text.count("\n", 0, match.start()),
                standalone=standalone or "\n" in comment_text[: match.start()],
            )
        )
    return markers


def build_suppressions(markers: Iterable[SuppressionMarker]) -> Suppressions:
    """Resolve markers into line sets and ranges.

    `ignore` covers its own line, and the next line too when the comment stands
    alone. `disable` opens a range that the next `enable` naming the same rule
    closes; unclosed ranges run to the end of the file.
    """
    lines: dict[int, set[str]] = {}
    open_ranges: dict[str, int] = {}
    ranges: list[SuppressedRange] = []

    for marker in sorted(markers, key=lambda item: item.line):
        match marker.action:
            case "ignore":
                lines.setdefault(marker.line, set()).update(marker.rules)
                if marker.standalone:
                    lines.setdefault(marker.line + 1, set()).update(marker.rules)
            case "disable":
                for rule_id in marker.rules:
                    open_ranges.setdefault(rule_id, marker.line)
            case "enable":
                for rule_id in marker.rules:
                    closing = [rule_id] if rule_id != ALL_RULES else list(open_ranges)
                    for open_rule in closing:
                        start = open_ranges.pop(open_rule, None)
                        if start is not None:
                            ranges.append(SuppressedRange(frozenset({open_rule}), start, marker.line))

    for rule_id, start in open_ranges.items():
        ranges.append(SuppressedRange(frozenset({rule_id}), start, None))

    return Suppressions(
        lines=MappingProxyType({line: frozenset(rules) for line, rules in lines.items()}),
        ranges=tuple(sorted(ranges, key=lambda item: (item.start_line, sorted(item.rules)))),
    )
