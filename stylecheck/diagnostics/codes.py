"""Rule catalogue: ids, categories, default severities and descriptions."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}


@dataclass(frozen=True, slots=True)
class RuleSpec:
    id: str
    category: str
    description: str
    severity: Severity = Severity.WARNING


# -------------------------
# Malformed source
# -------------------------
MALFORMED_LITERAL: Final[RuleSpec] = RuleSpec(
    id="malformed-literal",
    category="malformed",
    description="String or character literal is not terminated.",
    severity=Severity.ERROR,
)

MALFORMED_COMMENT: Final[RuleSpec] = RuleSpec(
    id="malformed-comment",
    category="malformed",
    description="Block comment is not terminated.",
    severity=Severity.ERROR,
)

MALFORMED_DIRECTIVE: Final[RuleSpec] = RuleSpec(
    id="malformed-directive",
    category="malformed",
    description="Preprocessor directive ends with a line continuation at end of file.",
    severity=Severity.ERROR,
)

UNPARSEABLE_REGION: Final[RuleSpec] = RuleSpec(
    id="unparseable-region",
    category="malformed",
    description="Region could not be analysed (unmatched closer or exhausted analysis budget).",
    severity=Severity.ERROR,
)

UNCLOSED_SCOPE: Final[RuleSpec] = RuleSpec(
    id="unclosed-scope",
    category="malformed",
    description="Bracket or brace is never closed.",
    severity=Severity.ERROR,
)

# -------------------------
# Spacing
# -------------------------
SPACING_INSIDE_SCOPE: Final[RuleSpec] = RuleSpec(
    id="spacing-inside-scope",
    category="spacing",
    description="Non-empty brackets, parentheses and braces have one space inside each side.",
)

SPACING_EMPTY_SCOPE: Final[RuleSpec] = RuleSpec(
    id="spacing-empty-scope",
    category="spacing",
    description="Empty pairs `()`, `[]`, `{}` and `<>` have no space inside.",
)

SPACING_MEMBER_ACCESS: Final[RuleSpec] = RuleSpec(
    id="spacing-member-access",
    category="spacing",
    description="No space around `::`, `.` and `->`.",
)

SPACING_CALL_PAREN: Final[RuleSpec] = RuleSpec(
    id="spacing-call-paren",
    category="spacing",
    description="No space between a callable, flow-control keyword or command and its `(`.",
)

SPACING_SUBSCRIPT: Final[RuleSpec] = RuleSpec(
    id="spacing-subscript",
    category="spacing",
    description="No space between a container expression and the following `[`.",
)

SPACING_SEMICOLON: Final[RuleSpec] = RuleSpec(
    id="spacing-semicolon",
    category="spacing",
    description="No space before `;` except after a multi-line `<<` streaming expression.",
)

SPACING_TEMPLATE_ANGLE: Final[RuleSpec] = RuleSpec(
    id="spacing-template-angle",
    category="spacing",
    description="No space before or inside template angle brackets.",
)

SPACING_UNARY: Final[RuleSpec] = RuleSpec(
    id="spacing-unary",
    category="spacing",
    description="No space after unary operators.",
)

SPACING_COMMA: Final[RuleSpec] = RuleSpec(
    id="spacing-comma",
    category="spacing",
    description="No space before `,` and one space after it.",
)

SPACING_BETWEEN_TOKENS: Final[RuleSpec] = RuleSpec(
    id="spacing-between-tokens",
    category="spacing",
    description="Exactly one space between adjacent tokens.",
)

SPACING_TRAILING_WHITESPACE: Final[RuleSpec] = RuleSpec(
    id="spacing-trailing-whitespace",
    category="spacing",
    description="Lines do not end with whitespace.",
)

# -------------------------
# Indentation
# -------------------------
INDENT_MULTIPLE: Final[RuleSpec] = RuleSpec(
    id="indent-multiple",
    category="indentation",
    description="Indentation is a multiple of the indent width.",
)

INDENT_DEPTH: Final[RuleSpec] = RuleSpec(
    id="indent-depth",
    category="indentation",
    description="Indentation matches the scope depth at the start of the line.",
)

INDENT_CLOSER: Final[RuleSpec] = RuleSpec(
    id="indent-closer",
    category="indentation",
    description="A line starting with a closer is indented like the line of its opener.",
)

# -------------------------
# Line width
# -------------------------
LINE_TOO_LONG: Final[RuleSpec] = RuleSpec(
    id="line-too-long",
    category="line-width",
    description="Lines fit within the configured width.",
)

# -------------------------
# Naming
# -------------------------
NAMING_CASE: Final[RuleSpec] = RuleSpec(
    id="naming-case",
    category="naming",
    description="Declared names use lower_snake_case.",
)

NAMING_TEMPLATE_PARAMETER: Final[RuleSpec] = RuleSpec(
    id="naming-template-parameter",
    category="naming",
    description="Template parameters use PascalCase.",
)

NAMING_WORD_COUNT: Final[RuleSpec] = RuleSpec(
    id="naming-word-count",
    category="naming",
    description="Names do not exceed the configured number of words.",
)

NAMING_NOISE_WORD: Final[RuleSpec] = RuleSpec(
    id="naming-noise-word",
    category="naming",
    description="Names do not contain words restating their structural role.",
)

# -------------------------
# Include order
# -------------------------
INCLUDE_GROUP_ORDER: Final[RuleSpec] = RuleSpec(
    id="include-group-order",
    category="include-order",
    description="Includes follow the own-header, local, project, third-party, standard group order.",
)

INCLUDE_ALPHABETICAL: Final[RuleSpec] = RuleSpec(
    id="include-alphabetical",
    category="include-order",
    description="Includes inside a group are sorted alphabetically.",
)

INCLUDE_SEPARATOR: Final[RuleSpec] = RuleSpec(
    id="include-separator",
    category="include-order",
    description="Include groups are separated by exactly one blank line.",
)

# -------------------------
# Structural organization
# -------------------------
STRUCTURE_INVALID_TRANSITION: Final[RuleSpec] = RuleSpec(
    id="structure-invalid-transition",
    category="structure",
    description="File sections appear in guard, includes, private namespaces, namespaces order.",
)

STRUCTURE_SECTION_SEPARATOR: Final[RuleSpec] = RuleSpec(
    id="structure-section-separator",
    category="structure",
    description="File sections are separated by the configured number of blank lines.",
)

STRUCTURE_MISSING_GUARD: Final[RuleSpec] = RuleSpec(
    id="structure-missing-guard",
    category="structure",
    description="Header files open with an include guard and close it at the end.",
    severity=Severity.ERROR,
)


DEFAULT_RULES: Final[tuple[RuleSpec, ...]] = (
    MALFORMED_LITERAL,
    MALFORMED_COMMENT,
    MALFORMED_DIRECTIVE,
    UNPARSEABLE_REGION,
    UNCLOSED_SCOPE,
    SPACING_INSIDE_SCOPE,
    SPACING_EMPTY_SCOPE,
    SPACING_MEMBER_ACCESS,
    SPACING_CALL_PAREN,
    SPACING_SUBSCRIPT,
    SPACING_SEMICOLON,
    SPACING_TEMPLATE_ANGLE,
    SPACING_UNARY,
    SPACING_COMMA,
    SPACING_BETWEEN_TOKENS,
    SPACING_TRAILING_WHITESPACE,
    INDENT_MULTIPLE,
    INDENT_DEPTH,
    INDENT_CLOSER,
    LINE_TOO_LONG,
    NAMING_CASE,
    NAMING_TEMPLATE_PARAMETER,
    NAMING_WORD_COUNT,
    NAMING_NOISE_WORD,
    INCLUDE_GROUP_ORDER,
    INCLUDE_ALPHABETICAL,
    INCLUDE_SEPARATOR,
    STRUCTURE_INVALID_TRANSITION,
    STRUCTURE_SECTION_SEPARATOR,
    STRUCTURE_MISSING_GUARD,
)
