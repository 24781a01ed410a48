"""Lexer tokens."""

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Final

from stylecheck.text import Position, TextRange


class TokenKind(IntEnum):
    # -------------------------
    # Special / sentinels
    # -------------------------
    EOF = 1

    # -------------------------
    # Trivia tokens (emitted by the lexer)
    # -------------------------
    WHITESPACE = 10
    NEWLINE = 11
    COMMENT = 12

    # -------------------------
    # Significant tokens
    # -------------------------
    IDENTIFIER = 20  # C++ identifiers and keywords, CMake unquoted arguments
    NUMBER = 21
    STRING = 22  # string/char literals, CMake quoted and bracket arguments
    DIRECTIVE = 23  # preprocessor directive line, CMake command name
    PUNCT = 24

    # -------------------------
    # Recovery
    # -------------------------
    MALFORMED = 30  # unterminated literal/comment/directive, kept verbatim

    @property
    def is_trivia(self) -> bool:
        return self in (
            TokenKind.WHITESPACE,
            TokenKind.NEWLINE,
            TokenKind.COMMENT,
        )


class TokenFlags(IntFlag):
    """Token metadata flags."""

    NONE = 0
    PRECEDING_LINE_BREAK = 1 << 0  # first significant token on its line
    KEYWORD = 1 << 1
    UNARY = 1 << 2
    TEMPLATE_OPEN = 1 << 3
    TEMPLATE_CLOSE = 1 << 4
    HAS_ESCAPE = 1 << 5


OPENERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}
CLOSERS: Final[dict[str, str]] = {closer: opener for opener, closer in OPENERS.items()}


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexed token (trivia or significant).

    `depth` is the number of open scopes before the token; closers report the
    depth after popping, so an opener and its closer share the same depth.
    """

    kind: TokenKind
    text: str
    start: Position
    end: Position
    range: TextRange
    flags: TokenFlags = TokenFlags.NONE
    depth: int = 0

    def has_flag(self, flag: TokenFlags) -> bool:
        return bool(self.flags & flag)

    def has_preceding_line_break(self) -> bool:
        return self.has_flag(TokenFlags.PRECEDING_LINE_BREAK)

    def is_punct(self, *texts: str) -> bool:
        return self.kind == TokenKind.PUNCT and (not texts or self.text in texts)

    @property
    def is_keyword(self) -> bool:
        return self.has_flag(TokenFlags.KEYWORD)

    @property
    def is_template_open(self) -> bool:
        return self.has_flag(TokenFlags.TEMPLATE_OPEN)

    @property
    def is_template_close(self) -> bool:
        return self.has_flag(TokenFlags.TEMPLATE_CLOSE)

    @property
    def is_opener(self) -> bool:
        return self.kind == TokenKind.PUNCT and (self.text in OPENERS or self.is_template_open)

    @property
    def is_closer(self) -> bool:
        return self.kind == TokenKind.PUNCT and (self.text in CLOSERS or self.is_template_close)

    @property
    def is_word(self) -> bool:
        """Identifier that is not a keyword."""
        return self.kind == TokenKind.IDENTIFIER and not self.is_keyword


CPP_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "alignas",
        "alignof",
        "and",
        "and_eq",
        "asm",
        "auto",
        "bitand",
        "bitor",
        "bool",
        "break",
        "case",
        "catch",
        "char",
        "char8_t",
        "char16_t",
        "char32_t",
        "class",
        "co_await",
        "co_return",
        "co_yield",
        "compl",
        "concept",
        "const",
        "consteval",
        "constexpr",
        "constinit",
        "const_cast",
        "continue",
        "decltype",
        "default",
        "delete",
        "do",
        "double",
        "dynamic_cast",
        "else",
        "enum",
        "explicit",
        "export",
        "extern",
        "false",
        "final",
        "float",
        "for",
        "friend",
        "goto",
        "if",
        "inline",
        "int",
        "long",
        "mutable",
        "namespace",
        "new",
        "noexcept",
        "not",
        "not_eq",
        "nullptr",
        "operator",
        "or",
        "or_eq",
        "override",
        "private",
        "protected",
        "public",
        "register",
        "reinterpret_cast",
        "requires",
        "return",
        "short",
        "signed",
        "sizeof",
        "static",
        "static_assert",
        "static_cast",
        "struct",
        "switch",
        "template",
        "this",
        "thread_local",
        "throw",
        "true",
        "try",
        "typedef",
        "typeid",
        "typename",
        "union",
        "unsigned",
        "using",
        "virtual",
        "void",
        "volatile",
        "wchar_t",
        "while",
        "xor",
        "xor_eq",
    }
)

# Keywords after which a `+`/`-` starts an expression.
UNARY_CONTEXT_KEYWORDS: Final[frozenset[str]] = frozenset(
    {"return", "case", "throw", "co_return", "co_yield", "co_await", "else", "do", "and", "or", "not"}
)
