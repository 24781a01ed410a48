"""Lexer."""

from stylecheck.lexer.lexer import Lexer, LexResult, dump_tokens, token_text, tokenize
from stylecheck.lexer.scope import ScopeFrame, ScopeStack
from stylecheck.lexer.suppressions import (
    ALL_RULES,
    SuppressedRange,
    SuppressionMarker,
    Suppressions,
    build_suppressions,
    parse_markers,
)
from stylecheck.lexer.tokens import Token, TokenFlags, TokenKind

__all__ = [
    "ALL_RULES",
    "LexResult",
    "Lexer",
    "ScopeFrame",
    "ScopeStack",
    "SuppressedRange",
    "SuppressionMarker",
    "Suppressions",
    "Token",
    "TokenFlags",
    "TokenKind",
    "build_suppressions",
    "dump_tokens",
    "parse_markers",
    "token_text",
    "tokenize",
]
