"""Lexer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from stylecheck.diagnostics import Diagnostic
from stylecheck.diagnostics.codes import (
    MALFORMED_COMMENT,
    MALFORMED_DIRECTIVE,
    MALFORMED_LITERAL,
    UNCLOSED_SCOPE,
    UNPARSEABLE_REGION,
    RuleSpec,
)
from stylecheck.lexer.scope import TEMPLATE_OPENER, ScopeFrame, ScopeStack
from stylecheck.lexer.suppressions import SuppressionMarker, Suppressions, build_suppressions, parse_markers
from stylecheck.lexer.tokens import CLOSERS, CPP_KEYWORDS, OPENERS, UNARY_CONTEXT_KEYWORDS, Token, TokenFlags, TokenKind
from stylecheck.source.model import Language
from stylecheck.text import LineIndex, TextRange, slice_text_range

# Longest first so that the first prefix match is the longest one.
_CPP_OPERATORS: Final[tuple[str, ...]] = (
    "<=>",
    "<<=",
    ">>=",
    "->*",
    "...",
    "::",
    "->",
    "++",
    "--",
    "<<",
    ">>",
    "<=",
    ">=",
    "==",
    "!=",
    "&&",
    "||",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    ".*",
    "##",
)

_STRING_PREFIXES: Final[frozenset[str]] = frozenset({"u8", "u", "U", "L"})
_RAW_STRING_PREFIXES: Final[frozenset[str]] = frozenset({"R", "u8R", "uR", "UR", "LR"})
_RAW_DELIMITER_MAX: Final[int] = 16

# `<` after these opens a template argument list even when separated by blanks.
_TEMPLATE_KEYWORDS: Final[frozenset[str]] = frozenset(
    {"template", "static_cast", "dynamic_cast", "const_cast", "reinterpret_cast"}
)

_WHITESPACE: Final[str] = " \t\f\v"


@dataclass(frozen=True, slots=True)
class LexResult:
    """Token stream of one file plus everything the lexer learned on the way.

    `pairs` maps the offset of every matched opener to the offset of its closer
    and the other way round.
    `line_frames` holds the scopes open at the start of each line that begins
    outside a multi-line token.
    """

    text: str
    language: Language
    tokens: tuple[Token, ...]
    diagnostics: tuple[Diagnostic, ...] = ()
    pairs: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))
    suppressions: Suppressions = field(default_factory=Suppressions)
    unparseable_lines: frozenset[int] = frozenset()
    line_frames: Mapping[int, tuple[ScopeFrame, ...]] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def significant(self) -> tuple[Token, ...]:
        return tuple(token for token in self.tokens if not token.kind.is_trivia and token.kind != TokenKind.EOF)

    def partner(self, token: Token) -> int | None:
        """Offset of the bracket matching `token`, if any."""
        return self.pairs.get(token.range.start)


class Lexer:
    """Lossless lexer for C++ and CMake sources.

    Every character of the input ends up in exactly one token. Unterminated
    constructs become MALFORMED tokens with a diagnostic and scanning goes on.
    """

    def __init__(self, source: str, *, language: Language = Language.CPP) -> None:
        self._source = source
        self._language = language
        self._lines = LineIndex(source)
        self._position = 0
        self._after_newline = True
        self._current_start = 0
        self._current_flags = TokenFlags.NONE
        self._eof_emitted = False
        self._scopes = ScopeStack()
        self._previous: Token | None = None
        self._unmatched = False
        self._unparseable_start: int | None = None
        self._unparseable_lines: set[int] = set()
        self._pairs: dict[int, int] = {}
        self._line_frames: dict[int, tuple[ScopeFrame, ...]] = {1: ()}
        self._markers: list[SuppressionMarker] = []
        self._diagnostics: list[Diagnostic] = []

    @property
    def source(self) -> str:
        """Original source text."""
        return self._source

    @property
    def language(self) -> Language:
        return self._language

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """List of diagnostics emitted during lexing."""
        return self._diagnostics

    @property
    def current_range(self) -> TextRange:
        return TextRange(self._current_start, self._position)

    @property
    def is_eof(self) -> bool:
        return self._position >= len(self._source)

    def next_token(self) -> Token:
        self._current_start = self._position
        self._current_flags = TokenFlags.NONE
        self._unmatched = False

        if self.is_eof:
            self._finish_eof()
            position = self._lines.position(self._position)
            return Token(TokenKind.EOF, "", position, position, TextRange.empty(self._position), depth=len(self._scopes))

        if self._language == Language.CMAKE:
            kind = self._lex_cmake_token()
        else:
            kind = self._lex_cpp_token()

        significant = not kind.is_trivia
        if significant and self._after_newline:
            self._current_flags |= TokenFlags.PRECEDING_LINE_BREAK

        text = slice_text_range(self._source, self.current_range)
        depth = len(self._scopes)
        if kind == TokenKind.PUNCT:
            depth = self._track_scope(text)

        token = Token(
            kind=kind,
            text=text,
            start=self._lines.position(self._current_start),
            end=self._lines.position(self._position),
            range=self.current_range,
            flags=self._current_flags,
            depth=depth,
        )

        if kind == TokenKind.COMMENT or (kind == TokenKind.DIRECTIVE and self._language == Language.CPP):
            self._markers.extend(
                parse_markers(text, line=token.start.line, standalone=self._after_newline and kind == TokenKind.COMMENT)
            )

        if kind == TokenKind.NEWLINE:
            self._after_newline = True
            self._line_frames[token.start.line + 1] = self._scopes.frames
        elif significant:
            self._after_newline = False
            self._track_unparseable(token)
            self._previous = token
        return token

    def lex(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.kind == TokenKind.EOF:
                break
        return tokens

    def result(self, tokens: list[Token]) -> LexResult:
        return LexResult(
            text=self._source,
            language=self._language,
            tokens=tuple(tokens),
            diagnostics=tuple(self._diagnostics),
            pairs=MappingProxyType(dict(self._pairs)),
            suppressions=build_suppressions(self._markers),
            unparseable_lines=frozenset(self._unparseable_lines),
            line_frames=MappingProxyType(self._line_frames),
        )

    # -------------------------
    # C++
    # -------------------------

    def _lex_cpp_token(self) -> TokenKind:
        ch = self._current_char()

        if ch in "\r\n" or ch in _WHITESPACE:
            return self._consume_newline_or_whitespaces()

        if ch == "#" and self._after_newline:
            return self._lex_directive()

        if ch == "/" and self._peek_char() == "/":
            return self._lex_line_comment()
        if ch == "/" and self._peek_char() == "*":
            return self._lex_block_comment()

        if ch == '"' or ch == "'":
            return self._lex_quoted(ch)

        if ch.isdigit() or (ch == "." and self._peek_char().isdigit()):
            return self._lex_number()

        if ch.isalpha() or ch == "_":
            return self._lex_identifier()

        return self._lex_cpp_punct()

    def _lex_directive(self) -> TokenKind:
        # Runs to end of line, following backslash continuations.
        while True:
            while not self.is_eof and self._current_char() not in "\r\n":
                self._advance(1)
            continued = self._position > self._current_start and self._source[self._position - 1] == "\\"
            if not continued:
                return TokenKind.DIRECTIVE
            if self.is_eof or not self._consume_newline() or self.is_eof:
                self._report(MALFORMED_DIRECTIVE, "Preprocessor line continuation runs into end of file")
                return TokenKind.MALFORMED

    def _lex_line_comment(self) -> TokenKind:
        # Consume until end of line, do not consume the newline itself.
        while not self.is_eof and self._current_char() not in "\r\n":
            self._advance(1)
        return TokenKind.COMMENT

    def _lex_block_comment(self) -> TokenKind:
        end = self._source.find("*/", self._position + 2)
        if end == -1:
            self._position = len(self._source)
            self._report(MALFORMED_COMMENT, "Unterminated block comment")
            return TokenKind.MALFORMED
        self._position = end + 2
        return TokenKind.COMMENT

    def _lex_quoted(self, quote: str) -> TokenKind:
        # Consume opening quote
        self._advance(1)
        closed = False
        while not self.is_eof:
            ch = self._current_char()
            if ch == quote:
                self._advance(1)
                closed = True
                break
            if ch == "\\":
                self._current_flags |= TokenFlags.HAS_ESCAPE
                self._advance(1)
                if not self.is_eof and not self._consume_newline():
                    self._advance(1)
                continue
            if ch == "\n" or ch == "\r":
                break
            self._advance(1)

        if not closed:
            what = "string" if quote == '"' else "character"
            self._report(MALFORMED_LITERAL, f"Unterminated {what} literal")
            return TokenKind.MALFORMED

        self._consume_identifier_chars()  # user-defined literal suffix
        return TokenKind.STRING

    def _lex_raw_string(self) -> TokenKind:
        # Positioned on the opening quote, after the prefix.
        self._advance(1)
        delimiter_end = self._source.find("(", self._position, self._position + _RAW_DELIMITER_MAX + 1)
        delimiter = self._source[self._position : delimiter_end] if delimiter_end != -1 else None
        if delimiter is None or any(ch in delimiter for ch in ' ()\\\t\r\n"'):
            while not self.is_eof and self._current_char() not in "\r\n":
                self._advance(1)
            self._report(MALFORMED_LITERAL, "Invalid raw string delimiter")
            return TokenKind.MALFORMED

        terminator = f"){delimiter}\""
        end = self._source.find(terminator, delimiter_end + 1)
        if end == -1:
            self._position = len(self._source)
            self._report(MALFORMED_LITERAL, "Unterminated raw string literal")
            return TokenKind.MALFORMED
        self._position = end + len(terminator)
        self._consume_identifier_chars()
        return TokenKind.STRING

    def _lex_number(self) -> TokenKind:
        hexadecimal = self._source.startswith(("0x", "0X"), self._position)
        while not self.is_eof:
            ch = self._current_char()
            if ch.isalnum() or ch in "_.'":
                self._advance(1)
                if ch in ("eEpP" if not hexadecimal else "pP") and self._current_char() in "+-":
                    self._advance(1)
                continue
            break
        return TokenKind.NUMBER

    def _lex_identifier(self) -> TokenKind:
        self._consume_identifier_chars()
        text = self._source[self._current_start : self._position]
        ch = self._current_char()
        if ch == '"' and text in _RAW_STRING_PREFIXES:
            return self._lex_raw_string()
        if (ch == '"' or ch == "'") and text in _STRING_PREFIXES:
            return self._lex_quoted(ch)
        if text in CPP_KEYWORDS:
            self._current_flags |= TokenFlags.KEYWORD
        return TokenKind.IDENTIFIER

    def _lex_cpp_punct(self) -> TokenKind:
        if self._current_char() == ">" and self._scopes.in_template():
            self._advance(1)
            self._current_flags |= TokenFlags.TEMPLATE_CLOSE
            return TokenKind.PUNCT

        for operator in _CPP_OPERATORS:
            if self._source.startswith(operator, self._position):
                self._advance(len(operator))
                break
        else:
            self._advance(1)

        text = self._source[self._current_start : self._position]
        if text == TEMPLATE_OPENER and self._opens_template():
            self._current_flags |= TokenFlags.TEMPLATE_OPEN
        elif text in ("+", "-") and self._starts_operand():
            self._current_flags |= TokenFlags.UNARY
        return TokenKind.PUNCT

    def _opens_template(self) -> bool:
        previous = self._previous
        if previous is None or previous.kind != TokenKind.IDENTIFIER:
            return False
        if previous.text in _TEMPLATE_KEYWORDS:
            return True
        return previous.is_word and previous.range.end == self._current_start

    def _starts_operand(self) -> bool:
        """Whether a `+`/`-` at the current position is a prefix operator."""
        previous = self._previous
        if previous is None:
            return True
        match previous.kind:
            case TokenKind.PUNCT:
                return not (previous.text in (")", "]", "++", "--") or previous.is_template_close)
            case TokenKind.IDENTIFIER:
                return previous.text in UNARY_CONTEXT_KEYWORDS
            case TokenKind.DIRECTIVE:
                return True
            case _:
                return False

    # -------------------------
    # CMake
    # -------------------------

    def _lex_cmake_token(self) -> TokenKind:
        ch = self._current_char()

        if ch in "\r\n" or ch in _WHITESPACE:
            return self._consume_newline_or_whitespaces()

        if ch == "#":
            level = self._bracket_level(self._position + 1)
            if level is not None:
                return self._lex_bracket(self._position + 1, level, comment=True)
            return self._lex_line_comment()

        if ch == '"':
            return self._lex_cmake_quoted()

        if ch == "(" or ch == ")":
            self._advance(1)
            return TokenKind.PUNCT

        if ch == "[":
            level = self._bracket_level(self._position)
            if level is not None:
                return self._lex_bracket(self._position, level, comment=False)

        return self._lex_cmake_word()

    def _lex_cmake_quoted(self) -> TokenKind:
        self._advance(1)
        while not self.is_eof:
            ch = self._current_char()
            if ch == '"':
                self._advance(1)
                return TokenKind.STRING
            if ch == "\\":
                self._current_flags |= TokenFlags.HAS_ESCAPE
                self._advance(2 if self._position + 1 < len(self._source) else 1)
                continue
            self._advance(1)
        self._report(MALFORMED_LITERAL, "Unterminated quoted argument")
        return TokenKind.MALFORMED

    def _bracket_level(self, offset: int) -> int | None:
        """Number of `=` in a `[==[` opener at `offset`, or `None` when there is none."""
        if offset >= len(self._source) or self._source[offset] != "[":
            return None
        index = offset + 1
        while index < len(self._source) and self._source[index] == "=":
            index += 1
        if index < len(self._source) and self._source[index] == "[":
            return index - offset - 1
        return None

    def _lex_bracket(self, opener: int, level: int, *, comment: bool) -> TokenKind:
        terminator = "]" + "=" * level + "]"
        end = self._source.find(terminator, opener + level + 2)
        if end == -1:
            self._position = len(self._source)
            if comment:
                self._report(MALFORMED_COMMENT, "Unterminated bracket comment")
            else:
                self._report(MALFORMED_LITERAL, "Unterminated bracket argument")
            return TokenKind.MALFORMED
        self._position = end + len(terminator)
        return TokenKind.COMMENT if comment else TokenKind.STRING

    def _lex_cmake_word(self) -> TokenKind:
        while not self.is_eof:
            ch = self._current_char()
            if ch in _WHITESPACE or ch in '\r\n()#"':
                break
            if ch == "\\":
                self._current_flags |= TokenFlags.HAS_ESCAPE
                self._advance(2 if self._position + 1 < len(self._source) else 1)
                continue
            self._advance(1)
        # A word directly followed by `(` at top level is a command name.
        index = self._position
        while index < len(self._source) and self._source[index] in _WHITESPACE:
            index += 1
        if not self._scopes and index < len(self._source) and self._source[index] == "(":
            return TokenKind.DIRECTIVE
        return TokenKind.IDENTIFIER

    # -------------------------
    # Scopes
    # -------------------------

    def _track_scope(self, text: str) -> int:
        """Update the scope stack for a punctuation token and return its depth."""
        if self._current_flags & TokenFlags.TEMPLATE_OPEN:
            depth = len(self._scopes)
            self._push(text)
            return depth
        if self._current_flags & TokenFlags.TEMPLATE_CLOSE:
            frame = self._scopes.close(TEMPLATE_OPENER)
            if frame is not None:
                self._pair(frame)
            return len(self._scopes)

        if text in (";", "{", "}"):
            self._scopes.drop_templates()

        if text in OPENERS:
            depth = len(self._scopes)
            self._push(text)
            return depth

        if text in CLOSERS:
            frame = self._scopes.close(CLOSERS[text])
            if frame is None:
                self._unmatched = True
                self._start_unparseable(text)
            else:
                self._pair(frame)
        return len(self._scopes)

    def _push(self, opener: str) -> None:
        position = self._lines.position(self._current_start)
        line_text = self._lines.line_text(position.line)
        indent = len(line_text) - len(line_text.lstrip(" \t"))
        self._scopes.push(ScopeFrame(opener=opener, position=position, indent=indent, offset=self._current_start))

    def _pair(self, frame: ScopeFrame) -> None:
        self._pairs[frame.offset] = self._current_start
        self._pairs[self._current_start] = frame.offset

    def _start_unparseable(self, closer: str) -> None:
        if self._unparseable_start is not None:
            return
        position = self._lines.position(self._current_start)
        self._unparseable_start = position.line
        self._diagnostics.append(
            Diagnostic(
                rule_id=UNPARSEABLE_REGION.id,
                message=f"Unmatched `{closer}`; skipping to the next top-level statement",
                position=position,
                severity=UNPARSEABLE_REGION.severity,
            )
        )

    def _track_unparseable(self, token: Token) -> None:
        if self._unparseable_start is None or self._unmatched:
            return
        boundary = (")",) if self._language == Language.CMAKE else (";", "}")
        if token.depth == 0 and token.is_punct(*boundary):
            self._close_unparseable(token.start.line)

    def _close_unparseable(self, end_line: int) -> None:
        if self._unparseable_start is None:
            return
        self._unparseable_lines.update(range(self._unparseable_start, end_line + 1))
        self._unparseable_start = None

    def _finish_eof(self) -> None:
        if self._eof_emitted:
            return
        self._eof_emitted = True
        self._close_unparseable(max(self._lines.line_count, 1))
        for frame in self._scopes.frames:
            if frame.is_template:
                continue
            self._diagnostics.append(
                Diagnostic(
                    rule_id=UNCLOSED_SCOPE.id,
                    message=f"`{frame.opener}` is never closed",
                    position=frame.position,
                    severity=UNCLOSED_SCOPE.severity,
                )
            )

    # -------------------------
    # Character helpers
    # -------------------------

    def _report(self, rule: RuleSpec, message: str) -> None:
        self._diagnostics.append(
            Diagnostic(
                rule_id=rule.id,
                message=message,
                position=self._lines.position(self._current_start),
                severity=rule.severity,
            )
        )

    def _consume_identifier_chars(self) -> None:
        while not self.is_eof:
            ch = self._current_char()
            if ch.isalnum() or ch == "_":
                self._advance(1)
                continue
            break

    def _consume_newline_or_whitespaces(self) -> TokenKind:
        if self._consume_newline():
            return TokenKind.NEWLINE
        self._consume_whitespaces()
        return TokenKind.WHITESPACE

    def _consume_whitespaces(self) -> None:
        while not self.is_eof:
            ch = self._current_char()
            if ch in _WHITESPACE:
                self._advance(1)
                continue
            break

    def _consume_newline(self) -> bool:
        if self._current_char() == "\n":
            self._advance(1)
            return True
        if self._current_char() == "\r":
            if self._peek_char() == "\n":
                self._advance(2)
            else:
                self._advance(1)
            return True
        return False

    def _current_char(self) -> str:
        if self.is_eof:
            return "\0"
        return self._source[self._position]

    def _peek_char(self, ahead: int = 1) -> str:
        index = self._position + ahead
        if index >= len(self._source):
            return "\0"
        return self._source[index]

    def _advance(self, steps: int) -> None:
        self._position += steps


def tokenize(text: str, language: Language = Language.CPP) -> LexResult:
    """Lex a whole file."""
    lexer = Lexer(text, language=language)
    return lexer.result(lexer.lex())


def token_text(source: str, token: Token) -> str:
    """Get the text of a token from the source string based on its range."""
    if token.kind == TokenKind.EOF:
        return ""
    return slice_text_range(source, token.range)


def dump_tokens(
    tokens: list[Token] | tuple[Token, ...],
    diagnostics: list[Diagnostic] | tuple[Diagnostic, ...] | None = None,
) -> None:
    """Print token list with kind, position, depth, flags, and text for debugging."""
    for i, tok in enumerate(tokens):
        print(f"{i:03d} {tok.kind.name:<11} {tok.start!s:>7} depth={tok.depth} flags={tok.flags!r} text={tok.text!r}")

    if diagnostics is not None:
        print("\nDiagnostics:")
        for d in diagnostics:
            print(f"- {d.severity.upper()} {d.rule_id} at={d.position} message={d.message}")
