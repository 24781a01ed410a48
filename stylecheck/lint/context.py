"""Per-file facts shared by every evaluator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
from types import MappingProxyType
from typing import Final

from stylecheck.config.options import RuleOptions
from stylecheck.diagnostics import Diagnostic
from stylecheck.diagnostics.codes import UNPARSEABLE_REGION
from stylecheck.lexer import LexResult, ScopeFrame, Token, TokenKind, tokenize
from stylecheck.lint.aligned import AlignedBlocks, AlignmentBudgetExceeded, AlignmentLine, detect_aligned_lines
from stylecheck.registry import Registry
from stylecheck.source import Language, SourceFile
from stylecheck.text import Position

logger = logging.getLogger(__name__)

CMAKE_BLOCK_OPENERS: Final[frozenset[str]] = frozenset({"if", "foreach", "while", "function", "macro", "block"})
CMAKE_BLOCK_CLOSERS: Final[frozenset[str]] = frozenset(
    {"endif", "endforeach", "endwhile", "endfunction", "endmacro", "endblock"}
)
CMAKE_BLOCK_MIDDLES: Final[frozenset[str]] = frozenset({"else", "elseif"})


@dataclass(frozen=True, slots=True)
class LineInfo:
    """One physical line with the scope facts known at its start."""

    number: int
    text: str
    indent: int  # leading blanks, tabs count as one column
    tokens: tuple[Token, ...]  # significant tokens starting on this line
    comments: tuple[Token, ...]
    frames: tuple[ScopeFrame, ...]  # non-template scopes open at line start
    depth: int  # effective indentation depth
    expected_indent: int
    continued: bool  # line starts inside a multi-line token

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    @property
    def first(self) -> Token | None:
        return self.tokens[0] if self.tokens else None

    @property
    def last(self) -> Token | None:
        return self.tokens[-1] if self.tokens else None


@dataclass(frozen=True, slots=True)
class LintContext:
    """Everything an evaluator may read; nothing in here is mutated."""

    source: SourceFile
    lexed: LexResult
    registry: Registry
    lines: tuple[LineInfo, ...]
    significant: tuple[Token, ...]
    aligned_lines: frozenset[int] = frozenset()
    indent_aligned_lines: frozenset[int] = frozenset()  # subset of `aligned_lines`
    namespace_braces: frozenset[int] = frozenset()
    diagnostics: tuple[Diagnostic, ...] = ()
    _index: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}), repr=False)

    @property
    def options(self) -> RuleOptions:
        return self.registry.options

    @property
    def is_cpp(self) -> bool:
        return self.source.language == Language.CPP

    def line(self, number: int) -> LineInfo:
        return self.lines[number - 1]

    def index_of(self, token: Token) -> int:
        """Index of a significant token in `significant`."""
        return self._index[token.range.start]

    def token_at(self, offset: int) -> Token | None:
        """Significant token starting at `offset`."""
        position = self._index.get(offset)
        return None if position is None else self.significant[position]

    def partner(self, token: Token) -> Token | None:
        """The bracket matching `token`, if the lexer paired it."""
        offset = self.lexed.partner(token)
        if offset is None:
            return None
        return self.significant[self._index[offset]]

    def previous(self, index: int) -> Token | None:
        return self.significant[index - 1] if index > 0 else None

    def next(self, index: int) -> Token | None:
        return self.significant[index + 1] if index + 1 < len(self.significant) else None

    def is_unparseable(self, line: int) -> bool:
        return line in self.lexed.unparseable_lines

    def is_aligned(self, line: int) -> bool:
        return line in self.aligned_lines

    def is_indent_aligned(self, line: int) -> bool:
        return line in self.indent_aligned_lines

    def gap(self, left: Token, right: Token) -> str | None:
        """Text between two tokens on the same line; `None` when a comment or line break intervenes."""
        if left.end.line != right.start.line:
            return None
        between = self.source.text[left.range.end : right.range.start]
        if between.strip(" \t"):
            return None
        return between


def build_context(source: SourceFile, registry: Registry, *, lexed: LexResult | None = None) -> LintContext:
    """Tokenize (unless given tokens) and derive line facts for one file."""
    resolved = lexed if lexed is not None else tokenize(source.text, source.language)
    significant = resolved.significant
    index = {token.range.start: position for position, token in enumerate(significant)}
    namespace_braces = _namespace_braces(significant) if source.language == Language.CPP else frozenset()
    lines = _build_lines(source, resolved, registry, namespace_braces)

    diagnostics: list[Diagnostic] = []
    try:
        aligned = detect_aligned_lines(
            [_alignment_line(line) for line in lines],
            min_lines=registry.options.aligned_min_lines,
            max_iterations=registry.options.aligned_max_iterations,
        )
    except AlignmentBudgetExceeded as exc:
        logger.warning("%s: %s", source.path, exc)
        aligned = AlignedBlocks()
        diagnostics.append(
            registry.diagnostic(
                UNPARSEABLE_REGION,
                f"Aligned-block analysis gave up after {exc.budget} iterations",
                Position(exc.line, 1),
            )
        )

    return LintContext(
        source=source,
        lexed=resolved,
        registry=registry,
        lines=lines,
        significant=significant,
        aligned_lines=aligned.lines,
        indent_aligned_lines=aligned.indented,
        namespace_braces=namespace_braces,
        diagnostics=tuple(diagnostics),
        _index=MappingProxyType(index),
    )


def _build_lines(
    source: SourceFile,
    lexed: LexResult,
    registry: Registry,
    namespace_braces: frozenset[int],
) -> tuple[LineInfo, ...]:
    line_index = source.lines
    count = line_index.line_count
    tokens: list[list[Token]] = [[] for _ in range(count + 1)]
    comments: list[list[Token]] = [[] for _ in range(count + 1)]
    continued: set[int] = set()

    for token in lexed.tokens:
        if token.kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE, TokenKind.EOF):
            continue
        if token.start.line <= count:
            (comments if token.kind == TokenKind.COMMENT else tokens)[token.start.line].append(token)
        continued.update(range(token.start.line + 1, min(token.end.line, count) + 1))

    block_depths = _cmake_block_depths(tokens, count) if source.language == Language.CMAKE else None
    options = registry.options
    lines: list[LineInfo] = []
    for number in range(1, count + 1):
        text = line_index.line_text(number)
        frames = tuple(
            frame for frame in lexed.line_frames.get(number, ()) if not frame.is_template
        )
        depth = _effective_depth(frames, namespace_braces, indent_namespaces=options.indent_namespace_bodies)
        if block_depths is not None:
            depth += block_depths[number]
        lines.append(
            LineInfo(
                number=number,
                text=text,
                indent=len(text) - len(text.lstrip(" \t")),
                tokens=tuple(tokens[number]),
                comments=tuple(comments[number]),
                frames=frames,
                depth=depth,
                expected_indent=depth * options.indent_width,
                continued=number in continued or number not in lexed.line_frames,
            )
        )
    return tuple(lines)


def _effective_depth(frames: tuple[ScopeFrame, ...], namespace_braces: frozenset[int], *, indent_namespaces: bool) -> int:
    # Brackets opened on the same line add a single level.
    opener_lines: set[int] = set()
    for frame in frames:
        if not indent_namespaces and frame.offset in namespace_braces:
            continue
        opener_lines.add(frame.position.line)
    return len(opener_lines)


def _cmake_block_depths(tokens: list[list[Token]], count: int) -> list[int]:
    depths = [0] * (count + 1)
    depth = 0
    for number in range(1, count + 1):
        first = tokens[number][0] if tokens[number] else None
        command = first.text.lower() if first is not None and first.kind == TokenKind.DIRECTIVE else ""
        if command in CMAKE_BLOCK_CLOSERS:
            depth = max(depth - 1, 0)
            depths[number] = depth
        elif command in CMAKE_BLOCK_MIDDLES:
            depths[number] = max(depth - 1, 0)
        else:
            depths[number] = depth
            if command in CMAKE_BLOCK_OPENERS:
                depth += 1
    return depths


def _namespace_braces(significant: tuple[Token, ...]) -> frozenset[int]:
    """Offsets of `{` that open a namespace or `extern "C"` body."""
    found: set[int] = set()
    for position, token in enumerate(significant):
        if not token.is_punct("{"):
            continue
        cursor = position - 1
        while cursor >= 0:
            candidate = significant[cursor]
            if candidate.kind == TokenKind.IDENTIFIER and candidate.text == "namespace":
                found.add(token.range.start)
                break
            if candidate.kind == TokenKind.STRING and cursor > 0 and significant[cursor - 1].text == "extern":
                found.add(token.range.start)
                break
            if candidate.is_word or candidate.is_punct("::") or candidate.text == "inline":
                cursor -= 1
                continue
            break
    return frozenset(found)


def _alignment_line(line: LineInfo) -> AlignmentLine:
    items = sorted((*line.tokens, *line.comments), key=lambda token: token.range.start)
    starts = tuple(token.start.column for token in items)
    gaps: list[int] = []
    for left, right in zip(items, items[1:]):
        if left.end.line == line.number and right.start.column - left.end.column >= 2:
            gaps.append(right.start.column)
    return AlignmentLine(
        number=line.number,
        indent=line.indent,
        expected_indent=line.expected_indent,
        starts=starts,
        gaps=tuple(gaps),
        code=bool(line.tokens) and not line.continued,
    )
