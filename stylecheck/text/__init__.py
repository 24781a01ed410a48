"""Text ranges and line/column positions."""

from stylecheck.text.lines import LineIndex, Position
from stylecheck.text.text import TextRange, slice_text_range

__all__ = [
    "LineIndex",
    "Position",
    "TextRange",
    "slice_text_range",
]
