from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class TextRange:
    """
    Half-open range [start, end) of character offsets in a source text.

    Invariant:
    - 0 <= start <= end
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < 0:
            raise ValueError("TextRange positions cannot be negative")
        if self.start > self.end:
            raise ValueError("TextRange invariant violated: start > end")

    @staticmethod
    def empty(offset: int) -> "TextRange":
        """Create an empty TextRange at the given offset."""
        return TextRange(offset, offset)

    def __repr__(self) -> str:
        return f"TextRange({self.start}, {self.end})"


def slice_text_range(source: str, range: TextRange) -> str:
    """Get the substring of the source text covered by the given TextRange."""
    return source[range.start : range.end]
