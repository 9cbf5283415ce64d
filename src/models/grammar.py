"""
Delimiter grammar models

Type-safe structures for math delimiter pairs and the matches located by
the grammar scanner.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class DelimiterPair:
    r"""
    A math delimiter grammar rule

    Attributes:
        name: Short identifier (e.g., "dollar-display")
        opener: Literal opening delimiter text (e.g., "$$", "\[")
        closer: Literal closing delimiter text (e.g., "$$", "\]")
        open_pattern: Compiled regex locating the opening delimiter
        close_pattern: Compiled regex locating the closing delimiter
        is_display: Whether the enclosed math renders as a standalone block
        allows_multiline: Whether an unclosed opening may continue on later lines

    Example:
        DelimiterPair(name="paren-inline", opener="\\(", closer="\\)", ...)
    """
    name: str
    opener: str
    closer: str
    open_pattern: re.Pattern
    close_pattern: re.Pattern
    is_display: bool
    allows_multiline: bool

    def __repr__(self) -> str:
        return f"DelimiterPair({self.name!r})"


@dataclass(frozen=True)
class DelimiterMatch:
    """
    Result of finding a delimiter in a line

    Returned by open_findNext() and close_find(). Mirrors the span of the
    delimiter text itself, so line[start:end] is the delimiter.

    Attributes:
        pair: The grammar rule the delimiter belongs to
        start: Character position where the delimiter begins
        end: Character position just past the delimiter

    Example:
        For line "x $a$" the opening match is
        DelimiterMatch(pair=DOLLAR_INLINE, start=2, end=3)
    """
    pair: DelimiterPair
    start: int
    end: int
