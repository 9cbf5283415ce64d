"""
Segment and segmenter state models

Defines the typed output units of the streaming segmenter and the
immutable state it threads from one line to the next.
"""

from enum import Enum
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .grammar import DelimiterPair


class SegmentKind(Enum):
    """Kinds of output-ready content"""
    PLAIN_TEXT = "plain"
    INLINE_MATH = "inline"
    DISPLAY_MATH = "display"


class SegmenterMode(Enum):
    """The two states of the segmenter state machine"""
    NORMAL = "normal"
    IN_DISPLAY_MATH = "in-display-math"


@dataclass(frozen=True)
class Segment:
    """
    An ordered, typed unit of content

    Attributes:
        kind: Plain text, inline math or display math
        content: Literal text (plain) or the math body between the delimiters
        source: The literal text this segment was cut from, delimiters included.
                Joining the sources of a line's segments reproduces the line.
        pair: Delimiter pair of a math segment (None for plain text)

    Example:
        For line "x $a$": Segment(PLAIN_TEXT, "x ", "x ") followed by
        Segment(INLINE_MATH, "a", "$a$", DOLLAR_INLINE)
    """
    kind: SegmentKind
    content: str
    source: str
    pair: Optional[DelimiterPair] = None

    @property
    def is_math(self) -> bool:
        return self.kind is not SegmentKind.PLAIN_TEXT

    @property
    def is_display(self) -> bool:
        return self.kind is SegmentKind.DISPLAY_MATH

    @property
    def expression(self) -> str:
        """Math body with surrounding whitespace trimmed, as sent to the renderer"""
        return self.content.strip()

    @classmethod
    def text_make(cls, text: str) -> "Segment":
        return cls(kind=SegmentKind.PLAIN_TEXT, content=text, source=text)


@dataclass(frozen=True)
class Diagnostic:
    """
    A warning recorded by a component that recovered from malformed input

    Attributes:
        message: Human-readable description
        source: Offending literal text (may be truncated by the reporter)
    """
    message: str
    source: str = ""


@dataclass(frozen=True)
class SegmenterState:
    """
    Segmenter state carried between lines

    Never mutated: every transition builds a new state, so the buffer of a
    finished display block is never reused.

    Attributes:
        mode: NORMAL or IN_DISPLAY_MATH
        pair: Display pair whose close is awaited (IN_DISPLAY_MATH only)
        buffer: Math body accumulated since the unmatched opening delimiter
        source: Raw text accumulated since (and including) the opening delimiter
    """
    mode: SegmenterMode = SegmenterMode.NORMAL
    pair: Optional[DelimiterPair] = None
    buffer: str = ""
    source: str = ""

    @property
    def in_display_math(self) -> bool:
        return self.mode is SegmenterMode.IN_DISPLAY_MATH

    def line_buffer(self, line: str) -> "SegmenterState":
        """
        New state with a whole line appended to the display block

        The math buffer always gets a terminated line; the raw source keeps
        the line as read.
        """
        body = line if line.endswith("\n") else line + "\n"
        return replace(self, buffer=self.buffer + body, source=self.source_extend(line))

    def source_extend(self, text: str) -> str:
        """
        Raw source with text from the next line appended

        A line read without its terminator is separated from the next one
        by a newline; nothing is added after the last line.
        """
        if self.source and not self.source.endswith("\n"):
            return self.source + "\n" + text
        return self.source + text


@dataclass(frozen=True)
class LineResult:
    """
    Result of feeding one line (or EOF) to the segmenter

    Attributes:
        state: State to carry into the next call
        segments: Segments completed by this call, in source order
        diagnostics: Warnings about malformed input recovered from
    """
    state: SegmenterState
    segments: List[Segment] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
