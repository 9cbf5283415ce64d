"""
Streaming segmenter for mixed Markdown/LaTeX text

Splits input, one line at a time, into ordered PlainText, InlineMath and
DisplayMath segments. Display math may span lines: the segmenter is a
two-state machine (NORMAL, IN_DISPLAY_MATH) whose state is passed in and
returned by every call, so it never looks beyond the current line except
through the carried buffer.

The segmenter only classifies text. It never fails, performs no I/O and
does no logging; malformed input is reported through LineResult.diagnostics.

Example:
    >>> state = SegmenterState()
    >>> result = line_process(state, "$$\\n")
    >>> result.state.in_display_math
    True
    >>> result = line_process(result.state, "x^2\\n")
    >>> result = line_process(result.state, "$$\\n")
    >>> result.segments[0].content
    'x^2\\n'
"""

from dataclasses import replace
from typing import Iterable, Iterator, List

from ..models.segment import (
    Diagnostic,
    LineResult,
    Segment,
    SegmentKind,
    SegmenterMode,
    SegmenterState,
)
from ..models.grammar import DelimiterMatch
from .grammar import open_findNext, close_find, body_isEmpty


LINE_TERMINATORS = ("\r\n", "\n")


def line_process(state: SegmenterState, line: str) -> LineResult:
    """
    Feed one line to the segmenter

    In IN_DISPLAY_MATH the line is searched for the awaited close. If found,
    one DisplayMath segment (buffer + text before the close) is emitted and
    the remainder of the line is processed as a fresh NORMAL fragment. If
    not, the whole line is buffered and no segment is emitted.

    In NORMAL the line is scanned left to right for the earliest opening
    delimiter (see grammar.open_findNext), emitting PlainText for the gaps
    and math segments for closed spans. A display opening without a close on
    the line switches to IN_DISPLAY_MATH.

    Args:
        state: State returned by the previous call (SegmenterState() initially)
        line: One input line, with or without its terminator

    Returns:
        LineResult with the next state and the segments completed by this line
    """
    if not state.in_display_math:
        return fragment_scan(line)

    closing = close_find(line, 0, state.pair)
    if closing is None:
        return LineResult(state=state.line_buffer(line))

    display = Segment(
        kind=SegmentKind.DISPLAY_MATH,
        content=state.buffer + line[: closing.start],
        source=state.source_extend(line[: closing.end]),
        pair=state.pair,
    )
    rest = line[closing.end :]
    if rest in LINE_TERMINATORS:
        display = replace(display, source=display.source + rest)
        rest = ""

    if body_isEmpty(display.content):
        display = Segment.text_make(display.source)

    remainder = fragment_scan(rest)
    return LineResult(
        state=remainder.state,
        segments=[display] + remainder.segments,
        diagnostics=remainder.diagnostics,
    )


def fragment_scan(text: str) -> LineResult:
    """
    Segment a line (fragment) that starts in NORMAL state

    Args:
        text: Line or remainder of a line after a closed display block

    Returns:
        LineResult; its state is IN_DISPLAY_MATH if a display block was
        opened but not closed within the fragment
    """
    segments: List[Segment] = []
    text_start = 0
    pos = 0

    while True:
        opening = open_findNext(text, pos)
        if opening is None:
            break

        closing = close_find(text, opening.end, opening.pair)
        if closing is None:
            if opening.pair.allows_multiline:
                plain_emit(segments, text[text_start : opening.start])
                return LineResult(state=display_open(text, opening), segments=segments)
            # Unclosed inline opening is literal text
            pos = opening.end
            continue

        body = text[opening.end : closing.start]
        if body_isEmpty(body):
            # Whole delimited span passes through literally
            pos = closing.end
            continue

        plain_emit(segments, text[text_start : opening.start])
        source = text[opening.start : closing.end]
        pos = closing.end
        if opening.pair.is_display and text[pos:] in LINE_TERMINATORS:
            source += text[pos:]
            pos = len(text)

        kind = SegmentKind.DISPLAY_MATH if opening.pair.is_display else SegmentKind.INLINE_MATH
        segments.append(Segment(kind=kind, content=body, source=source, pair=opening.pair))
        text_start = pos

    plain_emit(segments, text[text_start:])
    return LineResult(state=SegmenterState(), segments=segments)


def display_open(text: str, opening: DelimiterMatch) -> SegmenterState:
    """
    Enter IN_DISPLAY_MATH for an opening with no close on its line

    The buffer is seeded with the text after the delimiter; a bare line
    terminator directly after the delimiter seeds an empty buffer.
    """
    after = text[opening.end :]
    source = text[opening.start :]
    if after in LINE_TERMINATORS or after == "":
        buffer = ""
    else:
        buffer = after if after.endswith("\n") else after + "\n"
    return SegmenterState(
        mode=SegmenterMode.IN_DISPLAY_MATH,
        pair=opening.pair,
        buffer=buffer,
        source=source,
    )


def plain_emit(segments: List[Segment], text: str) -> None:
    """Append a PlainText segment unless text is empty"""
    if text:
        segments.append(Segment.text_make(text))


def stream_finish(state: SegmenterState) -> LineResult:
    """
    Handle end of input

    A display block still open at EOF is unterminated: its raw text,
    opening delimiter included, is emitted verbatim as PlainText and a
    diagnostic is recorded. Input is never silently dropped.

    Args:
        state: State after the last line

    Returns:
        LineResult with a fresh NORMAL state
    """
    if not state.in_display_math:
        return LineResult(state=SegmenterState())

    source = state.source
    diagnostic = Diagnostic(
        message=f"Unterminated display math block: missing closing '{state.pair.closer}'",
        source=source,
    )
    return LineResult(
        state=SegmenterState(),
        segments=[Segment.text_make(source)],
        diagnostics=[diagnostic],
    )


def lines_segment(lines: Iterable[str]) -> Iterator[LineResult]:
    """
    Segment an iterable of lines, yielding one LineResult per line

    A final LineResult for end of input is always yielded last.

    Example:
        >>> results = list(lines_segment(["$a$ and $b$\\n"]))
        >>> [segment.content for segment in results[0].segments]
        ['a', ' and ', 'b', '\\n']
    """
    state = SegmenterState()
    for line in lines:
        result = line_process(state, line)
        state = result.state
        yield result
    yield stream_finish(state)
