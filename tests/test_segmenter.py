"""
Streaming segmenter tests

Tests single-line segmentation, the display-math state machine across
lines, end-of-input handling and the source round-trip.
"""

import pytest

from dml.lib.segmenter import line_process, lines_segment, stream_finish
from dml.lib.grammar import DOLLAR_DISPLAY, BRACKET_DISPLAY, PAREN_INLINE
from dml.models.segment import SegmentKind, SegmenterState


def segments_of(line):
    """Segments of a single line processed from the initial state"""
    return line_process(SegmenterState(), line).segments


def kinds_of(segments):
    return [segment.kind for segment in segments]


class TestSingleLine:
    """Test segmentation of lines that start and end in NORMAL state"""

    def test_plain(self):
        segments = segments_of("just text\n")
        assert kinds_of(segments) == [SegmentKind.PLAIN_TEXT]
        assert segments[0].content == "just text\n"

    def test_empty_line(self):
        result = line_process(SegmenterState(), "")
        assert result.segments == []
        assert not result.state.in_display_math

    def test_only_inline(self):
        """A line that is one inline expression yields exactly one segment"""
        segments = segments_of("$E=mc^2$")
        assert len(segments) == 1
        assert segments[0].kind is SegmentKind.INLINE_MATH
        assert segments[0].content == "E=mc^2"

    def test_mixed(self):
        segments = segments_of("a $x$ b $y$\n")
        assert kinds_of(segments) == [
            SegmentKind.PLAIN_TEXT,
            SegmentKind.INLINE_MATH,
            SegmentKind.PLAIN_TEXT,
            SegmentKind.INLINE_MATH,
            SegmentKind.PLAIN_TEXT,
        ]
        assert [segment.content for segment in segments] == ["a ", "x", " b ", "y", "\n"]

    def test_paren_inline(self):
        segments = segments_of("see \\(a^2\\) here")
        assert segments[1].kind is SegmentKind.INLINE_MATH
        assert segments[1].content == "a^2"
        assert segments[1].source == "\\(a^2\\)"
        assert segments[1].pair is PAREN_INLINE

    def test_display_on_one_line(self):
        """The line terminator after a closing display delimiter belongs to it"""
        segments = segments_of("$$x^2$$\n")
        assert len(segments) == 1
        assert segments[0].kind is SegmentKind.DISPLAY_MATH
        assert segments[0].content == "x^2"
        assert segments[0].source == "$$x^2$$\n"

    def test_display_then_text(self):
        segments = segments_of("\\[a\\] then text\n")
        assert kinds_of(segments) == [SegmentKind.DISPLAY_MATH, SegmentKind.PLAIN_TEXT]
        assert segments[1].content == " then text\n"

    def test_content_keeps_whitespace(self):
        """content is the raw body; expression is trimmed"""
        segment = segments_of("$ x $")[0]
        assert segment.content == " x "
        assert segment.expression == "x"

    def test_unclosed_inline_is_text(self):
        segments = segments_of("costs $5 today\n")
        assert kinds_of(segments) == [SegmentKind.PLAIN_TEXT]
        assert segments[0].content == "costs $5 today\n"

    def test_unclosed_inline_then_closed_pair(self):
        """An unclosed opening is skipped, later pairs still match"""
        segments = segments_of("\\(a and $b$")
        assert kinds_of(segments) == [SegmentKind.PLAIN_TEXT, SegmentKind.INLINE_MATH]
        assert segments[0].content == "\\(a and "
        assert segments[1].content == "b"

    def test_escaped_dollars(self):
        segments = segments_of("between \\$5 and \\$10\n")
        assert kinds_of(segments) == [SegmentKind.PLAIN_TEXT]

    @pytest.mark.parametrize("line", ["$ $ tail", "$$  $$\n", "\\(\\)"])
    def test_empty_body_passes_through(self, line):
        """Empty math is not math: the text is kept literally"""
        segments = segments_of(line)
        assert kinds_of(segments) == [SegmentKind.PLAIN_TEXT]
        assert "".join(segment.content for segment in segments) == line


class TestDollarPrecedence:
    """An unclosed inline $ before a $$ never splits the $$"""

    def test_display_after_unclosed_inline(self):
        segments = segments_of("price $5 and $$x$$\n")
        assert kinds_of(segments) == [SegmentKind.PLAIN_TEXT, SegmentKind.DISPLAY_MATH]
        assert segments[0].content == "price $5 and "
        assert segments[1].content == "x"
        assert segments[1].source == "$$x$$\n"

    def test_block_opened_after_unclosed_inline(self):
        first = line_process(SegmenterState(), "Cost $5 then $$\n")
        assert kinds_of(first.segments) == [SegmentKind.PLAIN_TEXT]
        assert first.segments[0].content == "Cost $5 then "
        assert first.state.in_display_math
        assert first.state.pair is DOLLAR_DISPLAY

        second = line_process(first.state, "a^2\n")
        done = line_process(second.state, "$$\n")
        assert not done.state.in_display_math
        assert kinds_of(done.segments) == [SegmentKind.DISPLAY_MATH]
        assert done.segments[0].content == "a^2\n"

        after = line_process(done.state, "plain text\n")
        assert kinds_of(after.segments) == [SegmentKind.PLAIN_TEXT]
        assert not after.state.in_display_math


class TestDisplayBlock:
    """Test the IN_DISPLAY_MATH state across lines"""

    def test_three_line_block(self):
        state = SegmenterState()
        first = line_process(state, "$$\n")
        assert first.segments == []
        assert first.state.in_display_math
        assert first.state.pair is DOLLAR_DISPLAY

        second = line_process(first.state, "\\sum_{i=1}^n i\n")
        assert second.segments == []
        assert second.state.in_display_math

        third = line_process(second.state, "$$\n")
        assert not third.state.in_display_math
        assert len(third.segments) == 1
        segment = third.segments[0]
        assert segment.kind is SegmentKind.DISPLAY_MATH
        assert segment.content == "\\sum_{i=1}^n i\n"
        assert segment.source == "$$\n\\sum_{i=1}^n i\n$$\n"

    def test_opening_with_content(self):
        """Text after the opening seeds the buffer"""
        first = line_process(SegmenterState(), "$$a +\n")
        assert first.state.buffer == "a +\n"
        done = line_process(first.state, "b$$\n")
        assert done.segments[0].content == "a +\nb"
        assert done.segments[0].expression == "a +\nb"

    def test_text_before_opening(self):
        first = line_process(SegmenterState(), "Consider \\[\n")
        assert kinds_of(first.segments) == [SegmentKind.PLAIN_TEXT]
        assert first.segments[0].content == "Consider "
        assert first.state.pair is BRACKET_DISPLAY

    def test_remainder_after_close(self):
        """Text after the close is a fresh NORMAL fragment"""
        first = line_process(SegmenterState(), "$$\n")
        done = line_process(first.state, "x$$ and $y$\n")
        assert kinds_of(done.segments) == [
            SegmentKind.DISPLAY_MATH,
            SegmentKind.PLAIN_TEXT,
            SegmentKind.INLINE_MATH,
            SegmentKind.PLAIN_TEXT,
        ]
        assert done.segments[0].content == "x"
        assert done.segments[2].content == "y"

    def test_remainder_opens_new_block(self):
        first = line_process(SegmenterState(), "$$a\n")
        done = line_process(first.state, "$$ text $$b\n")
        assert done.segments[0].kind is SegmentKind.DISPLAY_MATH
        assert done.state.in_display_math
        assert done.state.buffer == "b\n"

    def test_other_closer_ignored(self):
        """Only the close of the opening pair ends the block"""
        first = line_process(SegmenterState(), "\\[\n")
        middle = line_process(first.state, "a $$ b\n")
        assert middle.segments == []
        assert middle.state.in_display_math

    def test_unterminated_line_gets_newline(self):
        first = line_process(SegmenterState(), "$$")
        second = line_process(first.state, "x")
        assert second.state.buffer == "x\n"

    def test_empty_block_is_text(self):
        first = line_process(SegmenterState(), "$$\n")
        middle = line_process(first.state, "   \n")
        done = line_process(middle.state, "$$\n")
        assert kinds_of(done.segments) == [SegmentKind.PLAIN_TEXT]
        assert done.segments[0].content == "$$\n   \n$$\n"

    def test_state_not_mutated(self):
        """Each transition returns a fresh state"""
        first = line_process(SegmenterState(), "$$\n")
        line_process(first.state, "a\n")
        assert first.state.buffer == ""


class TestStreamFinish:
    """Test end-of-input handling"""

    def test_normal_state(self):
        result = stream_finish(SegmenterState())
        assert result.segments == []
        assert result.diagnostics == []

    def test_unterminated_block(self):
        """Unterminated math is emitted verbatim with a diagnostic"""
        opened = line_process(SegmenterState(), "$$unterminated\n")
        assert opened.segments == []

        result = stream_finish(opened.state)
        assert not result.state.in_display_math
        assert len(result.segments) == 1
        assert result.segments[0].kind is SegmentKind.PLAIN_TEXT
        assert result.segments[0].content == "$$unterminated\n"
        assert len(result.diagnostics) == 1
        assert "Unterminated display math" in result.diagnostics[0].message
        assert "$$" in result.diagnostics[0].message

    def test_unterminated_without_newline_verbatim(self):
        """Nothing is added to the raw text flushed at end of input"""
        opened = line_process(SegmenterState(), "$$unterminated")
        assert opened.state.buffer == "unterminated\n"
        result = stream_finish(opened.state)
        assert result.segments[0].content == "$$unterminated"

    def test_unterminated_lines_without_newlines(self):
        """Stripped lines are rejoined with newlines, none after the last"""
        results = list(lines_segment(["$$", "a", "b"]))
        assert results[-1].segments[0].content == "$$\na\nb"

    def test_unterminated_multiline(self):
        results = list(lines_segment(["\\[\n", "a\n", "b\n"]))
        final = results[-1]
        assert final.segments[0].content == "\\[\na\nb\n"
        assert "\\]" in final.diagnostics[0].message


class TestRoundTrip:
    """Concatenated segment sources reproduce balanced input"""

    @pytest.mark.parametrize(
        "line",
        [
            "plain\n",
            "x $a$ y\n",
            "$E=mc^2$",
            "\\(a\\) and \\[b\\]\n",
            "$$x$$\n",
            "lead $$x$$ tail\n",
            "$ $ empty and $5 unclosed\n",
            "\\$ escaped $k$\r\n",
        ],
    )
    def test_line(self, line):
        result = line_process(SegmenterState(), line)
        assert not result.state.in_display_math
        assert "".join(segment.source for segment in result.segments) == line

    def test_stream(self):
        lines = ["intro $a$\n", "$$\n", "b\n", "$$ after\n", "end\n"]
        sources = [
            segment.source
            for result in lines_segment(lines)
            for segment in result.segments
        ]
        assert "".join(sources) == "".join(lines)
