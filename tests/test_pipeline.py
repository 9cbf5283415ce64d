"""
Pipeline driver tests

The renderer and encoder are replaced by fakes that produce readable
markers, so output order, styling and fallbacks can be asserted exactly.
"""

import io

import pytest
from loguru import logger

import dml.lib.pipeline as pipeline_module
from dml.lib.pipeline import Pipeline
from dml.lib.document import DocumentParser
from dml.lib.errors import RenderError, EncodeError
from dml.lib.emphasis import BOLD_ON, BOLD_OFF, ITALIC_ON, ITALIC_OFF
from dml.lib.colour import palette_resolve
from dml.models.interfaces import MathRenderer, DocumentRenderer, ImageEncoder


class FakeRenderer:
    """Renders an expression to bytes naming it; fails on request"""

    def __init__(self, failing=(), document_fails=False):
        self.failing = set(failing)
        self.document_fails = document_fails
        self.calls = []

    def render(self, expression, colours, display_mode, dpi):
        self.calls.append((expression, display_mode, dpi))
        if expression in self.failing:
            raise RenderError(f"cannot render {expression}")
        return f"IMG[{expression}]".encode()

    def document_render(self, body, colours, dpi):
        if self.document_fails:
            raise RenderError("pdflatex failed")
        return body.encode()


class FakeEncoder:
    """Wraps image bytes in a marker; display images end with a newline"""

    def __init__(self, failing=False):
        self.failing = failing
        self.rows = []

    def encode(self, image, display_mode, target_rows):
        self.rows.append(target_rows)
        if self.failing:
            raise EncodeError("bad image")
        if display_mode:
            return f"<D:{image.decode()}>\n"
        return f"<I:{image.decode()}>"


@pytest.fixture
def warnings():
    """Collect loguru warning/error messages emitted during a test"""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


def pipeline_make(renderer=None, encoder=None, **kwargs):
    return Pipeline(
        renderer=renderer or FakeRenderer(),
        encoder=encoder or FakeEncoder(),
        colours=palette_resolve("white"),
        **kwargs,
    )


def stream(driver, lines):
    out = io.StringIO()
    failed = driver.stream_render(lines, out)
    return out.getvalue(), failed


class TestFakes:
    """The fakes satisfy the collaborator interfaces"""

    def test_protocols(self):
        assert isinstance(FakeRenderer(), MathRenderer)
        assert isinstance(FakeRenderer(), DocumentRenderer)
        assert isinstance(FakeEncoder(), ImageEncoder)


class TestStreamRender:
    """Test line-streaming mode"""

    def test_plain_passthrough(self):
        output, failed = stream(pipeline_make(), ["hello\n", "world\n"])
        assert output == "hello\nworld\n"
        assert failed == 0

    def test_inline_math(self):
        output, _ = stream(pipeline_make(), ["Energy $E=mc^2$ here\n"])
        assert output == "Energy <I:IMG[E=mc^2]> here\n"

    def test_order_preserved(self):
        output, _ = stream(pipeline_make(), ["$a$ then \\(b\\) then $c$\n"])
        assert output == "<I:IMG[a]> then <I:IMG[b]> then <I:IMG[c]>\n"

    def test_display_block(self):
        renderer = FakeRenderer()
        output, _ = stream(pipeline_make(renderer), ["before\n", "$$\n", " x + y \n", "$$\n", "after\n"])
        assert output == "before\n<D:IMG[x + y]>\nafter\n"
        assert renderer.calls == [("x + y", True, 300)]

    def test_display_after_literal_dollar(self):
        output, failed = stream(pipeline_make(), ["price $5 and $$x$$\n"])
        assert output == "price $5 and <D:IMG[x]>\n"
        assert failed == 0

    def test_unterminated_without_newline(self, warnings):
        output, _ = stream(pipeline_make(), ["$$unterminated"])
        assert output == "$$unterminated"

    def test_settings_passed_through(self):
        renderer, encoder = FakeRenderer(), FakeEncoder()
        stream(pipeline_make(renderer, encoder, target_rows=2, dpi=600), ["$x$\n"])
        assert renderer.calls == [("x", False, 600)]
        assert encoder.rows == [2]

    def test_emphasis_styled(self):
        output, _ = stream(pipeline_make(), ["**bold** and *it*\n"])
        assert output == f"{BOLD_ON}bold{BOLD_OFF} and {ITALIC_ON}it{ITALIC_OFF}\n"

    def test_emphasis_spans_math(self):
        output, _ = stream(pipeline_make(), ["**see $x$ here**\n"])
        assert output == f"{BOLD_ON}see <I:IMG[x]> here{BOLD_OFF}\n"

    def test_math_not_styled(self):
        """Emphasis markers inside math belong to the math"""
        renderer = FakeRenderer()
        output, _ = stream(pipeline_make(renderer), ["$a*b*c$\n"])
        assert renderer.calls[0][0] == "a*b*c"
        assert output == "<I:IMG[a*b*c]>\n"

    def test_render_failure_falls_back(self, warnings):
        output, failed = stream(pipeline_make(FakeRenderer(failing={"x^"})), ["bad $x^$ ok $y$\n"])
        assert output == "bad $x^$ ok <I:IMG[y]>\n"
        assert failed == 1
        assert any("x^" in message for message in warnings)

    def test_fallback_not_restyled(self):
        output, _ = stream(pipeline_make(FakeRenderer(failing={"a*b*"})), ["$a*b*$ and *c*\n"])
        assert output == f"$a*b*$ and {ITALIC_ON}c{ITALIC_OFF}\n"

    def test_encode_failure_falls_back(self):
        output, failed = stream(pipeline_make(encoder=FakeEncoder(failing=True)), ["$$\n", "z\n", "$$\n"])
        assert output == "$$\nz\n$$\n"
        assert failed == 1

    def test_unterminated_written_verbatim(self, warnings):
        output, failed = stream(pipeline_make(), ["text\n", "$$ **raw**\n", "more\n"])
        assert output == "text\n$$ **raw**\nmore\n"
        assert failed == 0
        assert any("Unterminated display math" in message for message in warnings)

    def test_empty_math_literal(self):
        renderer = FakeRenderer()
        output, _ = stream(pipeline_make(renderer), ["a $ $ b\n"])
        assert output == "a $ $ b\n"
        assert renderer.calls == []

    def test_empty_input(self):
        assert stream(pipeline_make(), []) == ("", 0)

    def test_lines_without_terminators(self):
        output, _ = stream(pipeline_make(), ["$$", "q", "$$"])
        assert output == "<D:IMG[q]>\n"


class TestDocumentRender:
    """Test whole-document mode"""

    def render(self, driver, source):
        out = io.StringIO()
        ok = driver.document_render(source, out)
        return out.getvalue(), ok

    def test_success(self):
        output, ok = self.render(pipeline_make(), "# Notes\n\nSum $x+y$ is **big**\n")
        assert ok
        assert output.startswith("<D:")
        assert output.endswith(">\n")
        assert "\\section*{Notes}" in output
        assert "$x+y$" in output
        assert "\\textbf{big}" in output

    def test_brackets_normalized(self):
        output, ok = self.render(pipeline_make(), "\\[ a^2 \\]\n")
        assert ok
        assert "$$a^2$$" in output

    def test_failure_echoes_input(self, warnings):
        source = "# Notes\n\n$x^$\n"
        output, ok = self.render(pipeline_make(FakeRenderer(document_fails=True)), source)
        assert not ok
        assert output == source
        assert any("echoing input" in message for message in warnings)

    def test_encode_failure_echoes_input(self):
        source = "plain\n"
        output, ok = self.render(pipeline_make(encoder=FakeEncoder(failing=True)), source)
        assert not ok
        assert output == source

    def test_renderer_without_document_support(self):
        class InlineOnly:
            def render(self, expression, colours, display_mode, dpi):
                return b""

        output, ok = self.render(pipeline_make(InlineOnly()), "text\n")
        assert not ok
        assert output == "text\n"

    def test_separate_document_renderer(self):
        class InlineOnly:
            def render(self, expression, colours, display_mode, dpi):
                return b""

        output, ok = self.render(pipeline_make(InlineOnly(), document_renderer=FakeRenderer()), "text\n")
        assert ok
        assert "text" in output

    def test_debug_reaches_parser(self, monkeypatch):
        seen = []

        class RecordingParser(DocumentParser):
            def __init__(self, debug=False):
                seen.append(debug)
                super().__init__(debug=debug)

        monkeypatch.setattr(pipeline_module, "DocumentParser", RecordingParser)
        _, ok = self.render(pipeline_make(debug=True), "text\n")
        assert ok
        assert seen == [True]

    def test_blank_input(self):
        output, ok = self.render(pipeline_make(), "\n\n")
        assert ok
        assert output == "\n\n"
