"""
Pipeline driver

Wires the components together for the two modes:

- stream_render: line by line; segment, render each math segment to an
  image escape, style the plain text, write, flush
- document_render: whole input; normalize brackets, parse Markdown,
  transduce to LaTeX, render one image

Failures never abort the stream. A math segment that cannot be rendered
or encoded is written as its literal source (e.g. "$x^$") with a warning;
a failed whole document is echoed unchanged.

Plain text and math of one line are styled together: every math segment is
replaced with a placeholder, the line is styled, then each placeholder is
swapped for the image escape (or the literal fallback). Emphasis can thus
span math ("**energy $E$ here**"), and neither escape sequences nor fallback
text are seen by the Markdown parser.
"""

from typing import Dict, Iterable, List, Optional, TextIO

from ..config.settings import AppSettings, appsettings
from ..models.colour import RenderColours
from ..models.interfaces import DocumentRenderer, ImageEncoder, MathRenderer
from ..models.segment import Diagnostic, Segment, SegmenterState
from .document import DocumentParser
from .emphasis import EmphasisRenderer
from .errors import DmlError, EncodeError, RenderError, TransductionError
from .grammar import brackets_normalize
from .log import LOG, logger
from .segmenter import line_process, stream_finish
from .transducer import LatexTransducer


DIAGNOSTIC_PREVIEW = 60


def preview_make(text: str, limit: int = DIAGNOSTIC_PREVIEW) -> str:
    """Single-line, length-limited rendition of text for log messages"""
    flat = text.replace("\n", "\\n")
    return flat if len(flat) <= limit else flat[:limit] + "..."


class Pipeline:
    """
    Drives segmentation, rendering and output

    Attributes:
        renderer: Renders math expressions
        encoder: Turns rendered images into terminal output
        colours: Resolved palette passed to every render
        target_rows: Image height in rows (0 = default per math kind)
        dpi: Rasterization density
        document_renderer: Renders whole documents (defaults to renderer)
        debug: Log parser details
        settings: Source of the placeholder format
    """

    def __init__(
        self,
        renderer: MathRenderer,
        encoder: ImageEncoder,
        colours: RenderColours,
        target_rows: int = 0,
        dpi: int = 300,
        document_renderer: Optional[DocumentRenderer] = None,
        debug: bool = False,
        settings: AppSettings = appsettings,
    ) -> None:
        self.renderer = renderer
        self.encoder = encoder
        self.colours = colours
        self.target_rows = target_rows
        self.dpi = dpi
        self.document_renderer = document_renderer
        self.debug = debug
        self.settings = settings
        self.emphasis = EmphasisRenderer()

    def stream_render(self, lines: Iterable[str], out: TextIO) -> int:
        """
        Render a stream of lines to out, one flushed line at a time

        Args:
            lines: Input lines, with or without terminators (e.g. sys.stdin)
            out: Text stream receiving styled text and image escapes

        Returns:
            Number of math segments that fell back to their literal source
        """
        failed = 0
        state = SegmenterState()
        lineno = 0
        for lineno, line in enumerate(lines, start=1):
            result = line_process(state, line)
            state = result.state
            self.diagnostics_report(result.diagnostics, lineno)
            if not result.segments:
                LOG(f"Line {lineno}: buffered in display math", level=3)
                continue
            LOG(f"Line {lineno}: {len(result.segments)} segment(s)", level=3)
            failed += self.line_write(result.segments, out)

        finish = stream_finish(state)
        self.diagnostics_report(finish.diagnostics, lineno)
        for segment in finish.segments:
            # never styled: this is raw input that failed to parse
            out.write(segment.source)
        out.flush()

        if failed:
            LOG(f"{failed} math segment(s) shown as literal text", level=2)
        return failed

    def line_write(self, segments: List[Segment], out: TextIO) -> int:
        """
        Style, render and write the segments completed by one line

        Returns:
            Number of math segments that failed to render
        """
        failed = 0
        pieces: List[str] = []
        replacements: Dict[int, str] = {}

        for segment in segments:
            if not segment.is_math:
                pieces.append(segment.content)
                continue
            index = len(replacements)
            pieces.append(self.settings.placeHolder_make(index))
            rendered = self.segment_render(segment)
            if rendered is None:
                failed += 1
                rendered = segment.source
            replacements[index] = rendered

        styled = self.emphasis.terminal_style("".join(pieces))
        out.write(self.placeholders_substitute(styled, replacements))
        out.flush()
        return failed

    def segment_render(self, segment: Segment) -> Optional[str]:
        """
        Render and encode one math segment

        Returns:
            Encoded image string, or None if rendering or encoding failed
        """
        try:
            image = self.renderer.render(segment.expression, self.colours, segment.is_display, self.dpi)
            return self.encoder.encode(image, segment.is_display, self.target_rows)
        except (RenderError, EncodeError) as e:
            logger.warning(f"Could not render {segment.kind.value} math '{preview_make(segment.source.strip())}': {e}")
            return None

    def placeholders_substitute(self, styled: str, replacements: Dict[int, str]) -> str:
        """Replace each math placeholder in a styled line with its rendering"""

        def placeholder_swap(match) -> str:
            index = self.settings.mathIndex_extract(match.group(0))
            if index is None or index not in replacements:
                return match.group(0)
            return replacements[index]

        return self.settings.placeHolder_pattern().sub(placeholder_swap, styled)

    def diagnostics_report(self, diagnostics: List[Diagnostic], lineno: int) -> None:
        for diagnostic in diagnostics:
            logger.warning(f"Line {lineno}: {diagnostic.message}: '{preview_make(diagnostic.source)}'")

    def document_render(self, source: str, out: TextIO) -> bool:
        """
        Render the whole input as a single LaTeX document image

        Args:
            source: Complete Markdown + LaTeX input
            out: Text stream receiving the image (or the echoed input)

        Returns:
            True if the image was written; False if the input was echoed
            unchanged because a stage failed
        """
        if not source.strip():
            out.write(source)
            out.flush()
            return True

        try:
            encoded = self.document_encode(source)
        except DmlError as e:
            logger.error(f"Whole-document render failed, echoing input: {e}")
            out.write(source)
            out.flush()
            return False

        out.write(encoded)
        out.flush()
        return True

    def document_encode(self, source: str) -> str:
        """
        Run the whole-document stages, producing the encoded image

        Raises:
            DmlError: From any stage; nothing has been written yet
        """
        renderer = self.document_renderer or self.renderer
        if not isinstance(renderer, DocumentRenderer):
            raise RenderError(f"{type(renderer).__name__} cannot render whole documents")

        normalized = brackets_normalize(source)
        LOG("Parsing Markdown document...", level=2)
        tree = DocumentParser(debug=self.debug).parse(normalized)

        body = LatexTransducer().latex_generate(tree)
        if not body.strip():
            raise TransductionError("document produced no LaTeX content")
        LOG(f"Generated {len(body)} characters of LaTeX", level=2)

        image = renderer.document_render(body, self.colours, self.dpi)
        return self.encoder.encode(image, True, self.target_rows)
