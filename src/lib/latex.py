"""
LaTeX math renderer

Renders math expressions (and whole LaTeX bodies) to transparent PNG
images with the external toolchain:

    1. Fill a standalone LaTeX template with colour definitions and content
    2. pdflatex -> PDF
    3. ImageMagick convert -> PNG, trimmed, with the background colour
       keyed out as transparent

Text colour C is typeset on background ~C (its complement), and ~C is then
removed with a colour-dependent fuzz tolerance (see colour.fuzz_level).

On failure the temporary directory is kept so the LaTeX log can be
inspected; its path is part of the RenderError message.
"""

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List

from ..models.colour import RenderColours
from .colour import latex_colourDefine
from .errors import RenderError
from .log import LOG


MATH_TEMPLATE = r"""\documentclass[border=2pt,preview]{standalone}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage{amsfonts}
\usepackage{mathtools}
\usepackage[dvipsnames,svgnames,table]{xcolor}
%(colour_defs)s
\begin{document}
\pagecolor{bgcolor}
\color{usercolor}
%(content)s
\end{document}
"""

DOCUMENT_TEMPLATE = r"""\documentclass[border=3pt,preview]{standalone}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage{amsfonts}
\usepackage{mathtools}
\usepackage[dvipsnames,svgnames,table]{xcolor}
\usepackage[utf8]{inputenc}
\usepackage[T1]{fontenc}
\usepackage{lmodern}
\usepackage{verbatim}
%(colour_defs)s
\begin{document}
\pagecolor{bgcolor}
\color{usercolor}
%(content)s
\end{document}
"""


def colourDefs_make(colours: RenderColours) -> str:
    """xcolor definitions for the text colour and its complement background"""
    return latex_colourDefine("usercolor", colours.foreground) + latex_colourDefine(
        "bgcolor", colours.background
    )


def math_wrap(expression: str, display_mode: bool) -> str:
    r"""
    Wrap an expression in math delimiters for the template

    Example:
        >>> math_wrap("x^2", False)
        '$x^2$'
        >>> math_wrap("x^2", True)
        '\\[ x^2 \\]'
    """
    if display_mode:
        # a little breathing room around display math
        return f"\\[ {expression} \\]"
    return f"${expression}$"


class LatexRenderer:
    """
    pdflatex + ImageMagick implementation of MathRenderer and DocumentRenderer

    Attributes:
        latex_command: pdflatex executable
        convert_command: ImageMagick convert executable
        timeout: Seconds each external command may run
        debug: Log template and command details
    """

    def __init__(
        self,
        latex_command: str = "pdflatex",
        convert_command: str = "convert",
        timeout: float = 30.0,
        debug: bool = False,
    ) -> None:
        self.latex_command = latex_command
        self.convert_command = convert_command
        self.timeout = timeout
        self.debug = debug

    def render(
        self, expression: str, colours: RenderColours, display_mode: bool, dpi: int
    ) -> bytes:
        """
        Render one math expression to PNG bytes

        Args:
            expression: LaTeX math without delimiters
            colours: Resolved text/background colours and fuzz
            display_mode: Typeset as display math instead of inline
            dpi: Rasterization density

        Returns:
            PNG image bytes

        Raises:
            RenderError: Empty expression, missing tool, tool failure or timeout
        """
        expression = expression.strip()
        if not expression:
            raise RenderError("empty LaTeX content")

        if self.debug:
            LOG(f"Rendering {'display' if display_mode else 'inline'} math at {dpi} dpi", level=3)

        tex = MATH_TEMPLATE % {
            "colour_defs": colourDefs_make(colours),
            "content": math_wrap(expression, display_mode),
        }
        return self.tex_rasterize(tex, "eq", colours, dpi, ["-alpha", "on", "-background", "none"])

    def document_render(self, body: str, colours: RenderColours, dpi: int) -> bytes:
        """
        Render a whole LaTeX body (from the transducer) to one PNG

        Raises:
            RenderError: Missing tool, tool failure or timeout
        """
        if self.debug:
            LOG(f"Rendering full document ({len(body)} chars) at {dpi} dpi", level=3)

        tex = DOCUMENT_TEMPLATE % {
            "colour_defs": colourDefs_make(colours),
            "content": body,
        }
        return self.tex_rasterize(tex, "fulldoc", colours, dpi, ["-quality", "100"])

    def tex_rasterize(
        self,
        tex: str,
        stem: str,
        colours: RenderColours,
        dpi: int,
        convert_options: List[str],
    ) -> bytes:
        """
        Compile a complete LaTeX file and convert the PDF to a transparent PNG

        Args:
            tex: Complete LaTeX source
            stem: Base file name inside the temporary directory
            colours: Provides the transparency key and fuzz tolerance
            dpi: Rasterization density
            convert_options: Mode-specific convert options

        Returns:
            PNG image bytes
        """
        workdir = Path(tempfile.mkdtemp(prefix="dml-"))
        tex_file = workdir / f"{stem}.tex"
        pdf_file = workdir / f"{stem}.pdf"
        png_file = workdir / f"{stem}.png"

        try:
            tex_file.write_text(tex, encoding="utf-8")
        except OSError as e:
            shutil.rmtree(workdir, ignore_errors=True)
            raise RenderError(f"Could not write LaTeX source: {e}") from e

        self.command_run(
            [self.latex_command, "-interaction=nonstopmode", "-output-directory", str(workdir), str(tex_file)],
            workdir,
        )
        if not pdf_file.exists():
            raise RenderError(f"{self.latex_command} produced no PDF\nTemp dir: {workdir}")

        self.command_run(
            [self.convert_command, "-density", str(dpi)]
            + convert_options
            + ["-trim", "+repage", "-fuzz", f"{colours.fuzz:.1f}%", "-transparent", colours.transparent]
            + [str(pdf_file), str(png_file)],
            workdir,
        )
        if not png_file.exists():
            raise RenderError(f"{self.convert_command} appeared to succeed but created no PNG\nTemp dir: {workdir}")

        try:
            image = png_file.read_bytes()
        except OSError as e:
            raise RenderError(f"Failed to read PNG '{png_file}': {e}\nTemp dir: {workdir}") from e

        shutil.rmtree(workdir, ignore_errors=True)
        return image

    def command_run(self, command: List[str], workdir: Path) -> None:
        """
        Run an external command, translating every failure into RenderError

        Args:
            command: Argument vector
            workdir: Temporary directory (reported on failure)
        """
        if self.debug:
            LOG(f"Running: {' '.join(command)}", level=3)
        try:
            subprocess.run(
                command,
                cwd=workdir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except FileNotFoundError as e:
            raise RenderError(f"'{command[0]}' not found; is it installed and on PATH?") from e
        except subprocess.TimeoutExpired as e:
            raise RenderError(f"'{command[0]}' timed out after {self.timeout}s\nTemp dir: {workdir}") from e
        except subprocess.CalledProcessError as e:
            raise RenderError(
                f"'{command[0]}' failed with exit code {e.returncode}\n"
                f"STDOUT:\n{e.stdout}\nSTDERR:\n{e.stderr}\nTemp dir: {workdir}"
            ) from e
