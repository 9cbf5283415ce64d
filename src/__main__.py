#!/usr/bin/env python3
"""
dml - Markdown and LaTeX math in the terminal

A stdin filter that renders LaTeX math embedded in Markdown as images in a
Kitty-compatible terminal, and styles **bold** and *italic* text.

Math delimiters:
    $...$       inline          \\(...\\)   inline
    $$...$$     display         \\[...\\]   display (may span lines)

Modes:
    - Line streaming (default): each line is written as soon as it is read,
      so dml can follow a live stream (e.g. LLM output)
    - Whole document (--render-all-latex): the entire input is typeset as
      one LaTeX document and shown as a single image

Failures never lose input: math that cannot be rendered is shown as its
literal source, and a failed whole-document render echoes the input.

Usage:
    cat notes.md | dml
    echo 'Euler: $e^{i\\pi} + 1 = 0$' | dml -c cyan
    dml --render-all-latex --dpi 600 < paper.md

Requires pdflatex and ImageMagick's convert on PATH.
"""

import sys
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import List, Optional

from .config import appsettings
from .lib import Pipeline, LatexRenderer, KittyEncoder, __version__, LOG, state_connectToLogger
from .lib.colour import palette_resolve
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    prog="dml",
    description="dml - render Markdown with LaTeX math in the terminal (Kitty graphics protocol)",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "-c",
    "--colour",
    default=appsettings.colour,
    type=str,
    help="LaTeX text colour: a name (e.g. red, navy) or #RGB/#RRGGBB",
)

parser.add_argument(
    "-s",
    "--size",
    default=appsettings.size,
    type=int,
    help="Image height in terminal rows (0 = 1 row inline, auto-size display)",
)

parser.add_argument(
    "-d",
    "--dpi",
    default=appsettings.dpi,
    type=int,
    help="Rasterization density for rendered LaTeX",
)

parser.add_argument(
    "-l",
    "--render-all-latex",
    dest="renderAllLatex",
    default=appsettings.render_all_latex,
    action="store_true",
    help="Render the whole input as a single LaTeX document image",
)

parser.add_argument(
    "-D",
    "--debug",
    default=appsettings.debug,
    action="store_true",
    help="Debug output on stderr (same as -vv)",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def options_resolve(inputstate: ProgramState) -> ProgramState:
    """
    Validate numeric options and resolve the colour palette.

    Out-of-range values fall back to defaults rather than failing: a
    negative size becomes 0 (automatic) and a non-positive dpi becomes the
    configured default.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - palette: Resolved RenderColours
    """
    state = inputstate.copy()

    if state.debug:
        state.verbosity = max(state.verbosity, 3)
        state_connectToLogger(state)

    if state.size < 0:
        LOG(f"Size {state.size} is negative; using automatic sizing", level=1)
        state.size = 0
    if state.dpi <= 0:
        LOG(f"DPI {state.dpi} is not positive; using {appsettings.dpi}", level=1)
        state.dpi = appsettings.dpi

    state.palette = palette_resolve(state.colour, appsettings.fuzz)
    if not state.palette.resolved:
        LOG(f"Unknown colour '{state.colour}'; using white", level=1)
    LOG(
        f"Palette: text {state.palette.foreground} on {state.palette.background}, "
        f"fuzz {state.palette.fuzz:.1f}%",
        level=2,
    )
    return state


def input_render(inputstate: ProgramState) -> ProgramState:
    """
    Render stdin to stdout in the selected mode.

    Args:
        inputstate: Program state with palette resolved

    Returns:
        ProgramState with added fields:
            - renderOK: False only if a whole-document render fell back
            - failedSegments: Math segments shown as literal text
    """
    state = inputstate.copy()
    stdin = state.stdin or sys.stdin
    stdout = state.stdout or sys.stdout

    renderer = LatexRenderer(
        latex_command=appsettings.latex_command,
        convert_command=appsettings.convert_command,
        timeout=appsettings.command_timeout,
        debug=state.debug,
    )
    driver = Pipeline(
        renderer=renderer,
        encoder=KittyEncoder(debug=state.debug),
        colours=state.palette,
        target_rows=state.size,
        dpi=state.dpi,
        debug=state.debug,
    )

    if state.renderAllLatex:
        LOG("Rendering whole input as one LaTeX document...", level=2)
        state.renderOK = driver.document_render(stdin.read(), stdout)
    else:
        LOG("Streaming input line by line...", level=2)
        state.failedSegments = driver.stream_render(stdin, stdout)
        state.renderOK = True
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Report the outcome and set the exit status.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if a whole-document render failed
    """
    state: ProgramState = inputstate.copy()
    if state.failedSegments:
        LOG(f"{state.failedSegments} math segment(s) could not be rendered", level=2)
    if not state.renderOK:
        sys.exit(1)
    return state


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point - render stdin to stdout.

    Runs the pipeline:
        1. options_resolve: Validate options, resolve colours
        2. input_render: Stream or whole-document render
        3. results_report: Exit status

    Args:
        argv: Command line arguments (sys.argv[1:] when None)
    """
    options: Namespace = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, options_resolve, input_render, results_report)


if __name__ == "__main__":
    main()
