"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from argparse import Namespace
from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, Optional, TextIO, Type, TypeVar

from .colour import RenderColours


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for a dml run (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: CLI options (colour, size, dpi, renderAllLatex, debug, verbosity)
        - options_resolve: palette, validated size/dpi, debug verbosity
        - input_render: renderOK, failedSegments
        - results_report: (no additions, terminal stage)

    Attributes:
        colour: Requested text colour (name or hex)
        size: Target image rows (0 = default per math kind)
        dpi: Rasterization density
        renderAllLatex: Whole-document mode instead of line streaming
        debug: Debug output on stderr
        verbosity: Logging verbosity level (1-3)
        stdin: Input stream (sys.stdin when None)
        stdout: Output stream (sys.stdout when None)
        palette: Resolved text/background colours and fuzz
        renderOK: Whole-document render succeeded (always True when streaming)
        failedSegments: Math segments shown as literal text
    """

    # CLI arguments
    colour: str = field(default="white")
    size: int = field(default=0)
    dpi: int = field(default=300)
    renderAllLatex: bool = field(default=False)
    debug: bool = field(default=False)
    verbosity: int = field(default=1)

    # Streams
    stdin: Optional[TextIO] = field(default=None)
    stdout: Optional[TextIO] = field(default=None)

    # Pipeline state
    palette: Optional[RenderColours] = field(default=None)
    renderOK: bool = field(default=False)
    failedSegments: int = field(default=0)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, **extra
    ) -> "ProgramState":
        """
        Create ProgramState from an argparse Namespace.

        Namespace entries that are not ProgramState fields are ignored;
        keyword arguments override the parsed options.

        Args:
            options: Parsed CLI arguments
            **extra: Explicit field values (e.g. stdin, stdout)

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**{**filtered_options, **extra})

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(initial_state, options_resolve, input_render, results_report)

    This is equivalent to:
        results_report(input_render(options_resolve(initial_state)))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
