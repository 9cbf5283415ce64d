"""
Centralized logging using Loguru with context-aware verbosity.

All diagnostics go to stderr; stdout carries only rendered output, so dml
can sit in a pipe (e.g. `cat notes.md | dml`) without log lines mixing into
the image stream.

Two channels:
- LOG(message, level): progress and debug trace, shown only if the
  connected ProgramState's verbosity is at least `level`
- logger.warning / logger.error: recovered failures (a math segment that
  could not be rendered, an unterminated display block, a whole-document
  render that fell back to echoing the input); always shown

Usage:
    from lib.log import LOG, logger, state_connectToLogger

    state_connectToLogger(state)
    LOG("Segmenting input...", level=2)
    logger.warning("Render failed for '$x^$'")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <18}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: Object with a `verbosity` attribute (normally ProgramState)
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru arguments

    Verbosity levels:
        1 = Normal (default)
        2 = Verbose (-v)
        3 = Debug (-vv or --debug)

    Example:
        LOG("Rendering whole document", level=1)
        LOG("Line 12: 3 segments", level=2)
        LOG("Running: pdflatex -interaction=nonstopmode ...", level=3)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)
