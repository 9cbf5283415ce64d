"""
dml - Markdown and LaTeX math in the terminal

Library components: segmenter, document transducer, renderers, encoder and
the pipeline driver that wires them together.
"""

__version__ = "1.0.0"

from .segmenter import line_process, lines_segment, stream_finish
from .document import DocumentParser
from .transducer import LatexTransducer
from .emphasis import EmphasisRenderer
from .latex import LatexRenderer
from .kitty import KittyEncoder
from .pipeline import Pipeline
from .errors import DmlError, RenderError, EncodeError, TransductionError
from .log import LOG, logger, state_connectToLogger

__all__ = [
    "line_process",
    "lines_segment",
    "stream_finish",
    "DocumentParser",
    "LatexTransducer",
    "EmphasisRenderer",
    "LatexRenderer",
    "KittyEncoder",
    "Pipeline",
    "DmlError",
    "RenderError",
    "EncodeError",
    "TransductionError",
    "LOG",
    "logger",
    "state_connectToLogger",
    "__version__",
]
