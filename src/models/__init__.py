"""
Models package for dml

Contains data structures and type definitions shared by the segmenter,
the document transducer and the pipeline driver.
"""

from .state import ProgramState, pipeline
from .colour import FuzzPolicy, RenderColours
from .grammar import DelimiterPair, DelimiterMatch
from .segment import Segment, SegmentKind, SegmenterMode, SegmenterState, Diagnostic, LineResult
from .document import DocumentNode, NodeKind
from .interfaces import MathRenderer, DocumentRenderer, ImageEncoder

__all__ = [
    "ProgramState",
    "pipeline",
    "FuzzPolicy",
    "RenderColours",
    "DelimiterPair",
    "DelimiterMatch",
    "Segment",
    "SegmentKind",
    "SegmenterMode",
    "SegmenterState",
    "Diagnostic",
    "LineResult",
    "DocumentNode",
    "NodeKind",
    "MathRenderer",
    "DocumentRenderer",
    "ImageEncoder",
]
