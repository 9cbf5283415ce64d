"""
Exception hierarchy for dml

Segment-level errors (RenderError, EncodeError) are recovered by the
pipeline driver, which substitutes the literal source and continues.
In whole-document mode any DmlError is fatal for the invocation.
"""


class DmlError(Exception):
    """Base class for all dml errors"""
    pass


class RenderError(DmlError):
    """Raised when a LaTeX expression or document cannot be rendered to an image"""
    pass


class EncodeError(DmlError):
    """Raised when an image cannot be encoded for terminal display"""
    pass


class TransductionError(DmlError):
    """Raised when a Markdown document cannot be parsed or converted to LaTeX"""
    pass
