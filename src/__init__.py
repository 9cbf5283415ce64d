"""
dml - Markdown and LaTeX math in the terminal

Renders LaTeX math embedded in Markdown as images inline in a Kitty-compatible
terminal, with bold/italic text styling.
"""

__version__ = "1.0.0"

from .lib import Pipeline, LatexRenderer, KittyEncoder, LOG, state_connectToLogger

__all__ = ["Pipeline", "LatexRenderer", "KittyEncoder", "LOG", "state_connectToLogger", "__version__"]
