"""
Collaborator interfaces

The pipeline driver depends only on these protocols; the LaTeX toolchain
and the Kitty encoder in lib/ are the production implementations, and tests
substitute in-memory fakes.
"""

from typing import Protocol, runtime_checkable

from .colour import RenderColours


@runtime_checkable
class MathRenderer(Protocol):
    """Renders one math expression to image bytes"""

    def render(
        self, expression: str, colours: RenderColours, display_mode: bool, dpi: int
    ) -> bytes:
        """
        Render a non-empty math expression

        Raises:
            RenderError: If the expression cannot be rendered
        """
        ...


@runtime_checkable
class DocumentRenderer(Protocol):
    """Renders a whole LaTeX body to a single image"""

    def document_render(self, body: str, colours: RenderColours, dpi: int) -> bytes:
        """
        Raises:
            RenderError: If the document cannot be rendered
        """
        ...


@runtime_checkable
class ImageEncoder(Protocol):
    """Turns image bytes into a string the terminal displays as an image"""

    def encode(self, image: bytes, display_mode: bool, target_rows: int) -> str:
        """
        Args:
            image: Image bytes from a renderer
            display_mode: Display math (own block) vs inline math
            target_rows: Explicit row count, or 0 for the default
                         (1 row inline, auto-size for display)

        Raises:
            EncodeError: If the image cannot be encoded
        """
        ...
