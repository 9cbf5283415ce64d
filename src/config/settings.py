"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use DML_ prefix (e.g., DML_DPI=600, DML_FUZZ__BLUE=75).

Settings can also be loaded from a .env file in the project root. CLI flags
override these values; the result is threaded explicitly into each component.
"""

import re

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.colour import FuzzPolicy


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use DML_ prefix. Nested fuzz policy values use a
    double underscore.

    Examples:
        DML_COLOUR=#00FF00
        DML_DPI=600
        DML_LATEX_COMMAND=/usr/local/texlive/bin/pdflatex
        DML_FUZZ__RED=60
    """

    model_config = SettingsConfigDict(
        env_prefix="DML_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # Rendering configuration
    colour: str = Field(
        default="white",
        description="LaTeX text colour: a colour name or #RGB/#RRGGBB hex string",
    )

    size: int = Field(
        default=0,
        ge=0,
        description="Target terminal rows for math images (0 = 1 row inline, auto for display)",
    )

    dpi: int = Field(
        default=300,
        gt=0,
        description="Density used when rasterizing the LaTeX PDF",
    )

    render_all_latex: bool = Field(
        default=False,
        description="Render the whole input as a single LaTeX document image",
    )

    debug: bool = Field(
        default=False,
        description="Enable verbose debug output on stderr",
    )

    # External tool configuration
    latex_command: str = Field(
        default="pdflatex",
        description="LaTeX compiler executable",
    )

    convert_command: str = Field(
        default="convert",
        description="ImageMagick convert executable",
    )

    command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds an external tool may run before the render is abandoned",
    )

    fuzz: FuzzPolicy = Field(
        default_factory=FuzzPolicy,
        description="Background-removal tolerance heuristic (percentages)",
    )

    # Line styling configuration
    placeholder_prefix: str = Field(
        default="\ue000",
        description="Prefix for math placeholders in styled lines (private-use codepoint, survives markdown parsing)",
    )

    placeholder_suffix: str = Field(
        default="\ue001",
        description="Suffix for math placeholders in styled lines",
    )

    def placeHolder_make(self, index: int) -> str:
        """
        Generate a placeholder string for the math segment at given index.

        Args:
            index: Zero-based index of the math segment within its line

        Returns:
            Placeholder string (e.g., "\\ue0000\\ue001")

        Example:
            >>> settings = AppSettings()
            >>> settings.placeHolder_make(0)
            '\\ue0000\\ue001'
        """
        return f"{self.placeholder_prefix}{index}{self.placeholder_suffix}"

    def placeHolder_pattern(self) -> re.Pattern[str]:
        """Compiled regex matching any placeholder made by placeHolder_make()"""
        return re.compile(
            re.escape(self.placeholder_prefix) + r"\d+" + re.escape(self.placeholder_suffix)
        )

    def mathIndex_extract(self, placeholder: str) -> int | None:
        """
        Extract the math segment index from a placeholder string.

        Args:
            placeholder: Placeholder string to parse

        Returns:
            Segment index if valid placeholder, None otherwise
        """
        if not placeholder.startswith(self.placeholder_prefix):
            return None
        if not placeholder.endswith(self.placeholder_suffix):
            return None

        content = placeholder[len(self.placeholder_prefix) : -len(self.placeholder_suffix)]

        try:
            return int(content)
        except ValueError:
            return None


# Singleton instance - import this in your code
appsettings = AppSettings()
