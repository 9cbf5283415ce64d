"""
Colour models

The fuzz policy is a tuned heuristic table, not a physical derivation; it is
a pydantic model so AppSettings can override any entry from the environment.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class FuzzPolicy(BaseModel):
    """
    Background-removal tolerance table (ImageMagick -fuzz percentages)

    Attributes:
        base: Tolerance for colours no rule below applies to
        unresolved: Tolerance when no colour could be resolved
        bright: Tolerance for very bright, nearly unsaturated colours (white)
        red: Tolerance for dominant reds (anti-aliasing fringes key out badly)
        blue: Tolerance for dominant blues
        saturated: Tolerance for other strongly saturated, not-dark colours
        bright_threshold: Luma above which a colour counts as very bright
        low_saturation: Saturation below which a colour counts as unsaturated
        high_saturation: Saturation above which a colour counts as saturated
        dark_threshold: Luma a saturated colour must exceed to get `saturated`
    """

    model_config = ConfigDict(frozen=True)

    base: float = 45.0
    unresolved: float = 50.0
    bright: float = 30.0
    red: float = 65.0
    blue: float = 70.0
    saturated: float = 55.0

    bright_threshold: float = 0.9
    low_saturation: float = 0.1
    high_saturation: float = 0.7
    dark_threshold: float = 0.3


@dataclass(frozen=True)
class RenderColours:
    """
    Resolved colour set handed to the math renderer

    Text of colour `foreground` is typeset on `background` (its complement),
    and `background` is then keyed out as transparent with `fuzz` tolerance.

    Attributes:
        foreground: Canonical #RRGGBB text colour
        background: Canonical #RRGGBB complement of the foreground
        fuzz: Background-removal tolerance percentage
        resolved: False when the requested colour was unrecognized and the
                  default palette was substituted
    """
    foreground: str
    background: str
    fuzz: float
    resolved: bool = True

    @property
    def transparent(self) -> str:
        """Colour keyed out of the rasterized image"""
        return self.background
