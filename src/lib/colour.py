"""
Colour resolution for math rendering

Maps a colour name or hex string to a canonical uppercase #RRGGBB value,
computes its complement (used as background and transparency key), and
derives the background-removal tolerance for the rasterizer.

Nothing here raises on bad input: an unrecognized colour resolves to None
and palette_resolve() substitutes the default white-on-black palette.
"""

import re
from typing import Dict, Optional, Tuple

from ..models.colour import FuzzPolicy, RenderColours


DEFAULT_COLOUR = "#FFFFFF"

HEX_PATTERN = re.compile(r'^#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$')

# CSS/X11 names
NAMED_COLOURS: Dict[str, str] = {
    "black": "#000000",
    "white": "#FFFFFF",
    "red": "#FF0000",
    "green": "#00FF00",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "cyan": "#00FFFF",
    "magenta": "#FF00FF",
    "gray": "#808080",
    "grey": "#808080",
    "orange": "#FFA500",
    "purple": "#800080",
    "brown": "#A52A2A",
    "pink": "#FFC0CB",
    "lime": "#00FF00",
    "navy": "#000080",
    "teal": "#008080",
    "maroon": "#800000",
    "olive": "#808000",
    "silver": "#C0C0C0",
}


def hex_is(spec: str) -> bool:
    """Check if a string is #RGB or #RRGGBB hex"""
    return HEX_PATTERN.match(spec) is not None


def hex_expand(spec: str) -> str:
    """
    Expand #RGB to #RRGGBB and uppercase the digits

    Example:
        >>> hex_expand("#f0a")
        '#FF00AA'
    """
    if len(spec) == 4:
        spec = "#" + "".join(digit * 2 for digit in spec[1:])
    return spec.upper()


def colour_resolve(spec: Optional[str]) -> Optional[str]:
    """
    Resolve a colour name or hex string to canonical #RRGGBB

    Args:
        spec: Case-insensitive colour name or #RGB/#RRGGBB string

    Returns:
        Uppercase #RRGGBB, or None when the spec is not recognized

    Example:
        >>> colour_resolve("Red")
        '#FF0000'
        >>> colour_resolve("#0f0")
        '#00FF00'
        >>> colour_resolve("chartreuse") is None
        True
    """
    if not spec:
        return None
    spec = spec.strip().lower()
    if hex_is(spec):
        return hex_expand(spec)
    return NAMED_COLOURS.get(spec)


def channels_split(hex_colour: str) -> Tuple[int, int, int]:
    """Split a hex colour into its (R, G, B) integer channels"""
    hex_colour = hex_expand(hex_colour)
    return (
        int(hex_colour[1:3], 16),
        int(hex_colour[3:5], 16),
        int(hex_colour[5:7], 16),
    )


def hex_complement(hex_colour: str) -> str:
    """
    Per-channel bitwise complement of a hex colour

    Example:
        >>> hex_complement("#FFFFFF")
        '#000000'
        >>> hex_complement("#123456")
        '#EDCBA9'
    """
    r, g, b = channels_split(hex_colour)
    return f"#{0xFF ^ r:02X}{0xFF ^ g:02X}{0xFF ^ b:02X}"


def fuzz_level(hex_colour: Optional[str], policy: Optional[FuzzPolicy] = None) -> float:
    """
    Background-removal tolerance (percent) for text of the given colour

    Brightness is ITU-R 601 luma (0.299R + 0.587G + 0.114B), saturation is
    (max - min) / max over the channels. Rules are applied in order, later
    rules overriding earlier ones:

        1. base tolerance
        2. very bright and nearly unsaturated -> policy.bright
        3. dominant red -> policy.red
        4. dominant blue -> policy.blue
        5. other saturated colours brighter than the dark threshold -> policy.saturated

    Args:
        hex_colour: Canonical hex colour, or None when unresolved
        policy: Tolerance table; defaults to FuzzPolicy()

    Returns:
        Tolerance percentage
    """
    policy = policy or FuzzPolicy()
    if not hex_colour:
        return policy.unresolved

    r, g, b = channels_split(hex_colour)
    brightness = (0.299 * r + 0.587 * g + 0.114 * b) / 255.0

    high = max(r, g, b)
    low = min(r, g, b)
    saturation = (high - low) / high if high > 0 else 0.0

    is_red = r > 200 and g < 100 and b < 100
    is_blue = b > 200 and r < 100 and g < 100

    fuzz = policy.base
    if brightness > policy.bright_threshold and saturation < policy.low_saturation:
        fuzz = policy.bright
    if is_red:
        fuzz = policy.red
    if is_blue:
        fuzz = policy.blue
    if (
        saturation > policy.high_saturation
        and brightness > policy.dark_threshold
        and not (is_red or is_blue)
    ):
        fuzz = policy.saturated
    return fuzz


def palette_resolve(spec: Optional[str], policy: Optional[FuzzPolicy] = None) -> RenderColours:
    """
    Resolve a user colour spec into the full render colour set

    Unrecognized specs fall back to white text on black; this never raises.

    Args:
        spec: Colour name or hex string from the CLI/settings
        policy: Fuzz tolerance table

    Returns:
        RenderColours with foreground, complement background and fuzz
    """
    foreground = colour_resolve(spec)
    resolved = foreground is not None
    if foreground is None:
        foreground = DEFAULT_COLOUR
    return RenderColours(
        foreground=foreground,
        background=hex_complement(foreground),
        fuzz=fuzz_level(foreground, policy),
        resolved=resolved,
    )


def latex_colourDefine(name: str, hex_colour: str) -> str:
    r"""
    LaTeX xcolor definition line for a hex colour

    Example:
        >>> latex_colourDefine("usercolor", "#FF0000")
        '\\definecolor{usercolor}{HTML}{FF0000}\n'
    """
    return f"\\definecolor{{{name}}}{{HTML}}{{{hex_expand(hex_colour)[1:]}}}\n"
