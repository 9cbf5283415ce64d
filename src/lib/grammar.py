r"""
Math delimiter grammar

Four delimiter pairs are recognized:

    $...$       inline
    $$...$$     display (may span lines)
    \(...\)     inline
    \[...\]     display (may span lines)

A dollar sign preceded by a backslash (\$) is an escaped literal and never
a delimiter. When an inline and a display opening start at the same
position (the shared "$" of "$$"), the display opening wins, so "$$" is
never consumed as two adjacent inline delimiters. Otherwise the earliest
opening in the line wins.

Closing delimiters are matched non-greedily: the first close after the
opening ends the span, so "$a$ $b$" is two spans, not "a$ $b". An inline
"$" is never closed by half of a "$$": in "$5 and $$x$$" the first "$" is
left unclosed (literal) and "$$x$$" is display math.
"""

import re
from typing import Optional, Tuple

from ..models.grammar import DelimiterPair, DelimiterMatch


DOLLAR_DISPLAY = DelimiterPair(
    name="dollar-display",
    opener="$$",
    closer="$$",
    open_pattern=re.compile(r'(?<!\\)\$\$'),
    close_pattern=re.compile(r'(?<!\\)\$\$'),
    is_display=True,
    allows_multiline=True,
)

BRACKET_DISPLAY = DelimiterPair(
    name="bracket-display",
    opener="\\[",
    closer="\\]",
    open_pattern=re.compile(r'\\\['),
    close_pattern=re.compile(r'\\\]'),
    is_display=True,
    allows_multiline=True,
)

DOLLAR_INLINE = DelimiterPair(
    name="dollar-inline",
    opener="$",
    closer="$",
    open_pattern=re.compile(r'(?<!\\)\$'),
    # a "$" that is half of "$$" never closes inline math
    close_pattern=re.compile(r'(?<![\\$])\$(?!\$)'),
    is_display=False,
    allows_multiline=False,
)

PAREN_INLINE = DelimiterPair(
    name="paren-inline",
    opener="\\(",
    closer="\\)",
    open_pattern=re.compile(r'\\\('),
    close_pattern=re.compile(r'\\\)'),
    is_display=False,
    allows_multiline=False,
)

# Display pairs first: on a tie in position, the earlier entry wins
DELIMITER_PAIRS: Tuple[DelimiterPair, ...] = (
    DOLLAR_DISPLAY,
    BRACKET_DISPLAY,
    DOLLAR_INLINE,
    PAREN_INLINE,
)

# Whole-document preprocessing: bracket forms rewritten to dollar forms
DISPLAY_BRACKET_SPAN = re.compile(r'\\\[(.+?)\\\]', re.DOTALL)
INLINE_PAREN_SPAN = re.compile(r'\\\((.+?)\\\)', re.DOTALL)


def open_findNext(line: str, from_pos: int = 0) -> Optional[DelimiterMatch]:
    """
    Find the earliest opening delimiter at or after from_pos

    Args:
        line: Text to scan
        from_pos: Position to start scanning at

    Returns:
        DelimiterMatch for the earliest opening (display preferred on a
        tie), or None if no opening delimiter remains

    Example:
        >>> open_findNext("a $$b$$").pair.name
        'dollar-display'
        >>> open_findNext("a $$b$$").start
        2
    """
    best: Optional[DelimiterMatch] = None
    for pair in DELIMITER_PAIRS:
        match = pair.open_pattern.search(line, from_pos)
        if match is None:
            continue
        if best is None or match.start() < best.start:
            best = DelimiterMatch(pair=pair, start=match.start(), end=match.end())
    return best


def close_find(line: str, from_pos: int, pair: DelimiterPair) -> Optional[DelimiterMatch]:
    """
    Find the first closing delimiter of a pair at or after from_pos

    Args:
        line: Text to scan
        from_pos: Position to start scanning at (just past the opening)
        pair: Delimiter pair whose closer is wanted

    Returns:
        DelimiterMatch spanning the closing delimiter, or None
    """
    match = pair.close_pattern.search(line, from_pos)
    if match is None:
        return None
    return DelimiterMatch(pair=pair, start=match.start(), end=match.end())


def body_isEmpty(body: str) -> bool:
    """
    Check if a math body has no renderable content

    Empty or whitespace-only bodies are not treated as math: the delimited
    text passes through literally and no renderer call is made.
    """
    return not body.strip()


def brackets_normalize(text: str) -> str:
    r"""
    Rewrite bracket-style math to dollar style

    The document parser's math extension only understands dollar
    delimiters, so \[...\] becomes $$...$$ and \(...\) becomes $...$
    (bodies trimmed) before parsing.

    Example:
        >>> brackets_normalize(r"see \( x \) and \[y\]")
        'see $x$ and $$y$$'
    """
    text = DISPLAY_BRACKET_SPAN.sub(lambda match: f"$${match.group(1).strip()}$$", text)
    text = INLINE_PAREN_SPAN.sub(lambda match: f"${match.group(1).strip()}$", text)
    return text
