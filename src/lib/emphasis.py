"""
Terminal emphasis renderer (line-streaming mode)

Styles Markdown bold/italic in a line of plain text with ANSI SGR codes.
The line is parsed inline-only, with no math extension: by the time text
reaches this stage math has been cut out by the segmenter, so a dollar sign
is just a dollar sign here.

Example:
    >>> EmphasisRenderer().terminal_style("This is **bold** and *italic*.")
    'This is \\x1b[1mbold\\x1b[22m and \\x1b[3mitalic\\x1b[23m.'
"""

from typing import Dict, List, Tuple

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode


BOLD_ON = "\x1b[1m"
BOLD_OFF = "\x1b[22m"
ITALIC_ON = "\x1b[3m"
ITALIC_OFF = "\x1b[23m"

# node type -> (on, off) codes; all other nodes only recurse
NODE_STYLES: Dict[str, Tuple[str, str]] = {
    "strong": (BOLD_ON, BOLD_OFF),
    "em": (ITALIC_ON, ITALIC_OFF),
}

# Backslash escapes kept as typed: the segmenter left these delimiters
# literal, so "\(" must not lose its backslash on output
KEPT_ESCAPES = set("$()[]")

# Escaped sequences the Markdown layer may leave behind
ESCAPE_CLEANUPS: List[Tuple[str, str]] = [
    ("\\n", "\n"),
    ("\\%", "%"),
]


class EmphasisRenderer:
    """
    Convert Markdown emphasis to ANSI styling

    Only inline syntax is interpreted; block syntax such as "# " or "- "
    at the start of a line is left as typed.
    """

    def __init__(self) -> None:
        # text_join would fold escapes and entities into plain text
        self.md = MarkdownIt("commonmark").disable("text_join")

    def terminal_style(self, text: str) -> str:
        """
        Style one line of text for the terminal

        Args:
            text: Plain text, optionally ending in a line terminator

        Returns:
            Text with bold/italic spans wrapped in ANSI codes and the line
            terminator preserved
        """
        body, terminator = text, ""
        for ending in ("\r\n", "\n"):
            if text.endswith(ending):
                body, terminator = text[: -len(ending)], ending
                break

        if not body:
            return text

        tokens = self.md.parseInline(body)
        styled = self.node_render(SyntaxTreeNode(tokens))
        return self.escapes_normalize(styled) + terminator

    def node_render(self, node: SyntaxTreeNode) -> str:
        """
        Recursively render a syntax tree node to styled text

        Args:
            node: markdown-it SyntaxTreeNode

        Returns:
            Styled text of the node and its children
        """
        if node.type in ("text", "code_inline", "html_inline"):
            return node.content
        if node.type == "text_special":
            return self.special_render(node)
        if node.type in ("softbreak", "hardbreak"):
            return "\n"

        inner = "".join(self.node_render(child) for child in node.children)
        if node.type == "link":
            return self.link_render(node, inner)
        if node.type in NODE_STYLES:
            on, off = NODE_STYLES[node.type]
            return on + inner + off
        return inner

    def special_render(self, node: SyntaxTreeNode) -> str:
        """
        Entities stay as typed (&amp; is shown as &amp;); escapes drop their
        backslash unless they escape a math delimiter
        """
        if node.info == "escape" and node.content not in KEPT_ESCAPES:
            return node.content
        return node.markup

    def link_render(self, node: SyntaxTreeNode, label: str) -> str:
        """Link label followed by its destination, unless they are the same"""
        href = str(node.attrs.get("href", ""))
        if not href or href == label or node.markup == "autolink":
            return label or href
        return f"{label} ({href})"

    def escapes_normalize(self, text: str) -> str:
        """Turn escaped newline/percent sequences back into literal characters"""
        for escaped, literal in ESCAPE_CLEANUPS:
            text = text.replace(escaped, literal)
        return text
