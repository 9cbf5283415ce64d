"""
Markdown document parser (whole-document mode)

Parses Markdown with markdown-it-py plus the dollarmath extension, so that
$...$ and $$...$$ arrive as math nodes rather than text, and converts the
markdown-it syntax tree into the closed DocumentNode variant consumed by the
transducer.

Bracket-style math (\\[...\\], \\(...\\)) must be normalized to dollar style
before parsing (see grammar.brackets_normalize); Markdown would otherwise
treat the backslashes as escapes.
"""

from typing import Dict, List

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.dollarmath import dollarmath_plugin

from ..models.document import DocumentNode, NodeKind
from .errors import TransductionError
from .log import LOG


# markdown-it node type -> document node kind; unlisted types are containers
NODE_KINDS: Dict[str, NodeKind] = {
    "root": NodeKind.DOCUMENT,
    "text": NodeKind.TEXT,
    "em": NodeKind.EMPHASIS,
    "strong": NodeKind.STRONG,
    "math_inline": NodeKind.MATH,
    "math_inline_double": NodeKind.MATH_BLOCK,
    "math_block": NodeKind.MATH_BLOCK,
    "math_block_label": NodeKind.MATH_BLOCK,
    "paragraph": NodeKind.PARAGRAPH,
    "heading": NodeKind.HEADING,
    "code_inline": NodeKind.CODE,
    "code_block": NodeKind.CODE_BLOCK,
    "fence": NodeKind.CODE_BLOCK,
    "softbreak": NodeKind.SOFT_BREAK,
    "hardbreak": NodeKind.HARD_BREAK,
}

LITERAL_KINDS = {
    NodeKind.TEXT,
    NodeKind.MATH,
    NodeKind.MATH_BLOCK,
    NodeKind.CODE,
    NodeKind.CODE_BLOCK,
}


def markdown_make() -> MarkdownIt:
    """CommonMark parser with tables, strikethrough and dollar math"""
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    md.use(dollarmath_plugin, double_inline=True)
    return md


class DocumentParser:
    """
    Parse Markdown source into a DocumentNode tree

    Example:
        >>> tree = DocumentParser().parse("Hello *there* $x$")
        >>> tree.kind
        <NodeKind.DOCUMENT: 'document'>
        >>> [node.kind.value for node in tree.children[0].children]
        ['text', 'emphasis', 'text', 'math']
    """

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug
        self.md = markdown_make()

    def parse(self, source: str) -> DocumentNode:
        """
        Parse Markdown source

        Args:
            source: Markdown text with dollar-style math

        Returns:
            DocumentNode of kind DOCUMENT

        Raises:
            TransductionError: If markdown-it cannot parse the source
        """
        try:
            tokens = self.md.parse(source)
        except Exception as e:
            raise TransductionError(f"Markdown parse failed: {e}") from e

        tree = self.nodes_convert(SyntaxTreeNode(tokens))[0]
        if self.debug:
            LOG(f"Parsed document: {sum(1 for _ in tree.walk())} nodes", level=3)
        return tree

    def nodes_convert(self, node: SyntaxTreeNode) -> List[DocumentNode]:
        """
        Convert a markdown-it syntax tree node to document nodes

        "inline" wrapper nodes are dissolved: their children are spliced
        into the parent, so a paragraph's children are its inline content.

        Args:
            node: markdown-it SyntaxTreeNode

        Returns:
            List of converted nodes (one, or the spliced inline children)
        """
        children: List[DocumentNode] = []
        for child in node.children:
            children.extend(self.nodes_convert(child))

        if node.type == "inline":
            return children

        kind = NODE_KINDS.get(node.type, NodeKind.CONTAINER)
        converted = DocumentNode(kind=kind, children=children)

        if kind in LITERAL_KINDS:
            converted.literal = node.content
        elif kind is NodeKind.HEADING:
            converted.level = int(node.tag[1:])
        elif kind is NodeKind.CONTAINER:
            converted.name = node.type

        return [converted]
