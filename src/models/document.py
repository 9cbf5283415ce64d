"""
Document tree model (whole-document mode)

A closed tagged variant over the Markdown node kinds the transducer knows
about. Anything else the Markdown parser produces is a CONTAINER, which
keeps its children so no content is dropped.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Iterator, List


class NodeKind(Enum):
    """Document node kinds"""
    DOCUMENT = "document"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    MATH = "math"
    MATH_BLOCK = "math_block"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    CODE = "code"
    CODE_BLOCK = "code_block"
    SOFT_BREAK = "softbreak"
    HARD_BREAK = "hardbreak"
    CONTAINER = "container"


@dataclass
class DocumentNode:
    """
    A node in the parsed document tree

    Attributes:
        kind: Node kind
        children: Child nodes in document order
        literal: Raw text of leaf nodes (text, code, math bodies)
        level: Heading level 1-6 (HEADING only)
        name: Parser node type a CONTAINER was built from
              (e.g., "bullet_list", "link", "table")

    Example:
        "Some **bold**" becomes
        DocumentNode(PARAGRAPH, children=[
            DocumentNode(TEXT, literal="Some "),
            DocumentNode(STRONG, children=[DocumentNode(TEXT, literal="bold")]),
        ])
    """
    kind: NodeKind
    children: List["DocumentNode"] = field(default_factory=list)
    literal: str = ""
    level: int = 0
    name: str = ""

    def walk(self) -> Iterator["DocumentNode"]:
        """Yield this node and all descendants, depth first"""
        yield self
        for child in self.children:
            yield from child.walk()
