r"""
Document transducer: DocumentNode tree to LaTeX source

A structural rewrite with one handler per node kind. Kinds without a
handler (CONTAINER: lists, links, images, quotes, tables, rules, html) fall
back to recursing into their children, so content is kept even where no
LaTeX structure is produced for it.

Example:
    "# Title\n\n**100%** $x^2$" is rewritten to

        \section*{Title}
        \textbf{100\%} $x^2$
        \par
"""

from typing import Callable, Dict

from ..models.document import DocumentNode, NodeKind


# Single-pass table: a replacement is never re-escaped
LATEX_ESCAPES = str.maketrans({
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "[": r"{[}",
    "]": r"{]}",
    "|": r"{\vert}",
    "/": r"{/}",
})

HEADING_COMMANDS: Dict[int, str] = {
    1: r"\section*",
    2: r"\subsection*",
    3: r"\subsubsection*",
    4: r"\paragraph*",
    5: r"\paragraph*",
    6: r"\paragraph*",
}

PARAGRAPH_BREAK = "\n\\par\n\n"
LINE_BREAK = "\\\\\n"


def latex_escape(text: str) -> str:
    r"""
    Escape LaTeX special characters in text

    Example:
        >>> latex_escape("100% & $5")
        '100\\% \\& \\$5'
    """
    return text.translate(LATEX_ESCAPES)


class LatexTransducer:
    """
    Rewrites a document tree into a LaTeX body

    Handlers are looked up by node kind; missing kinds recurse into their
    children. The tree is only read, never modified.
    """

    def __init__(self) -> None:
        self.handlers: Dict[NodeKind, Callable[[DocumentNode], str]] = {
            NodeKind.TEXT: self.text_generate,
            NodeKind.EMPHASIS: lambda node: self.wrap_generate(r"\textit{", node, "}"),
            NodeKind.STRONG: lambda node: self.wrap_generate(r"\textbf{", node, "}"),
            NodeKind.MATH: lambda node: f"${node.literal}$",
            NodeKind.MATH_BLOCK: lambda node: f"$${node.literal}$$",
            NodeKind.PARAGRAPH: lambda node: self.children_generate(node) + PARAGRAPH_BREAK,
            NodeKind.SOFT_BREAK: lambda node: LINE_BREAK,
            NodeKind.HARD_BREAK: lambda node: LINE_BREAK,
            NodeKind.CODE: lambda node: f"\\texttt{{{latex_escape(node.literal)}}}",
            NodeKind.CODE_BLOCK: self.codeblock_generate,
            NodeKind.HEADING: self.heading_generate,
        }

    def latex_generate(self, node: DocumentNode) -> str:
        """
        Generate LaTeX for a node and its subtree

        Args:
            node: Root of the (sub)tree to rewrite

        Returns:
            LaTeX source text
        """
        handler = self.handlers.get(node.kind, self.children_generate)
        return handler(node)

    def children_generate(self, node: DocumentNode) -> str:
        """Concatenate the LaTeX of all children"""
        return "".join(self.latex_generate(child) for child in node.children)

    def wrap_generate(self, prefix: str, node: DocumentNode, suffix: str) -> str:
        return prefix + self.children_generate(node) + suffix

    def text_generate(self, node: DocumentNode) -> str:
        return latex_escape(node.literal)

    def codeblock_generate(self, node: DocumentNode) -> str:
        # verbatim content is not escaped
        literal = node.literal if node.literal.endswith("\n") else node.literal + "\n"
        return "\n\\begin{verbatim}\n" + literal + "\\end{verbatim}\n"

    def heading_generate(self, node: DocumentNode) -> str:
        """Unnumbered sectioning: this is a standalone preview, not a report"""
        command = HEADING_COMMANDS.get(node.level, r"\paragraph*")
        return self.wrap_generate(command + "{", node, "}\n")
