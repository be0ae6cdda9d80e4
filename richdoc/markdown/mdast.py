"""Generic markdown AST (mdast-shaped) nodes used at the codec boundary."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MdNode:
    """A markdown AST node.

    ``type`` is one of: root, paragraph, heading, blockquote, thematicBreak,
    code, list, listItem, table, tableRow, tableCell, html, text, strong,
    emphasis, delete, inlineCode, link, break.
    """

    type: str
    children: list[MdNode] = field(default_factory=list)
    value: str | None = None  # text, inlineCode, code, html
    depth: int | None = None  # heading
    ordered: bool | None = None  # list
    start: int | None = None  # list, only when ordered and not 1
    spread: bool | None = None  # list, listItem
    checked: bool | None = None  # listItem, only for task items
    lang: str | None = None  # code
    url: str | None = None  # link

    def text_content(self) -> str:
        """Concatenated literal text of this node and its descendants."""
        if self.type == "break":
            return "\n"
        if self.value is not None:
            return self.value
        return "".join(child.text_content() for child in self.children)
