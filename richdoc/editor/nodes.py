"""Document tree model for the rich-text editor."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class NodeKind(Enum):
    """Closed set of node kinds in a document tree."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    HORIZONTAL_RULE = "horizontal_rule"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    CODE_BLOCK = "code_block"
    LIST = "list"
    LIST_ITEM = "list_item"
    LIST_ITEM_CONTENT = "list_item_content"
    COLUMN_GROUP = "column_group"
    COLUMN = "column"
    TEXT = "text"
    LINK = "link"


class ListKind(Enum):
    """Variant of a list container."""

    BULLET = "bullet"
    ORDERED = "ordered"
    TASK = "task"


class Node:
    """Base class for all tree nodes."""

    kind: ClassVar[NodeKind]


# Inline nodes


@dataclass
class Text(Node):
    """A run of text with formatting marks."""

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    text: str = ""
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False

    @property
    def marks(self) -> tuple[bool, bool, bool, bool]:
        return (self.bold, self.italic, self.strikethrough, self.code)


@dataclass
class Link(Node):
    """A hyperlink wrapping text runs."""

    kind: ClassVar[NodeKind] = NodeKind.LINK

    url: str = ""
    children: list[Node] = field(default_factory=list)


# Block nodes


@dataclass
class Paragraph(Node):
    kind: ClassVar[NodeKind] = NodeKind.PARAGRAPH

    children: list[Node] = field(default_factory=list)


@dataclass
class Heading(Node):
    kind: ClassVar[NodeKind] = NodeKind.HEADING

    level: int = 1  # 1 for #, 2 for ##, etc.
    children: list[Node] = field(default_factory=list)


@dataclass
class Blockquote(Node):
    kind: ClassVar[NodeKind] = NodeKind.BLOCKQUOTE

    children: list[Node] = field(default_factory=list)


@dataclass
class HorizontalRule(Node):
    kind: ClassVar[NodeKind] = NodeKind.HORIZONTAL_RULE


@dataclass
class TableCell(Node):
    kind: ClassVar[NodeKind] = NodeKind.TABLE_CELL

    header: bool = False
    children: list[Node] = field(default_factory=list)


@dataclass
class TableRow(Node):
    kind: ClassVar[NodeKind] = NodeKind.TABLE_ROW

    children: list[Node] = field(default_factory=list)

    @property
    def cells(self) -> list[Node]:
        return self.children


@dataclass
class Table(Node):
    """A table; the first row is the header row."""

    kind: ClassVar[NodeKind] = NodeKind.TABLE

    children: list[Node] = field(default_factory=list)

    @property
    def rows(self) -> list[Node]:
        return self.children


@dataclass
class CodeBlock(Node):
    """A fenced code block. Never allowed inside list item text."""

    kind: ClassVar[NodeKind] = NodeKind.CODE_BLOCK

    lines: list[str] = field(default_factory=list)
    language: str | None = None

    @property
    def code(self) -> str:
        return "\n".join(self.lines)


@dataclass
class ListItemContent(Node):
    """The text-bearing payload of a list item."""

    kind: ClassVar[NodeKind] = NodeKind.LIST_ITEM_CONTENT

    children: list[Node] = field(default_factory=list)


@dataclass
class ListItem(Node):
    """One entry of a list container.

    ``checked`` is only set for items of a task list.
    """

    kind: ClassVar[NodeKind] = NodeKind.LIST_ITEM

    checked: bool | None = None
    children: list[Node] = field(default_factory=list)


@dataclass
class ListContainer(Node):
    """A bullet, ordered or task list.

    ``start`` is only meaningful for ordered lists.
    """

    kind: ClassVar[NodeKind] = NodeKind.LIST

    list_kind: ListKind = ListKind.BULLET
    start: int = 1
    children: list[Node] = field(default_factory=list)


@dataclass
class Column(Node):
    kind: ClassVar[NodeKind] = NodeKind.COLUMN

    width: str | None = None  # e.g. "33%"
    children: list[Node] = field(default_factory=list)


@dataclass
class ColumnGroup(Node):
    """Side-by-side column layout."""

    kind: ClassVar[NodeKind] = NodeKind.COLUMN_GROUP

    children: list[Node] = field(default_factory=list)


@dataclass
class Document(Node):
    """Root of a document tree."""

    kind: ClassVar[NodeKind] = NodeKind.DOCUMENT

    children: list[Node] = field(default_factory=list)


INLINE_KINDS = frozenset({NodeKind.TEXT, NodeKind.LINK})


def children_of(node: object) -> list[Node] | None:
    """Return the child list of a node, or None for leaf nodes."""
    children = getattr(node, "children", None)
    return children if isinstance(children, list) else None


def is_list_container(node: object) -> bool:
    return isinstance(node, ListContainer)


def is_ordered_list(node: object) -> bool:
    return isinstance(node, ListContainer) and node.list_kind is ListKind.ORDERED


def is_unordered_list(node: object) -> bool:
    return isinstance(node, ListContainer) and node.list_kind is ListKind.BULLET


def is_task_list(node: object) -> bool:
    return isinstance(node, ListContainer) and node.list_kind is ListKind.TASK


def count_list_items(container: object) -> int:
    """Count the ListItem children of a list container, ignoring foreign nodes."""
    children = children_of(container) or []
    return sum(1 for child in children if isinstance(child, ListItem))


def get_list_start(container: object) -> int:
    """Get the start number of a list container (defaults to 1)."""
    start = getattr(container, "start", None)
    if isinstance(start, int) and not isinstance(start, bool):
        return start
    return 1


def classify_list(items: list[ListItem], ordered: bool) -> ListKind:
    """Pick the list kind for a set of items.

    Any item carrying a boolean ``checked`` makes the whole list a task list.
    """
    if any(isinstance(item.checked, bool) for item in items):
        return ListKind.TASK
    return ListKind.ORDERED if ordered else ListKind.BULLET


def walk(node: Node, path: tuple[int, ...] = ()) -> Iterator[tuple[Node, tuple[int, ...]]]:
    """Iterate over a tree in pre-order, yielding (node, path) pairs."""
    yield node, path
    for index, child in enumerate(children_of(node) or []):
        if child is not None:
            yield from walk(child, (*path, index))


def count_nodes(node: Node) -> int:
    return sum(1 for _ in walk(node))


def is_inline(node: object) -> bool:
    return isinstance(node, Node) and node.kind in INLINE_KINDS


def plain_text(node: object) -> str:
    """Flatten a node into plain text.

    Inline children are concatenated; block children are joined by newlines.
    """
    if isinstance(node, Text):
        return node.text
    if isinstance(node, CodeBlock):
        return node.code
    children = [child for child in children_of(node) or [] if child is not None]
    if all(is_inline(child) for child in children):
        return "".join(plain_text(child) for child in children)
    return "\n".join(plain_text(child) for child in children)


def merge_texts(nodes: list[Node]) -> list[Node]:
    """Merge adjacent Text runs that carry identical marks."""
    merged: list[Node] = []
    for node in nodes:
        previous = merged[-1] if merged else None
        if isinstance(node, Text) and isinstance(previous, Text) and previous.marks == node.marks:
            merged[-1] = Text(
                previous.text + node.text,
                bold=node.bold,
                italic=node.italic,
                strikethrough=node.strikethrough,
                code=node.code,
            )
        else:
            merged.append(node)
    return merged


def empty_paragraph() -> Paragraph:
    return Paragraph(children=[Text("")])


def empty_list_item_content() -> ListItemContent:
    return ListItemContent(children=[Text("")])
