"""Conversion rules between document trees and mdast.

Serialization maps each node kind to an mdast node; deserialization maps
each mdast type back. Kinds without a dedicated rule fall back to a
paragraph carrying their plain text, so content is never dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from itertools import groupby

from ..editor.nodes import (
    Blockquote,
    CodeBlock,
    ColumnGroup,
    Document,
    Heading,
    HorizontalRule,
    Link,
    ListContainer,
    ListItem,
    ListItemContent,
    ListKind,
    Node,
    NodeKind,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
    children_of,
    classify_list,
    empty_list_item_content,
    get_list_start,
    merge_texts,
    plain_text,
)
from .columns import decode_column_html, encode_column_group, is_column_html
from .mdast import MdNode

logger = logging.getLogger(__name__)

# Mark order, outermost first
_MARK_WRAPPERS = (("strikethrough", "delete"), ("bold", "strong"), ("italic", "emphasis"))
_WRAPPER_MARKS = {wrapper: mark for mark, wrapper in _MARK_WRAPPERS}


class TreeSerializer:
    """Converts document trees to mdast."""

    def __init__(self):
        self._rules: dict[NodeKind, Callable[[Node], MdNode | None]] = {
            NodeKind.PARAGRAPH: self._paragraph,
            NodeKind.LIST_ITEM_CONTENT: self._paragraph,
            NodeKind.HEADING: self._heading,
            NodeKind.BLOCKQUOTE: self._blockquote,
            NodeKind.HORIZONTAL_RULE: lambda node: MdNode("thematicBreak"),
            NodeKind.CODE_BLOCK: self._code_block,
            NodeKind.TABLE: self._table,
            NodeKind.LIST: self._list,
            NodeKind.LIST_ITEM: self._stray_list_item,
            NodeKind.COLUMN_GROUP: self._column_group,
            # Column content is owned by the group
            NodeKind.COLUMN: lambda node: MdNode("paragraph"),
        }

    def to_mdast(self, document: Node) -> MdNode:
        return MdNode("root", children=self.blocks(children_of(document) or []))

    def blocks(self, nodes: list[Node]) -> list[MdNode]:
        result = []
        for node in nodes:
            block = self.block(node)
            if block is not None:
                result.append(block)
        return result

    def block(self, node: Node) -> MdNode | None:
        if not isinstance(node, Node):
            return None
        rule = self._rules.get(node.kind)
        if rule is not None:
            return rule(node)
        if node.kind in (NodeKind.TEXT, NodeKind.LINK):
            return MdNode("paragraph", children=self.inlines([node]))
        logger.debug("No serialization rule for %s, writing its text", node.kind.value)
        return MdNode("paragraph", children=[MdNode("text", value=plain_text(node))])

    def _paragraph(self, node: Node) -> MdNode:
        return MdNode("paragraph", children=self.inlines(children_of(node) or []))

    def _heading(self, node: Node) -> MdNode:
        assert isinstance(node, Heading)
        return MdNode("heading", depth=node.level, children=self.inlines(node.children))

    def _blockquote(self, node: Node) -> MdNode:
        return MdNode("blockquote", children=self.blocks(children_of(node) or []))

    def _code_block(self, node: Node) -> MdNode:
        assert isinstance(node, CodeBlock)
        return MdNode("code", value=node.code, lang=node.language or None)

    def _table(self, node: Node) -> MdNode:
        rows = []
        for row in children_of(node) or []:
            cells = [
                MdNode("tableCell", children=self.inlines(children_of(cell) or []))
                for cell in children_of(row) or []
            ]
            rows.append(MdNode("tableRow", children=cells))
        return MdNode("table", children=rows)

    def _list(self, node: Node) -> MdNode:
        assert isinstance(node, ListContainer)
        ordered = node.list_kind is ListKind.ORDERED
        start = get_list_start(node) if ordered else None
        return MdNode(
            "list",
            ordered=ordered,
            start=start if start != 1 else None,
            spread=False,
            children=[self._list_item(child, node.list_kind) for child in node.children if child is not None],
        )

    def _list_item(self, node: Node, list_kind: ListKind) -> MdNode:
        if not isinstance(node, ListItem):
            # Foreign node in an unnormalized list: keep it inside an item
            return MdNode("listItem", spread=False, children=self.blocks([node]))
        checked = node.checked if list_kind is ListKind.TASK and isinstance(node.checked, bool) else None
        return MdNode("listItem", spread=False, checked=checked, children=self.blocks(node.children))

    def _stray_list_item(self, node: Node) -> MdNode:
        return MdNode("list", ordered=False, spread=False, children=[self._list_item(node, ListKind.BULLET)])

    def _column_group(self, node: Node) -> MdNode:
        assert isinstance(node, ColumnGroup)
        return MdNode("html", value=encode_column_group(node))

    # Inlines

    def inlines(self, nodes: list[Node]) -> list[MdNode]:
        """Convert inline nodes, nesting runs that share a mark under one wrapper."""
        leaves: list[tuple[frozenset[str], MdNode]] = []
        for node in merge_texts([node for node in nodes if node is not None]):
            if isinstance(node, Link):
                leaves.append((frozenset(), MdNode("link", url=node.url, children=self.inlines(node.children))))
            elif isinstance(node, Text):
                marks = frozenset(mark for mark, _ in _MARK_WRAPPERS if getattr(node, mark))
                leaves.extend((marks, leaf) for leaf in _text_leaves(node))
            elif isinstance(node, Node) and node.kind is NodeKind.CODE_BLOCK:
                # Unnormalized: code inside text keeps its content inline
                leaves.append((frozenset(), MdNode("inlineCode", value=plain_text(node))))
            else:
                leaves.append((frozenset(), MdNode("text", value=plain_text(node))))
        return _wrap_marks(leaves, 0)


def _text_leaves(node: Text) -> list[MdNode]:
    if node.code:
        return [MdNode("inlineCode", value=node.text)]
    leaves: list[MdNode] = []
    for index, line in enumerate(node.text.split("\n")):
        if index:
            leaves.append(MdNode("break"))
        if line:
            leaves.append(MdNode("text", value=line))
    return leaves


def _wrap_marks(leaves: list[tuple[frozenset[str], MdNode]], level: int) -> list[MdNode]:
    """Group consecutive leaves sharing the mark at ``level`` under its wrapper node."""
    if level >= len(_MARK_WRAPPERS):
        return [leaf for _, leaf in leaves]

    mark, wrapper = _MARK_WRAPPERS[level]
    result: list[MdNode] = []
    for marked, group in groupby(leaves, key=lambda pair: mark in pair[0]):
        inner = _wrap_marks(list(group), level + 1)
        if marked:
            result.append(MdNode(wrapper, children=inner))
        else:
            result.extend(inner)
    return result


class TreeDeserializer:
    """Converts mdast into document trees."""

    def __init__(self):
        self._rules: dict[str, Callable[[MdNode], Node | None]] = {
            "paragraph": lambda md: Paragraph(children=self.inlines(md.children)),
            "heading": lambda md: Heading(level=md.depth or 1, children=self.inlines(md.children)),
            "blockquote": lambda md: Blockquote(children=self.blocks(md.children)),
            "thematicBreak": lambda md: HorizontalRule(),
            "code": self._code,
            "list": self._list,
            "table": self._table,
            "html": self._html,
        }

    def to_tree(self, root: MdNode) -> Document:
        return Document(children=self.blocks(root.children))

    def blocks(self, nodes: list[MdNode]) -> list[Node]:
        result = []
        for md in nodes:
            node = self.block(md)
            if node is not None:
                result.append(node)
        return result

    def block(self, md: MdNode) -> Node | None:
        rule = self._rules.get(md.type)
        if rule is not None:
            return rule(md)
        logger.debug("No deserialization rule for %s, keeping its text", md.type)
        return Paragraph(children=[Text(md.text_content())])

    def _code(self, md: MdNode) -> Node:
        value = md.value or ""
        return CodeBlock(lines=value.split("\n") if value else [], language=md.lang or None)

    def _list(self, md: MdNode) -> Node:
        items = [self._list_item(child) for child in md.children]
        list_kind = classify_list([item for item in items if isinstance(item, ListItem)], bool(md.ordered))
        if list_kind is not ListKind.TASK:
            for item in items:
                if isinstance(item, ListItem):
                    item.checked = None
        start = md.start if md.ordered and isinstance(md.start, int) else 1
        return ListContainer(list_kind=list_kind, start=start, children=items)

    def _list_item(self, md: MdNode) -> Node:
        if md.type != "listItem":
            node = self.block(md)
            return node if node is not None else ListItem(children=[empty_list_item_content()])

        children: list[Node] = []
        for child in md.children:
            if child.type == "paragraph":
                children.append(ListItemContent(children=self.inlines(child.children)))
            else:
                node = self.block(child)
                if node is not None:
                    children.append(node)
        if not any(isinstance(child, (ListItemContent, ListContainer)) for child in children):
            children.insert(0, empty_list_item_content())
        checked = md.checked if isinstance(md.checked, bool) else None
        return ListItem(checked=checked, children=children)

    def _table(self, md: MdNode) -> Node:
        rows = []
        for row_index, row in enumerate(md.children):
            cells = [
                TableCell(header=row_index == 0, children=self.inlines(cell.children))
                for cell in row.children
            ]
            rows.append(TableRow(children=cells))
        return Table(children=rows)

    def _html(self, md: MdNode) -> Node:
        value = md.value or ""
        if is_column_html(value):
            return decode_column_html(value)
        # Unknown HTML stays visible as text
        return Paragraph(children=[Text(value)])

    # Inlines

    def inlines(self, nodes: list[MdNode]) -> list[Node]:
        result = self._inlines(nodes, frozenset())
        return merge_texts(result) if result else [Text("")]

    def _inlines(self, nodes: list[MdNode], marks: frozenset[str]) -> list[Node]:
        result: list[Node] = []
        for md in nodes:
            if md.type in _WRAPPER_MARKS:
                result.extend(self._inlines(md.children, marks | {_WRAPPER_MARKS[md.type]}))
            elif md.type == "link":
                children = merge_texts(self._inlines(md.children, marks)) or [Text("")]
                result.append(Link(url=md.url or "", children=children))
            elif md.type == "inlineCode":
                result.append(_text(md.value or "", marks | {"code"}))
            elif md.type == "break":
                result.append(_text("\n", marks))
            else:
                result.append(_text(md.text_content(), marks))
        return result


def _text(value: str, marks: frozenset[str]) -> Text:
    return Text(
        value,
        bold="bold" in marks,
        italic="italic" in marks,
        strikethrough="strikethrough" in marks,
        code="code" in marks,
    )
