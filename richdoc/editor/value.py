"""Conversion between editor JSON values and document trees.

The editing surface exchanges Slate-style values: a list of element
objects, each with a ``type`` and ``children``, ending in text leaves
(``{"text": "...", "bold": true}``). Each node kind has exactly one type key
here.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .nodes import (
    Blockquote,
    CodeBlock,
    Column,
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
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
    children_of,
    get_list_start,
    merge_texts,
    plain_text,
)

logger = logging.getLogger(__name__)

LIST_TYPES = {"ul": ListKind.BULLET, "ol": ListKind.ORDERED, "taskList": ListKind.TASK}
LIST_TYPE_KEYS = {kind: key for key, kind in LIST_TYPES.items()}
HEADING_TYPES = {f"h{level}": level for level in range(1, 7)}
BLOCK_TYPES = frozenset(
    {"p", "blockquote", "hr", "code_block", "table", "li", "lic", "column_group", "column"}
    | set(LIST_TYPES)
    | set(HEADING_TYPES)
)


class ValueNode(BaseModel):
    """One element or text leaf of an editor value."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str | None = None
    text: str | None = None
    children: list[ValueNode] = Field(default_factory=list)

    # Element attributes
    start: int | None = None
    list_start: int | None = Field(default=None, alias="listStart")
    checked: bool | None = None
    url: str | None = None
    lang: str | None = None
    width: str | None = None

    # Leaf marks
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False

    @property
    def is_leaf(self) -> bool:
        return self.type is None and self.text is not None

    def leaf_text(self) -> str:
        """Concatenated text of all leaves under this node."""
        if self.text is not None:
            return self.text
        return "".join(child.leaf_text() for child in self.children)


ValueNode.model_rebuild()


_value_adapter = TypeAdapter(list[ValueNode])


def from_value(value: list[Any] | dict[str, Any]) -> Document:
    """Build a document tree from an editor value.

    Args:
        value: Either the list of top-level elements or an object with a
            ``children`` list.

    Raises:
        pydantic.ValidationError: If the value does not have the element shape.
    """
    elements = value.get("children", []) if isinstance(value, dict) else value
    nodes = _value_adapter.validate_python(elements)
    return Document(children=[_block(node) for node in nodes])


def _block(node: ValueNode) -> Node:
    node_type = node.type

    if node.is_leaf or node_type == "a":
        return Paragraph(children=_inlines([node]))
    if node_type == "p":
        return Paragraph(children=_inlines(node.children))
    if node_type in HEADING_TYPES:
        return Heading(level=HEADING_TYPES[node_type], children=_inlines(node.children))
    if node_type == "blockquote":
        if all(child.is_leaf or child.type == "a" for child in node.children):
            return Blockquote(children=[Paragraph(children=_inlines(node.children))])
        return Blockquote(children=[_block(child) for child in node.children])
    if node_type == "hr":
        return HorizontalRule()
    if node_type == "code_block":
        return CodeBlock(
            lines=[child.leaf_text() for child in node.children], language=node.lang or None
        )
    if node_type in LIST_TYPES:
        start = node.start if node.start is not None else node.list_start
        return ListContainer(
            list_kind=LIST_TYPES[node_type],
            start=start if start is not None else 1,
            children=[_block(child) for child in node.children],
        )
    if node_type == "li":
        return ListItem(checked=node.checked, children=[_block(child) for child in node.children])
    if node_type == "lic":
        return ListItemContent(children=_inlines(node.children))
    if node_type == "table":
        return Table(children=[_table_row(row) for row in node.children])
    if node_type == "column_group":
        return ColumnGroup(children=[_block(child) for child in node.children])
    if node_type == "column":
        return Column(width=node.width, children=[_block(child) for child in node.children])

    logger.warning("Unknown element type %r, keeping its text as a paragraph", node_type)
    return Paragraph(children=[Text(node.leaf_text())])


def _table_row(node: ValueNode) -> Node:
    if node.type != "tr":
        return _block(node)
    cells = []
    for cell in node.children:
        # Table cells hold paragraphs in the editor; flatten them to inline content
        inlines: list[Node] = []
        for child in cell.children:
            inlines.extend(_inlines(child.children if child.type == "p" else [child]))
        cells.append(TableCell(header=cell.type == "th", children=merge_texts(inlines)))
    return TableRow(children=cells)


def _inlines(nodes: list[ValueNode]) -> list[Node]:
    result: list[Node] = []
    for node in nodes:
        if node.is_leaf:
            result.append(
                Text(
                    node.text or "",
                    bold=node.bold,
                    italic=node.italic,
                    strikethrough=node.strikethrough,
                    code=node.code,
                )
            )
        elif node.type == "a":
            result.append(Link(url=node.url or "", children=_inlines(node.children)))
        elif node.type in BLOCK_TYPES:
            # Blocks dropped into text are kept so the normalizer can move them
            result.append(_block(node))
        else:
            result.append(Text(node.leaf_text()))
    return merge_texts(result) if result else [Text("")]


def to_value(document: Node) -> list[dict[str, Any]]:
    """Convert a document tree into an editor value."""
    return [_element(child) for child in children_of(document) or [] if child is not None]


def _element(node: Node) -> dict[str, Any]:
    if isinstance(node, Text):
        leaf: dict[str, Any] = {"text": node.text}
        for mark in ("bold", "italic", "strikethrough", "code"):
            if getattr(node, mark):
                leaf[mark] = True
        return leaf
    if isinstance(node, Link):
        return {"type": "a", "url": node.url, "children": _leaves(node.children)}
    if isinstance(node, Paragraph):
        return {"type": "p", "children": _leaves(node.children)}
    if isinstance(node, Heading):
        return {"type": f"h{min(max(node.level, 1), 6)}", "children": _leaves(node.children)}
    if isinstance(node, Blockquote):
        return {"type": "blockquote", "children": [_element(child) for child in node.children]}
    if isinstance(node, HorizontalRule):
        return {"type": "hr", "children": [{"text": ""}]}
    if isinstance(node, CodeBlock):
        element: dict[str, Any] = {
            "type": "code_block",
            "children": [
                {"type": "code_line", "children": [{"text": line}]} for line in node.lines
            ]
            or [{"type": "code_line", "children": [{"text": ""}]}],
        }
        if node.language:
            element["lang"] = node.language
        return element
    if isinstance(node, ListContainer):
        element = {
            "type": LIST_TYPE_KEYS[node.list_kind],
            "children": [_element(child) for child in node.children if child is not None],
        }
        start = get_list_start(node)
        if node.list_kind is ListKind.ORDERED and start != 1:
            element["start"] = start
            element["listStart"] = start
        return element
    if isinstance(node, ListItem):
        element = {"type": "li", "children": [_element(c) for c in node.children if c is not None]}
        if isinstance(node.checked, bool):
            element["checked"] = node.checked
        return element
    if isinstance(node, ListItemContent):
        return {"type": "lic", "children": _leaves(node.children)}
    if isinstance(node, Table):
        return {"type": "table", "children": [_table_row_element(row) for row in node.children]}
    if isinstance(node, ColumnGroup):
        return {"type": "column_group", "children": [_element(c) for c in node.children]}
    if isinstance(node, Column):
        element = {"type": "column", "children": [_element(c) for c in node.children]}
        if node.width:
            element["width"] = node.width
        return element

    return {"type": "p", "children": [{"text": plain_text(node)}]}


def _table_row_element(row: Node) -> dict[str, Any]:
    if not isinstance(row, TableRow):
        return _element(row)
    return {
        "type": "tr",
        "children": [
            {
                "type": "th" if getattr(cell, "header", False) else "td",
                "children": [{"type": "p", "children": _leaves(children_of(cell) or [])}],
            }
            for cell in row.children
        ],
    }


def _leaves(nodes: list[Node]) -> list[dict[str, Any]]:
    leaves = [_element(node) for node in nodes if node is not None]
    return leaves or [{"text": ""}]

