"""Markdown text to mdast parsing using markdown-it-py.

Configures markdown-it with:
- CommonMark base
- GFM tables and strikethrough
- GFM task list items (``- [ ]`` / ``- [x]``)
"""

from __future__ import annotations

import logging
import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.tasklists import tasklists_plugin

from .mdast import MdNode

logger = logging.getLogger(__name__)

CHECKBOX_CLASS = "task-list-item-checkbox"
# Task markers the plugin leaves alone, e.g. an item holding only "[ ]"
BARE_TASK_PATTERN = re.compile(r"^\[([ xX])\]$")


def create_parser() -> MarkdownIt:
    """Create configured markdown-it parser."""
    md = MarkdownIt("commonmark")
    md.enable("table")
    md.enable("strikethrough")
    md.use(tasklists_plugin)
    return md


# Singleton parser instance
_parser: MarkdownIt | None = None


def get_parser() -> MarkdownIt:
    """Get or create the singleton parser instance."""
    global _parser
    if _parser is None:
        _parser = create_parser()
    return _parser


def parse(text: str) -> MdNode:
    """Parse markdown text into an mdast root node.

    Args:
        text: Markdown text to parse

    Returns:
        Root MdNode
    """
    tokens = get_parser().parse(text)
    tree = SyntaxTreeNode(tokens)
    return MdNode("root", children=_blocks(tree.children))


def _blocks(nodes: list[SyntaxTreeNode]) -> list[MdNode]:
    blocks = []
    for node in nodes:
        block = _block(node)
        if block is not None:
            blocks.append(block)
    return blocks


def _block(node: SyntaxTreeNode) -> MdNode | None:
    node_type = node.type

    if node_type == "paragraph":
        return MdNode("paragraph", children=_inline_children(node))
    if node_type == "heading":
        return MdNode("heading", depth=int(node.tag[1:]), children=_inline_children(node))
    if node_type == "blockquote":
        return MdNode("blockquote", children=_blocks(node.children))
    if node_type in ("bullet_list", "ordered_list"):
        ordered = node_type == "ordered_list"
        return MdNode(
            "list",
            ordered=ordered,
            start=_list_start(node) if ordered else None,
            spread=False,
            children=[_list_item(child) for child in node.children],
        )
    if node_type in ("fence", "code_block"):
        info = node.info.strip() if node_type == "fence" else ""
        return MdNode("code", value=_strip_final_newline(node.content), lang=info or None)
    if node_type == "hr":
        return MdNode("thematicBreak")
    if node_type == "html_block":
        return MdNode("html", value=node.content.rstrip("\n"))
    if node_type == "table":
        return _table(node)

    logger.debug("No mdast mapping for %s, keeping its source text", node_type)
    content = node.content if not node.children else ""
    return MdNode("paragraph", children=[MdNode("text", value=content)]) if content else None


def _list_start(node: SyntaxTreeNode) -> int | None:
    try:
        start = int(node.attrs.get("start", 1))
    except (TypeError, ValueError):
        return None
    return start if start != 1 else None


def _list_item(node: SyntaxTreeNode) -> MdNode:
    item = MdNode("listItem", spread=False, children=_blocks(node.children))
    item.checked = _take_checkbox(item, _first_line_source(node))
    return item


def _first_line_source(node: SyntaxTreeNode) -> str:
    """Raw inline source of a list item's leading paragraph, escapes intact."""
    if not node.children or node.children[0].type != "paragraph":
        return ""
    for child in node.children[0].children:
        if child.type == "inline":
            return child.content
    return ""


def _take_checkbox(item: MdNode, source: str) -> bool | None:
    """Remove a task checkbox from the start of a list item, returning its state.

    ``source`` is the unparsed text of the item's first paragraph, so an
    escaped ``\\[ \\]`` stays literal text.
    """
    if not item.children or item.children[0].type != "paragraph":
        return None
    inlines = item.children[0].children
    if not inlines:
        return None

    first = inlines[0]
    if first.type == "html" and CHECKBOX_CLASS in (first.value or ""):
        checked = 'checked="checked"' in (first.value or "")
        inlines.pop(0)
        if inlines and inlines[0].type == "text":
            inlines[0].value = (inlines[0].value or "").lstrip()
            if not inlines[0].value:
                inlines.pop(0)
        return checked

    if len(inlines) == 1 and first.type == "text":
        match = BARE_TASK_PATTERN.match(source.strip())
        if match:
            inlines.pop(0)
            return match.group(1) != " "
    return None


def _table(node: SyntaxTreeNode) -> MdNode:
    rows = []
    for section in node.children:  # thead, tbody
        for row in section.children:
            cells = [MdNode("tableCell", children=_inline_children(cell)) for cell in row.children]
            rows.append(MdNode("tableRow", children=cells))
    return MdNode("table", children=rows)


def _inline_children(node: SyntaxTreeNode) -> list[MdNode]:
    inlines: list[MdNode] = []
    for child in node.children:
        if child.type == "inline":
            inlines.extend(_inlines(child.children))
    return inlines


def _inlines(nodes: list[SyntaxTreeNode]) -> list[MdNode]:
    result = []
    for node in nodes:
        node_type = node.type
        if node_type == "text":
            result.append(MdNode("text", value=node.content))
        elif node_type == "softbreak":
            result.append(MdNode("text", value=" "))
        elif node_type == "hardbreak":
            result.append(MdNode("break"))
        elif node_type == "code_inline":
            result.append(MdNode("inlineCode", value=node.content))
        elif node_type == "strong":
            result.append(MdNode("strong", children=_inlines(node.children)))
        elif node_type == "em":
            result.append(MdNode("emphasis", children=_inlines(node.children)))
        elif node_type == "s":
            result.append(MdNode("delete", children=_inlines(node.children)))
        elif node_type == "link":
            href = node.attrs.get("href", "")
            result.append(MdNode("link", url=str(href), children=_inlines(node.children)))
        elif node_type == "html_inline":
            result.append(MdNode("html", value=node.content))
        elif node_type == "image":
            src = node.attrs.get("src", "")
            result.append(MdNode("text", value=f"![{node.content}]({src})"))
        else:
            result.append(MdNode("text", value=node.content))
    return result


def _strip_final_newline(content: str) -> str:
    return content[:-1] if content.endswith("\n") else content
