"""Column layout encoding as single-line inline HTML.

A column group is stored as::

    <div class="oc-columns" data-columns="N"><div class="oc-column" data-content="..."></div>...</div>

Column text lives in the ``data-content`` attribute, entity-escaped, and the
whole block is emitted on one physical line so Markdown line handling cannot
break it apart. The legacy layout kept text inside each column div.
"""

from __future__ import annotations

import html
import logging
import re

from ..editor.nodes import Column, ColumnGroup, Node, Paragraph, Text, plain_text

logger = logging.getLogger(__name__)

COLUMNS_MARKER = 'class="oc-columns"'
DEFAULT_COLUMN_COUNT = 2

COLUMN_COUNT_PATTERN = re.compile(r'data-columns="(\d+)"')
COLUMN_PATTERN = re.compile(r'<div class="oc-column" data-content="([^"]*)"></div>')
LEGACY_COLUMN_PATTERN = re.compile(r'<div class="oc-column">\s*([\s\S]*?)\s*</div>')


def is_column_html(value: str) -> bool:
    return COLUMNS_MARKER in value


def escape_content(text: str) -> str:
    """Escape column text for a double-quoted attribute on a single line."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("\n", "&#10;")
    )


def column_text(column: Node) -> str:
    """Flatten a column's blocks into text, one line per block."""
    return plain_text(column).strip()


def encode_column_group(group: ColumnGroup) -> str:
    """Encode a column group as a single line of HTML."""
    columns = [child for child in group.children if isinstance(child, Column)]
    parts = [
        f'<div class="oc-column" data-content="{escape_content(column_text(column))}"></div>'
        for column in columns
    ]
    count = len(columns) or DEFAULT_COLUMN_COUNT
    return f'<div class="oc-columns" data-columns="{count}">{"".join(parts)}</div>'


def decode_column_html(value: str) -> Node:
    """Decode column layout HTML into a column group.

    Falls back to synthesized empty columns when no column content can be
    found, and to a paragraph holding the raw HTML when the markup cannot be
    decoded at all.
    """
    try:
        return _decode(value)
    except ValueError as e:
        logger.warning("Could not decode column layout, keeping it as text: %s", e)
        return Paragraph(children=[Text(value)])


def _decode(value: str) -> ColumnGroup:
    count_match = COLUMN_COUNT_PATTERN.search(value)
    count = int(count_match.group(1)) if count_match else DEFAULT_COLUMN_COUNT
    if count < 1:
        raise ValueError(f"column count must be positive, got {count}")
    width = f"{100 // count}%"

    contents = [html.unescape(content) for content in COLUMN_PATTERN.findall(value)]
    if not contents:
        contents = [content.strip() for content in LEGACY_COLUMN_PATTERN.findall(value)]
    if not contents:
        logger.warning("Column layout without column content, creating %d empty columns", count)
        contents = [""] * count

    return ColumnGroup(children=[_column(content, width) for content in contents])


def _column(content: str, width: str) -> Column:
    paragraphs = [Paragraph(children=[Text(line)]) for line in content.split("\n")]
    return Column(width=width, children=paragraphs)
