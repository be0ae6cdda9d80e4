"""Markdown codec for document trees."""

from .codec import MarkdownCodec, deserialize, serialize
from .columns import decode_column_html, encode_column_group
from .formatter import LintIssue, LintResult, MarkdownFormatter
from .mdast import MdNode
from .parser import parse
from .renderer import MarkdownRenderer

__all__ = [
    "MarkdownCodec",
    "serialize",
    "deserialize",
    "encode_column_group",
    "decode_column_html",
    "LintIssue",
    "LintResult",
    "MarkdownFormatter",
    "MdNode",
    "parse",
    "MarkdownRenderer",
]
