"""Markdown persistence for document trees."""

from __future__ import annotations

import logging

from ..editor.nodes import Document, Node
from .mdast import MdNode
from .parser import parse
from .renderer import MarkdownRenderer
from .rules import TreeDeserializer, TreeSerializer

logger = logging.getLogger(__name__)


class MarkdownCodec:
    """Serializes document trees to Markdown text and back.

    Serialization goes tree -> mdast -> text; deserialization goes
    text -> mdast -> tree. Deserialized trees are not normalized, so callers
    run the normalizer before display.
    """

    def __init__(self, bullet: str = "-"):
        self.renderer = MarkdownRenderer(bullet=bullet)
        self.serializer = TreeSerializer()
        self.deserializer = TreeDeserializer()

    def to_mdast(self, document: Node) -> MdNode:
        return self.serializer.to_mdast(document)

    def serialize(self, document: Node) -> str:
        """Serialize a document tree to Markdown text."""
        return self.renderer.render(self.to_mdast(document))

    def deserialize(self, text: str) -> Document:
        """Parse Markdown text into a document tree."""
        document = self.deserializer.to_tree(parse(text))
        logger.debug("Deserialized %d top-level blocks", len(document.children))
        return document


_codec: MarkdownCodec | None = None


def get_codec() -> MarkdownCodec:
    """Get or create the default codec."""
    global _codec
    if _codec is None:
        _codec = MarkdownCodec()
    return _codec


def serialize(document: Node) -> str:
    return get_codec().serialize(document)


def deserialize(text: str) -> Document:
    return get_codec().deserialize(text)
