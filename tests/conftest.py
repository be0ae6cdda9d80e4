"""Pytest configuration and fixtures."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from richdoc.editor.nodes import (
    CodeBlock,
    Document,
    ListContainer,
    ListItem,
    ListItemContent,
    ListKind,
    Paragraph,
    Text,
)
from richdoc.editor.normalize import Normalizer
from richdoc.markdown.codec import MarkdownCodec


def item(text: str = "", checked: bool | None = None, *extra) -> ListItem:
    """Build a list item holding one line of text, plus optional extra children."""
    return ListItem(checked=checked, children=[ListItemContent(children=[Text(text)]), *extra])


def bullet_list(*items: ListItem) -> ListContainer:
    return ListContainer(list_kind=ListKind.BULLET, children=list(items))


def ordered_list(*items: ListItem, start: int = 1) -> ListContainer:
    return ListContainer(list_kind=ListKind.ORDERED, start=start, children=list(items))


def task_list(*items: ListItem) -> ListContainer:
    return ListContainer(list_kind=ListKind.TASK, children=list(items))


def paragraph(text: str = "") -> Paragraph:
    return Paragraph(children=[Text(text)])


def code(*lines: str, language: str | None = None) -> CodeBlock:
    return CodeBlock(lines=list(lines), language=language)


@pytest.fixture
def temp_workspace() -> Generator[Path, None, None]:
    """Create a temporary workspace directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def normalizer() -> Normalizer:
    return Normalizer()


@pytest.fixture
def codec() -> MarkdownCodec:
    return MarkdownCodec()


@pytest.fixture
def sample_document() -> Document:
    """A normalized document mixing every list kind."""
    return Document(
        children=[
            paragraph("Shopping"),
            task_list(item("Buy milk", False), item("Buy eggs", True)),
            ordered_list(item("first"), item("second"), start=3),
            bullet_list(item("outer", None, bullet_list(item("inner")))),
            paragraph(""),
        ]
    )
