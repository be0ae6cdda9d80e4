"""Document tree model and structural normalization."""

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
    NodeKind,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
    count_list_items,
    get_list_start,
    is_list_container,
    is_ordered_list,
)
from .normalize import Fix, NormalizeResult, Normalizer, ValidationResult, Violation, normalize
from .value import from_value, to_value

__all__ = [
    "Blockquote",
    "CodeBlock",
    "Column",
    "ColumnGroup",
    "Document",
    "Heading",
    "HorizontalRule",
    "Link",
    "ListContainer",
    "ListItem",
    "ListItemContent",
    "ListKind",
    "Node",
    "NodeKind",
    "Paragraph",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "count_list_items",
    "get_list_start",
    "is_list_container",
    "is_ordered_list",
    "Fix",
    "NormalizeResult",
    "Normalizer",
    "ValidationResult",
    "Violation",
    "normalize",
    "from_value",
    "to_value",
]
