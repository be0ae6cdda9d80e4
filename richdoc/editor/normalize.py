"""Structural normalization of document trees after edits.

The normalizer repeatedly scans the tree in pre-order, applies the first
repair rule that matches, and restarts the scan until a full pass finds
nothing to fix. Rules, in priority order:

- A: a list container child that is not a list item is moved before/after
  the container, or the container is split around it.
- B: a code block inside list item text is hoisted to a sibling of that
  text, under the same list item or wherever the text ended up.
- C: an ordered list following ``ordered list + code block`` at the root
  continues the numbering of the first list.
- D: a document ending with a code block, list or table gets an empty
  trailing paragraph.
- E: a list item without content gets an empty content node.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from .nodes import (
    CodeBlock,
    Document,
    Link,
    ListContainer,
    ListItem,
    ListItemContent,
    ListKind,
    Node,
    NodeKind,
    Table,
    children_of,
    count_list_items,
    count_nodes,
    empty_list_item_content,
    empty_paragraph,
    get_list_start,
    is_ordered_list,
)

logger = logging.getLogger(__name__)

DEFAULT_PASS_LIMIT_FACTOR = 2
DEFAULT_CONTINUATION_SEPARATORS = frozenset({NodeKind.CODE_BLOCK})

RULE_DESCRIPTIONS = {
    "A": "foreign child of a list container",
    "B": "code block inside list item text",
    "C": "ordered list numbering continuation",
    "D": "missing trailing paragraph",
    "E": "list item without content",
}

Path = tuple[int, ...]


@dataclass
class Violation:
    """A structural invariant violation found in a tree."""

    rule: str  # 'A' .. 'E'
    path: Path  # path of the node the rule is anchored on
    node_kind: str
    detail: str

    @property
    def message(self) -> str:
        """Generate a descriptive message for this violation."""
        location = "/".join(str(index) for index in self.path) or "root"
        return f"[{self.rule}] {RULE_DESCRIPTIONS[self.rule]} at {location} ({self.node_kind}): {self.detail}"


@dataclass
class ValidationResult:
    """Result of validating a tree against the structural invariants."""

    valid: bool
    violations: list[Violation]
    recommendations: list[str]


@dataclass
class Fix:
    """A repair applied by the normalizer."""

    rule: str
    path: Path
    detail: str


@dataclass
class NormalizeResult:
    """Result of a normalization run."""

    document: Node
    fixes: list[Fix] = field(default_factory=list)
    converged: bool = True

    @property
    def changed(self) -> bool:
        return len(self.fixes) > 0


@dataclass
class _Match:
    """A rule match, carrying what is needed to apply the repair."""

    rule: str
    path: Path
    node: Node
    parent: Node | None
    index: int = -1  # child index the rule targets, when relevant
    expected: int | None = None
    detail: str = ""

    def as_violation(self) -> Violation:
        return Violation(rule=self.rule, path=self.path, node_kind=self.node.kind.value, detail=self.detail)


def _walk_with_parents(
    node: Node, parent: Node | None = None, path: Path = ()
) -> Iterator[tuple[Node, Node | None, Path]]:
    yield node, parent, path
    for index, child in enumerate(children_of(node) or []):
        if isinstance(child, Node):
            yield from _walk_with_parents(child, node, (*path, index))


def _find_code_block(holder: Node) -> tuple[Node, int] | None:
    """Find a code block among inline content, searching into links."""
    for index, child in enumerate(children_of(holder) or []):
        if isinstance(child, CodeBlock):
            return holder, index
        if isinstance(child, Link):
            found = _find_code_block(child)
            if found:
                return found
    return None


class Normalizer:
    """Restores document tree invariants after edits.

    Build one per editing session and call :meth:`normalize` after each
    committed edit. The normalizer never raises on malformed trees: a rule
    whose preconditions do not hold is skipped.
    """

    def __init__(
        self,
        pass_limit_factor: int = DEFAULT_PASS_LIMIT_FACTOR,
        continuation_separators: Iterable[NodeKind] = DEFAULT_CONTINUATION_SEPARATORS,
    ):
        self.pass_limit_factor = max(1, pass_limit_factor)
        # Separators after which a split ordered list keeps counting
        self.continuation_separators = frozenset(continuation_separators)
        self._appliers: dict[str, Callable[[_Match], None]] = {
            "A": self._apply_foreign_child,
            "B": self._apply_hoist_code_block,
            "C": self._apply_continuation,
            "D": self._apply_trailing_paragraph,
            "E": self._apply_empty_item,
        }

    def normalize(self, document: Node) -> Node:
        """Normalize a tree in place and return it."""
        return self.run(document).document

    def run(self, document: Node) -> NormalizeResult:
        """Normalize a tree in place, recording every repair applied.

        Returns:
            NormalizeResult with the document, applied fixes and whether a
            fixpoint was reached within the pass limit.
        """
        result = NormalizeResult(document=document)
        pass_limit = self.pass_limit_factor * count_nodes(document)

        for _ in range(pass_limit):
            match = next(self._scan(document), None)
            if match is None:
                return result
            self._appliers[match.rule](match)
            fix = Fix(rule=match.rule, path=match.path, detail=match.detail)
            logger.debug("Applied rule %s at %s: %s", fix.rule, fix.path, fix.detail)
            result.fixes.append(fix)

        result.converged = next(self._scan(document), None) is None
        if not result.converged:
            logger.warning(
                "Normalization stopped after %d passes without reaching a fixpoint", pass_limit
            )
        return result

    def validate(self, document: Node) -> ValidationResult:
        """Report structural violations without modifying the tree."""
        violations = [match.as_violation() for match in self._scan(document)]

        recommendations: list[str] = []
        if violations:
            recommendations.append(
                f"Run 'normalize' to repair {len(violations)} structural violation(s)."
            )
        if any(v.rule == "C" for v in violations):
            recommendations.append(
                "Ordered lists split by a code block will continue numbering after normalization."
            )

        return ValidationResult(
            valid=len(violations) == 0, violations=violations, recommendations=recommendations
        )

    # Matching

    def _scan(self, document: Node) -> Iterator[_Match]:
        """Yield every rule match in pre-order, rules in priority order per node."""
        for node, parent, path in _walk_with_parents(document):
            if isinstance(node, ListContainer) and parent is not None:
                yield from self._match_foreign_children(node, parent, path)
            if isinstance(node, ListItemContent) and parent is not None:
                found = _find_code_block(node)
                if found:
                    # Hoisted beside the content node, wherever it sits
                    yield _Match("B", path, node, parent, detail="code block moved after item text")
            if isinstance(node, Document) and node.children:
                yield from self._match_continuation(node, path)
                yield from self._match_trailing_paragraph(node, path)
            if isinstance(node, ListItem) and not any(
                isinstance(child, (ListItemContent, ListContainer)) for child in node.children
            ):
                yield _Match("E", path, node, parent, detail="empty content inserted")

    def _match_foreign_children(
        self, container: ListContainer, parent: Node, path: Path
    ) -> Iterator[_Match]:
        last = len(container.children) - 1
        for index, child in enumerate(container.children):
            if isinstance(child, ListItem):
                continue
            if index == 0:
                detail = "moved before list"
            elif index == last:
                detail = "moved after list"
            else:
                detail = f"list split at item {index}"
            yield _Match("A", path, container, parent, index=index, detail=detail)

    def _match_continuation(self, document: Document, path: Path) -> Iterator[_Match]:
        children = document.children
        for index in range(2, len(children)):
            current, separator, first = children[index], children[index - 1], children[index - 2]
            if not (is_ordered_list(current) and is_ordered_list(first)):
                continue
            if not isinstance(separator, Node) or separator.kind not in self.continuation_separators:
                continue
            expected = get_list_start(first) + count_list_items(first)
            if get_list_start(current) != expected:
                yield _Match(
                    "C",
                    path,
                    document,
                    None,
                    index=index,
                    expected=expected,
                    detail=f"start set to {expected}",
                )

    def _match_trailing_paragraph(self, document: Document, path: Path) -> Iterator[_Match]:
        last = document.children[-1]
        if isinstance(last, (CodeBlock, ListContainer, Table)):
            yield _Match("D", path, document, None, detail=f"paragraph appended after {last.kind.value}")

    # Repairs

    def _apply_foreign_child(self, match: _Match) -> None:
        container = match.node
        assert isinstance(container, ListContainer)
        siblings = children_of(match.parent)
        assert siblings is not None
        position = match.path[-1]
        index = match.index
        last = len(container.children) - 1
        foreign = container.children.pop(index)

        if index == 0 or index == last:
            if foreign is not None:
                siblings.insert(position if index == 0 else position + 1, foreign)
                if index == 0:
                    position += 1
            if not container.children:
                del siblings[position]
            return

        before = container.children[:index]
        after = container.children[index:]
        container.children = before

        start = 1
        if container.list_kind is ListKind.ORDERED and foreign is not None:
            if foreign.kind in self.continuation_separators:
                start = get_list_start(container) + count_list_items(container)
        split_off = ListContainer(list_kind=container.list_kind, start=start, children=after)

        inserted: list[Node] = [foreign] if foreign is not None else []
        if split_off.children:
            inserted.append(split_off)
        siblings[position + 1 : position + 1] = inserted

    def _apply_hoist_code_block(self, match: _Match) -> None:
        found = _find_code_block(match.node)
        assert found is not None and match.parent is not None
        holder, index = found
        siblings = children_of(match.parent)
        assert siblings is not None
        code_block = holder.children.pop(index)  # type: ignore[attr-defined]
        siblings.insert(match.path[-1] + 1, code_block)

    def _apply_continuation(self, match: _Match) -> None:
        target = match.node.children[match.index]  # type: ignore[attr-defined]
        target.start = match.expected

    def _apply_trailing_paragraph(self, match: _Match) -> None:
        match.node.children.append(empty_paragraph())  # type: ignore[attr-defined]

    def _apply_empty_item(self, match: _Match) -> None:
        match.node.children.insert(0, empty_list_item_content())  # type: ignore[attr-defined]


def normalize(document: Node) -> Node:
    """Normalize a tree with the default rule configuration."""
    return Normalizer().normalize(document)
