"""Rendering of mdast nodes to Markdown text."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import replace

from .mdast import MdNode

BULLETS = ("-", "*", "+")

# Characters escaped wherever they appear in literal text
_INLINE_SPECIALS = re.compile(r"([\\`*_\[\]<&~|])")
# Line starts that would otherwise open a block construct
_BLOCK_START = re.compile(r"^(?:([#>+=-])|(\d+)([.)]))")
_FENCE_RUN = re.compile(r"^ {0,3}(`{3,})", re.MULTILINE)
_BACKTICK_RUN = re.compile(r"`+")

_WRAPPERS = {"strong": "**", "emphasis": "*", "delete": "~~"}


class MarkdownRenderer:
    """Renders an mdast tree to CommonMark + GFM text.

    Lists are rendered tight unless an item holds several paragraphs.
    Adjacent sibling lists of the same family alternate their marker so they
    stay separate lists when parsed again.
    """

    def __init__(self, bullet: str = "-"):
        if bullet not in BULLETS:
            raise ValueError(f"Invalid bullet marker: {bullet!r}. Must be one of {BULLETS}.")
        self.bullet = bullet
        self.alt_bullet = "*" if bullet != "*" else "-"

    def render(self, root: MdNode) -> str:
        """Render a root node to Markdown text ending with a newline."""
        text, _ = self._render_sequence(root.children, tight=False)
        return f"{text}\n" if text else ""

    # Blocks

    def _render_sequence(self, nodes: list[MdNode], tight: bool) -> tuple[str, str | None]:
        """Render sibling blocks.

        Returns:
            Tuple of (text, type of the first block that produced output)
        """
        text = ""
        first_type: str | None = None
        previous: MdNode | None = None
        alternate = False
        for node in nodes:
            if node.type == "list":
                same_family = (
                    previous is not None
                    and previous.type == "list"
                    and bool(previous.ordered) == bool(node.ordered)
                )
                alternate = not alternate if same_family else False
            rendered = self._render_block(node, alternate=alternate)
            if not rendered:
                continue
            if previous is None:
                first_type = node.type
            elif tight and _can_interrupt(node, rendered):
                # Inside list items, lists and fences can follow without a blank line
                text += "\n"
            else:
                text += "\n\n"
            text += rendered
            previous = node
        return text, first_type

    def _render_block(self, node: MdNode, alternate: bool = False) -> str:
        node_type = node.type

        if node_type == "paragraph":
            return self._render_paragraph(node)
        if node_type == "heading":
            return self._render_heading(node)
        if node_type == "blockquote":
            inner, _ = self._render_sequence(node.children, tight=False)
            return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
        if node_type == "thematicBreak":
            return "---"
        if node_type == "code":
            return self._render_code(node)
        if node_type == "list":
            return self._render_list(node, alternate)
        if node_type == "table":
            return self._render_table(node)
        if node_type == "html":
            return (node.value or "").rstrip("\n")
        if node_type == "listItem":
            # Stray item outside a list
            return self._render_list(MdNode("list", ordered=False, children=[node]), alternate)
        return self._render_paragraph(
            MdNode("paragraph", children=[MdNode("text", value=node.text_content())])
        )

    def _render_paragraph(self, node: MdNode) -> str:
        children = list(node.children)
        while children and children[-1].type == "break":
            children.pop()
        text = self.render_inlines(children)
        return "\n".join(_protect_line_start(line.strip()) for line in text.split("\n")).strip("\n")

    def _render_heading(self, node: MdNode) -> str:
        depth = min(max(node.depth or 1, 1), 6)
        text = self.render_inlines(_breaks_to_spaces(node.children)).strip()
        if text.endswith("#"):
            # Keep a trailing hash from being read as a closing sequence
            text = f"{text[:-1]}\\#"
        return f"{'#' * depth} {text}".rstrip()

    def _render_code(self, node: MdNode) -> str:
        code = node.value or ""
        longest = max((len(run) for run in _FENCE_RUN.findall(code)), default=2)
        fence = "`" * max(3, longest + 1)
        body = f"{code}\n" if code else ""
        return f"{fence}{node.lang or ''}\n{body}{fence}"

    def _render_list(self, node: MdNode, alternate: bool) -> str:
        lines: list[str] = []
        number = node.start if node.start is not None else 1
        for item in node.children:
            if node.ordered:
                marker = f"{number}{')' if alternate else '.'}"
                number += 1
            else:
                marker = self.alt_bullet if alternate else self.bullet
            lines.append(self._render_list_item(item, marker))
        return "\n".join(lines)

    def _render_list_item(self, item: MdNode, marker: str) -> str:
        if item.type != "listItem":
            item = MdNode("listItem", children=[item])
        body, first_type = self._render_sequence(item.children, tight=True)

        if item.checked is not None:
            box = "[x]" if item.checked else "[ ]"
            if not body:
                body = box
            elif first_type == "paragraph":
                body = f"{box} {body}"
            else:
                body = f"{box}\n{body}"

        if not body:
            return marker

        indent = " " * (len(marker) + 1)
        lines = body.split("\n")
        rendered = [f"{marker} {lines[0]}"]
        rendered.extend(f"{indent}{line}" if line else "" for line in lines[1:])
        return "\n".join(rendered)

    def _render_table(self, node: MdNode) -> str:
        rows = [
            [
                self.render_inlines(_escape_code_pipes(_breaks_to_spaces(cell.children))).strip()
                for cell in row.children
            ]
            for row in node.children
        ]
        if not rows:
            return ""
        width = max(1, *(len(row) for row in rows))
        rows = [row + [""] * (width - len(row)) for row in rows]

        lines = [_table_line(rows[0]), _table_line(["---"] * width)]
        lines.extend(_table_line(row) for row in rows[1:])
        return "\n".join(lines)

    # Inlines

    def render_inlines(self, nodes: list[MdNode]) -> str:
        pieces = [self._render_inline(node) for node in nodes]
        for index, node in enumerate(nodes):
            if node.type in _WRAPPERS and pieces[index].strip():
                _fix_flanking(pieces, index, _WRAPPERS[node.type])
            if index and pieces[index].startswith("[") and pieces[index - 1].endswith("!"):
                # Keep a link after "!" from being read as an image
                pieces[index - 1] = f"{pieces[index - 1][:-1]}\\!"
        return "".join(pieces)

    def _render_inline(self, node: MdNode) -> str:
        node_type = node.type

        if node_type == "text":
            return escape_text(node.value or "")
        if node_type == "break":
            return "\\\n"
        if node_type == "inlineCode":
            return _code_span(node.value or "")
        if node_type in _WRAPPERS:
            inner = self.render_inlines(node.children)
            core = inner.strip()
            if not core:
                return inner
            # Delimiters must touch non-space characters
            lead = inner[: len(inner) - len(inner.lstrip())]
            trail = inner[len(inner.rstrip()) :]
            wrapper = _WRAPPERS[node_type]
            return f"{lead}{wrapper}{core}{wrapper}{trail}"
        if node_type == "link":
            label = self.render_inlines(node.children)
            url = (node.url or "").replace(" ", "%20").replace("(", "%28").replace(")", "%29")
            return f"[{label}]({url})"
        return escape_text(node.text_content())


def escape_text(text: str) -> str:
    """Backslash-escape characters that would be read as Markdown syntax."""
    return _INLINE_SPECIALS.sub(r"\\\1", text)


def _protect_line_start(line: str) -> str:
    match = _BLOCK_START.match(line)
    if not match:
        return line
    if match.group(1):
        return f"\\{line}"
    digits, punctuation = match.group(2), match.group(3)
    return f"{digits}\\{punctuation}{line[match.end():]}"


def _can_interrupt(node: MdNode, rendered: str) -> bool:
    """Whether a block may start right after a paragraph line.

    An ordered list must start at 1 and a list must not open with an empty
    item, otherwise the line is read as paragraph text or a setext underline.
    """
    if node.type == "code":
        return True
    if node.type != "list":
        return False
    if node.ordered and node.start not in (None, 1):
        return False
    _, _, first_text = rendered.partition("\n")[0].partition(" ")
    return bool(first_text.strip())


def _fix_flanking(pieces: list[str], index: int, wrapper: str) -> None:
    """Make the delimiters of a wrapped run open and close.

    A delimiter next to punctuation on its inner side only counts when its
    outer side is whitespace or punctuation. An adjacent word character is
    written as a character reference instead, which parses back to itself.
    """
    piece = pieces[index]
    core = piece.strip()
    if index > 0 and not piece[0].isspace() and _is_punctuation(core[len(wrapper)]):
        previous = pieces[index - 1]
        if previous and _is_word_char(previous[-1]):
            pieces[index - 1] = f"{previous[:-1]}{_char_ref(previous[-1])}"
    if index + 1 < len(pieces) and not piece[-1].isspace() and _is_punctuation(core[-len(wrapper) - 1]):
        following = pieces[index + 1]
        if following and _is_word_char(following[0]):
            pieces[index + 1] = f"{_char_ref(following[0])}{following[1:]}"


def _is_punctuation(char: str) -> bool:
    return unicodedata.category(char)[0] in "PS"


def _is_word_char(char: str) -> bool:
    return not char.isspace() and not _is_punctuation(char)


def _char_ref(char: str) -> str:
    return f"&#x{ord(char):X};"


def _escape_code_pipes(nodes: list[MdNode]) -> list[MdNode]:
    """Escape pipes in code spans, which would otherwise split a table cell."""
    escaped = []
    for node in nodes:
        if node.type == "inlineCode":
            node = replace(node, value=(node.value or "").replace("|", "\\|"))
        elif node.children:
            node = replace(node, children=_escape_code_pipes(node.children))
        escaped.append(node)
    return escaped


def _breaks_to_spaces(nodes: list[MdNode]) -> list[MdNode]:
    return [MdNode("text", value=" ") if node.type == "break" else node for node in nodes]


def _code_span(code: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(code)), default=0)
    fence = "`" * (longest + 1)
    padded = code.startswith("`") or code.endswith("`")
    if padded or (code.startswith(" ") and code.endswith(" ") and code.strip()):
        code = f" {code} "
    return f"{fence}{code}{fence}"


def _table_line(cells: list[str]) -> str:
    return "| " + " | ".join(cells) + " |"
