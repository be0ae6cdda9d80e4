"""Tests for column layout HTML encoding."""

import logging

from richdoc.editor.nodes import Column, ColumnGroup, Paragraph, Text
from richdoc.markdown.columns import (
    decode_column_html,
    encode_column_group,
    escape_content,
    is_column_html,
)
from tests.conftest import paragraph


def group_of(*texts: str) -> ColumnGroup:
    return ColumnGroup(children=[Column(children=[paragraph(text)]) for text in texts])


def column_texts(group: ColumnGroup) -> list[str]:
    return ["\n".join(p.children[0].text for p in column.children) for column in group.children]


class TestEncode:
    """Tests for writing column layouts."""

    def test_single_line_with_count(self):
        html = encode_column_group(group_of("L", "M", "R"))

        assert "\n" not in html
        assert html == (
            '<div class="oc-columns" data-columns="3">'
            '<div class="oc-column" data-content="L"></div>'
            '<div class="oc-column" data-content="M"></div>'
            '<div class="oc-column" data-content="R"></div>'
            "</div>"
        )

    def test_content_is_escaped(self):
        html = encode_column_group(group_of('a < b & "c" > d'))

        assert 'data-content="a &lt; b &amp; &quot;c&quot; &gt; d"' in html

    def test_multiple_paragraphs_stay_on_one_line(self):
        group = ColumnGroup(children=[Column(children=[paragraph("one"), paragraph("two")])])

        html = encode_column_group(group)

        assert "\n" not in html
        assert "one&#10;two" in html

    def test_empty_group_defaults_to_two(self):
        assert 'data-columns="2"' in encode_column_group(ColumnGroup())

    def test_escape_content(self):
        assert escape_content("&<>\"\n") == "&amp;&lt;&gt;&quot;&#10;"

    def test_is_column_html(self):
        assert is_column_html(encode_column_group(group_of("x")))
        assert not is_column_html("<div>plain</div>")


class TestDecode:
    """Tests for reading column layouts."""

    def test_round_trip(self):
        group = decode_column_html(encode_column_group(group_of("L", "M", "R")))

        assert isinstance(group, ColumnGroup)
        assert column_texts(group) == ["L", "M", "R"]
        assert all(column.width == "33%" for column in group.children)

    def test_special_characters_round_trip(self):
        group = decode_column_html(encode_column_group(group_of('x < y & "z"', "second")))

        assert column_texts(group) == ['x < y & "z"', "second"]

    def test_multiline_content_becomes_paragraphs(self):
        group = ColumnGroup(children=[Column(children=[paragraph("one"), paragraph("two")])])

        decoded = decode_column_html(encode_column_group(group))

        assert decoded.children[0].children == [paragraph("one"), paragraph("two")]

    def test_legacy_format(self):
        html = (
            '<div class="oc-columns" data-columns="2">'
            '<div class="oc-column"> Left </div><div class="oc-column">Right</div></div>'
        )

        group = decode_column_html(html)

        assert column_texts(group) == ["Left", "Right"]
        assert group.children[0].width == "50%"

    def test_missing_content_synthesizes_empty_columns(self, caplog):
        with caplog.at_level(logging.WARNING):
            group = decode_column_html('<div class="oc-columns"></div>')

        assert group == ColumnGroup(
            children=[
                Column(width="50%", children=[Paragraph(children=[Text("")])]),
                Column(width="50%", children=[Paragraph(children=[Text("")])]),
            ]
        )
        assert "empty columns" in caplog.text

    def test_missing_content_uses_declared_count(self):
        group = decode_column_html('<div class="oc-columns" data-columns="4"></div>')

        assert len(group.children) == 4
        assert group.children[0].width == "25%"

    def test_large_count_synthesizes_empty_columns(self, caplog):
        with caplog.at_level(logging.WARNING):
            group = decode_column_html('<div class="oc-columns" data-columns="13"></div>')

        assert isinstance(group, ColumnGroup)
        assert len(group.children) == 13
        assert all(column.width == "7%" for column in group.children)
        assert "13 empty columns" in caplog.text

    def test_zero_columns_keeps_raw_text(self, caplog):
        html = '<div class="oc-columns" data-columns="0"></div>'

        with caplog.at_level(logging.WARNING):
            node = decode_column_html(html)

        assert node == Paragraph(children=[Text(html)])
        assert "must be positive" in caplog.text
