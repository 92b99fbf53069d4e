"""Tests for the HTML element parser."""

from __future__ import annotations

import pytest

from md2docx.elements import (
    ELEMENT_KINDS,
    Blockquote,
    CodeBlock,
    Heading,
    ListBlock,
    Paragraph,
    Rule,
    Table,
)
from md2docx.markup import markdown_to_tree, parse_html
from md2docx.parser import ElementParser


@pytest.fixture
def parser() -> ElementParser:
    return ElementParser()


def parse(parser: ElementParser, html: str) -> list:
    return parser.parse(parse_html(html))


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

class TestHeadings:
    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, parser: ElementParser, level: int) -> None:
        elements = parse(parser, f"<h{level}>Heading Level {level}</h{level}>")
        assert elements == [Heading(level=level, text=f"Heading Level {level}")]

    def test_level_above_six_is_clamped(self, parser: ElementParser) -> None:
        elements = parse(parser, "<h9>Deep</h9>")
        assert elements == [Heading(level=6, text="Deep")]

    def test_level_zero_is_clamped(self, parser: ElementParser) -> None:
        elements = parse(parser, "<h0>Top</h0>")
        assert elements == [Heading(level=1, text="Top")]

    def test_uppercase_tag(self, parser: ElementParser) -> None:
        elements = parse(parser, "<H2>Shout</H2>")
        assert elements == [Heading(level=2, text="Shout")]

    def test_heading_text_is_flattened(self, parser: ElementParser) -> None:
        elements = parse(parser, "<h2><strong>Bold</strong> Heading</h2>")
        assert elements == [Heading(level=2, text="Bold Heading")]


# ---------------------------------------------------------------------------
# Paragraphs
# ---------------------------------------------------------------------------

class TestParagraphs:
    def test_simple_paragraph(self, parser: ElementParser) -> None:
        assert parse(parser, "<p>Hello, world!</p>") == [Paragraph(text="Hello, world!")]

    def test_inline_markup_becomes_delimiters(self, parser: ElementParser) -> None:
        html = (
            "<p>a <strong>b</strong> <em>c</em> <code>d</code>"
            " <del>e</del> <u>f</u></p>"
        )
        assert parse(parser, html) == [Paragraph(text="a **b** *c* `d` ~~e~~ __f__")]

    def test_nested_inline_markup(self, parser: ElementParser) -> None:
        html = "<p><strong>bold <em>and italic</em></strong></p>"
        assert parse(parser, html) == [Paragraph(text="**bold *and italic***")]

    def test_code_with_backticks_gets_longer_fence(self, parser: ElementParser) -> None:
        assert parse(parser, "<p><code>a`b</code></p>") == [Paragraph(text="``a`b``")]
        assert parse(parser, "<p><code>x``y</code></p>") == [Paragraph(text="```x``y```")]

    def test_code_edge_backtick_is_padded(self, parser: ElementParser) -> None:
        assert parse(parser, "<p><code>`tick</code></p>") == [Paragraph(text="`` `tick ``")]

    def test_link_keeps_its_text(self, parser: ElementParser) -> None:
        html = '<p>See <a href="https://example.com">the site</a>.</p>'
        assert parse(parser, html) == [Paragraph(text="See the site.")]

    def test_line_break(self, parser: ElementParser) -> None:
        assert parse(parser, "<p>one<br>two</p>") == [Paragraph(text="one\ntwo")]

    def test_comments_are_ignored(self, parser: ElementParser) -> None:
        assert parse(parser, "<p>keep<!-- drop --></p>") == [Paragraph(text="keep")]

    def test_multiple_paragraphs_keep_order(self, parser: ElementParser) -> None:
        elements = parse(parser, "<p>First</p>\n<p>Second</p>\n<p>Third</p>")
        assert [e.text for e in elements] == ["First", "Second", "Third"]


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

class TestLists:
    def test_unordered(self, parser: ElementParser) -> None:
        elements = parse(parser, "<ul><li>one</li><li>two</li></ul>")
        assert elements == [ListBlock(ordered=False, items=("one", "two"))]

    def test_ordered(self, parser: ElementParser) -> None:
        elements = parse(parser, "<ol><li>first</li><li>second</li></ol>")
        assert elements == [ListBlock(ordered=True, items=("first", "second"))]

    def test_loose_list_items(self, parser: ElementParser) -> None:
        html = "<ul>\n<li><p>one</p></li>\n<li><p>two</p></li>\n</ul>"
        assert parse(parser, html) == [ListBlock(ordered=False, items=("one", "two"))]

    def test_nested_list_text_stays_out_of_parent_item(self, parser: ElementParser) -> None:
        html = "<ul><li>parent<ul><li>child</li></ul></li><li>sibling</li></ul>"
        assert parse(parser, html) == [ListBlock(ordered=False, items=("parent", "sibling"))]

    def test_item_markup_is_flattened(self, parser: ElementParser) -> None:
        html = "<ul><li>a <strong>bold</strong> item</li></ul>"
        assert parse(parser, html) == [ListBlock(ordered=False, items=("a bold item",))]


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------

class TestCodeBlocks:
    def test_language_from_class(self, parser: ElementParser) -> None:
        html = '<pre><code class="language-python">print(1)\n</code></pre>'
        assert parse(parser, html) == [CodeBlock(text="print(1)\n", language="python")]

    def test_no_language(self, parser: ElementParser) -> None:
        html = "<pre><code>plain\n</code></pre>"
        assert parse(parser, html) == [CodeBlock(text="plain\n", language="")]

    def test_other_classes_ignored(self, parser: ElementParser) -> None:
        html = '<pre><code class="hljs language-JSON">{}</code></pre>'
        assert parse(parser, html) == [CodeBlock(text="{}", language="json")]

    def test_pre_without_code(self, parser: ElementParser) -> None:
        assert parse(parser, "<pre>raw text</pre>") == [CodeBlock(text="raw text")]

    def test_entities_are_decoded(self, parser: ElementParser) -> None:
        html = "<pre><code>if a &lt; b &amp;&amp; c:</code></pre>"
        assert parse(parser, html) == [CodeBlock(text="if a < b && c:")]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

class TestTables:
    def test_headers_and_rows(self, parser: ElementParser) -> None:
        html = (
            "<table><thead><tr><th>A</th><th>B</th></tr></thead>"
            "<tbody><tr><td>1</td><td>2</td></tr>"
            "<tr><td>3</td><td>4</td></tr></tbody></table>"
        )
        assert parse(parser, html) == [
            Table(headers=("A", "B"), rows=(("1", "2"), ("3", "4")))
        ]

    def test_headers_without_body(self, parser: ElementParser) -> None:
        html = "<table><thead><tr><th>A</th><th>B</th></tr></thead></table>"
        assert parse(parser, html) == [Table(headers=("A", "B"), rows=())]

    def test_body_without_thead(self, parser: ElementParser) -> None:
        html = "<table><tbody><tr><td>x</td></tr></tbody></table>"
        assert parse(parser, html) == [Table(headers=(), rows=(("x",),))]

    def test_bare_rows_are_body_rows(self, parser: ElementParser) -> None:
        html = "<table><tr><td>x</td><td>y</td></tr></table>"
        assert parse(parser, html) == [Table(headers=(), rows=(("x", "y"),))]

    def test_empty_table(self, parser: ElementParser) -> None:
        elements = parse(parser, "<table></table>")
        assert elements == [Table()]
        assert elements[0].is_empty

    def test_ragged_rows_preserved(self, parser: ElementParser) -> None:
        html = (
            "<table><thead><tr><th>A</th><th>B</th><th>C</th></tr></thead>"
            "<tbody><tr><td>1</td></tr><tr><td>1</td><td>2</td><td>3</td><td>4</td></tr>"
            "</tbody></table>"
        )
        table = parse(parser, html)[0]
        assert table.rows == (("1",), ("1", "2", "3", "4"))

    def test_cell_text_is_stripped(self, parser: ElementParser) -> None:
        html = "<table><tbody><tr><td>\n  spaced  \n</td></tr></tbody></table>"
        assert parse(parser, html)[0].rows == (("spaced",),)


# ---------------------------------------------------------------------------
# Blockquote, rule and fallbacks
# ---------------------------------------------------------------------------

class TestOtherBlocks:
    def test_blockquote(self, parser: ElementParser) -> None:
        html = "<blockquote>\n<p>This is a quote</p>\n</blockquote>"
        assert parse(parser, html) == [Blockquote(text="This is a quote")]

    def test_rule(self, parser: ElementParser) -> None:
        assert parse(parser, "<hr>") == [Rule()]

    def test_unknown_tag_with_text_becomes_paragraph(self, parser: ElementParser) -> None:
        assert parse(parser, "<dl><dt>term</dt></dl>") == [Paragraph(text="term")]

    def test_unknown_tag_without_text_is_dropped(self, parser: ElementParser) -> None:
        assert parse(parser, "<span>   </span><img src='x.png'>") == []

    def test_containers_are_recursed(self, parser: ElementParser) -> None:
        html = "<div><section><h1>T</h1><p>body</p></section></div>"
        assert parse(parser, html) == [Heading(level=1, text="T"), Paragraph(text="body")]

    def test_bare_text_becomes_paragraph(self, parser: ElementParser) -> None:
        assert parse(parser, "loose text<p>para</p>") == [
            Paragraph(text="loose text"),
            Paragraph(text="para"),
        ]

    def test_scripts_are_skipped(self, parser: ElementParser) -> None:
        assert parse(parser, "<script>var x = 1;</script><p>ok</p>") == [Paragraph(text="ok")]

    def test_empty_input(self, parser: ElementParser) -> None:
        assert parse(parser, "") == []

    def test_malformed_html_does_not_raise(self, parser: ElementParser) -> None:
        html = "<p>unclosed <strong>bold<table><tr><td>cell"
        elements = parse(parser, html)
        assert elements
        assert elements[0].kind == "paragraph"

    def test_single_tag_root(self, parser: ElementParser) -> None:
        tree = parse_html("<blockquote>quoted</blockquote>")
        assert parser.parse(tree.blockquote) == [Blockquote(text="quoted")]

    def test_every_kind_has_an_element(self) -> None:
        assert set(ELEMENT_KINDS) == {
            "heading", "paragraph", "list", "code", "table", "blockquote", "rule",
        }


# ---------------------------------------------------------------------------
# From Markdown
# ---------------------------------------------------------------------------

class TestFromMarkdown:
    def test_heading_and_paragraph(self, parser: ElementParser) -> None:
        tree = markdown_to_tree("# Title\n\nSome **bold** text.")
        assert parser.parse(tree) == [
            Heading(level=1, text="Title"),
            Paragraph(text="Some **bold** text."),
        ]

    def test_fenced_code(self, parser: ElementParser) -> None:
        tree = markdown_to_tree("```python\nprint('hello')\n```")
        assert parser.parse(tree) == [CodeBlock(text="print('hello')\n", language="python")]

    def test_table(self, parser: ElementParser) -> None:
        tree = markdown_to_tree("| A | B |\n|---|---|\n| 1 | 2 |")
        assert parser.parse(tree) == [Table(headers=("A", "B"), rows=(("1", "2"),))]

    def test_strikethrough(self, parser: ElementParser) -> None:
        tree = markdown_to_tree("~~gone~~ here")
        assert parser.parse(tree) == [Paragraph(text="~~gone~~ here")]

    def test_every_block_kind(self, parser: ElementParser) -> None:
        md = (
            "# H\n\npara\n\n- a\n\n```\ncode\n```\n\n"
            "| A | B |\n|---|---|\n| 1 | 2 |\n\n> quote\n\n---\n"
        )
        kinds = [e.kind for e in parser.parse(markdown_to_tree(md))]
        assert kinds == ["heading", "paragraph", "list", "code", "table", "blockquote", "rule"]
