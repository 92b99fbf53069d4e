"""Tests for DOCX packaging."""

from __future__ import annotations

import io
import zipfile
import xml.etree.ElementTree as ET

import pytest

from md2docx.assembler import (
    DocumentAssembler,
    ParagraphBlock,
    TableBlock,
    TableCellBlock,
    TableRowBlock,
)
from md2docx.elements import CodeBlock, Heading, Paragraph, Table
from md2docx.ooxml import NS
from md2docx.renderer import DocxRenderer

W = f"{{{NS['w']}}}"

EXPECTED_PARTS = {
    "[Content_Types].xml",
    "_rels/.rels",
    "docProps/core.xml",
    "docProps/app.xml",
    "word/_rels/document.xml.rels",
    "word/settings.xml",
    "word/styles.xml",
    "word/document.xml",
}


def render(elements, theme: str = "minimal") -> bytes:
    blocks = DocumentAssembler(theme).assemble(elements)
    return DocxRenderer(theme).render(blocks)


def read_part(data: bytes, name: str) -> ET.Element:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return ET.fromstring(zf.read(name))


def body_of(data: bytes) -> ET.Element:
    return read_part(data, "word/document.xml").find(f"{W}body")


class TestPackage:
    def test_is_zip_with_all_parts(self) -> None:
        data = render([Paragraph("hello")])
        assert data[:2] == b"PK"
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert set(zf.namelist()) == EXPECTED_PARTS
            assert zf.namelist()[0] == "[Content_Types].xml"
            assert zf.testzip() is None

    def test_every_part_is_well_formed_xml(self) -> None:
        data = render([Heading(1, "T"), Paragraph("a & b < c")])
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            for name in zf.namelist():
                ET.fromstring(zf.read(name))

    def test_output_is_deterministic(self) -> None:
        elements = [Heading(1, "Same"), Paragraph("**bold**"), Table(("A",), (("1",),))]
        assert render(elements) == render(elements)

    def test_empty_document_is_valid(self) -> None:
        body = body_of(render([]))
        children = list(body)
        assert [c.tag for c in children] == [f"{W}p", f"{W}sectPr"]

    def test_control_characters_are_dropped(self) -> None:
        data = render([
            Paragraph("Page one\x0cpage two\x00 end"),
            Table(("a\x01",), (("b\x1f",),)),
        ])
        body = body_of(data)
        text = "".join(t.text for t in body.iter(f"{W}t"))
        assert text == "Page onepage two endab"

    def test_control_characters_in_title(self) -> None:
        data = DocxRenderer("minimal", title="Draft\x0b1").render([])
        core = read_part(data, "docProps/core.xml")
        assert core.find("{http://purl.org/dc/elements/1.1/}title").text == "Draft1"

    def test_title_in_core_properties(self) -> None:
        data = DocxRenderer("minimal", title="Notes & Ideas").render([])
        core = read_part(data, "docProps/core.xml")
        title = core.find("{http://purl.org/dc/elements/1.1/}title")
        assert title.text == "Notes & Ideas"

    def test_render_to_file(self, tmp_path) -> None:
        path = tmp_path / "out.docx"
        DocxRenderer().render_to_file([], str(path))
        assert zipfile.is_zipfile(path)

    def test_unknown_block_type(self) -> None:
        with pytest.raises(TypeError):
            DocxRenderer().render(["not a block"])


class TestStyleCatalog:
    def test_five_paragraph_styles(self) -> None:
        styles = read_part(render([]), "word/styles.xml")
        ids = [s.get(f"{W}styleId") for s in styles.findall(f"{W}style")]
        assert ids == ["Heading1", "Heading2", "Heading3", "CodeBlock", "Quote"]

    def test_default_font_follows_theme(self) -> None:
        styles = read_part(render([], "elegant"), "word/styles.xml")
        fonts = styles.find(f"{W}docDefaults/{W}rPrDefault/{W}rPr/{W}rFonts")
        assert fonts.get(f"{W}ascii") == "Georgia"

    def test_code_block_style(self) -> None:
        styles = read_part(render([]), "word/styles.xml")
        code = styles.findall(f"{W}style")[3]
        assert code.find(f"{W}rPr/{W}sz").get(f"{W}val") == "18"
        spacing = code.find(f"{W}pPr/{W}spacing")
        assert spacing.get(f"{W}before") == "227"
        assert spacing.get(f"{W}after") == "227"

    def test_heading_outline_level(self) -> None:
        styles = read_part(render([]), "word/styles.xml")
        heading2 = styles.findall(f"{W}style")[1]
        assert heading2.find(f"{W}pPr/{W}outlineLvl").get(f"{W}val") == "1"


class TestBody:
    def test_paragraph_runs(self) -> None:
        body = body_of(render([Paragraph("Some **bold** text.")]))
        p = body.find(f"{W}p")
        runs = p.findall(f"{W}r")
        assert ["".join(r.itertext()) for r in runs] == ["Some ", "bold", " text."]
        assert runs[1].find(f"{W}rPr/{W}b") is not None
        assert runs[0].find(f"{W}rPr/{W}b") is None

    def test_whitespace_preserved(self) -> None:
        body = body_of(render([Paragraph("a **b** c")]))
        t = body.find(f"{W}p/{W}r/{W}t")
        assert t.get("{http://www.w3.org/XML/1998/namespace}space") == "preserve"

    def test_heading_style_reference(self) -> None:
        body = body_of(render([Heading(2, "Sub")]))
        p_style = body.find(f"{W}p/{W}pPr/{W}pStyle")
        assert p_style.get(f"{W}val") == "Heading2"

    def test_code_lines_reference_code_style(self) -> None:
        body = body_of(render([CodeBlock("a\nb\n")]))
        styles = [
            el.get(f"{W}val")
            for el in body.iter(f"{W}pStyle")
        ]
        assert styles == ["CodeBlock", "CodeBlock"]
        sizes = [el.get(f"{W}val") for el in body.iter(f"{W}sz")]
        assert sizes == ["20", "20"]

    def test_trailing_table_gets_closing_paragraph(self) -> None:
        body = body_of(render([Table(("A",), (("1",),))]))
        tags = [c.tag for c in body]
        assert tags == [f"{W}tbl", f"{W}p", f"{W}sectPr"]

    def test_page_setup(self) -> None:
        body = body_of(render([Paragraph("x")]))
        margins = body.find(f"{W}sectPr/{W}pgMar")
        assert margins.get(f"{W}top") == "1440"
        assert margins.get(f"{W}left") == "1440"


class TestTables:
    def _table(self, data: bytes) -> ET.Element:
        return body_of(data).find(f"{W}tbl")

    def test_header_row_repeats(self) -> None:
        tbl = self._table(render([Table(("A", "B"), (("1", "2"),))]))
        rows = tbl.findall(f"{W}tr")
        assert len(rows) == 2
        assert rows[0].find(f"{W}trPr/{W}tblHeader") is not None
        assert rows[1].find(f"{W}trPr") is None

    def test_header_cell_shading(self) -> None:
        tbl = self._table(render([Table(("A",), (("1",),))], "elegant"))
        shd = tbl.find(f"{W}tr/{W}tc/{W}tcPr/{W}shd")
        assert shd.get(f"{W}fill") == "FAF5FF"

    def test_ragged_rows_are_padded(self) -> None:
        tbl = self._table(render([Table(("A", "B", "C"), (("1",),))]))
        assert len(tbl.findall(f"{W}tblGrid/{W}gridCol")) == 3
        for tr in tbl.findall(f"{W}tr"):
            assert len(tr.findall(f"{W}tc")) == 3

    def test_every_cell_has_a_paragraph(self) -> None:
        tbl = self._table(render([Table(("A", "B"), (("1",),))]))
        for tc in tbl.iter(f"{W}tc"):
            assert tc.find(f"{W}p") is not None

    def test_borders(self) -> None:
        tbl = self._table(render([Table(("A",))]))
        borders = tbl.find(f"{W}tblPr/{W}tblBorders")
        sides = [child.tag[len(W):] for child in borders]
        assert sides == ["top", "left", "bottom", "right", "insideH", "insideV"]

    def test_table_without_rows_rejected(self) -> None:
        with pytest.raises(ValueError):
            DocxRenderer().render([TableBlock()])

    def test_hand_built_blocks(self) -> None:
        table = TableBlock(rows=[TableRowBlock(cells=[TableCellBlock(), TableCellBlock()])])
        data = DocxRenderer().render([ParagraphBlock(), table])
        assert self._table(data) is not None
