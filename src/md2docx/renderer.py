"""DOCX document renderer - serialises document blocks to a .docx file.

A DOCX file is a ZIP archive of Office Open XML parts.  The renderer
writes the package skeleton (content types, relationships, document
properties), the style catalog in ``word/styles.xml`` and the body in
``word/document.xml``.  The body is built with ElementTree; the fixed
parts are plain strings.
"""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Optional
from xml.etree.ElementTree import Element, SubElement, tostring

from md2docx import __version__
from md2docx.assembler import DocumentBlock, ParagraphBlock, TableBlock
from md2docx.ooxml import NS, make_paragraph, w, xml_safe
from md2docx.styles import (
    BorderSpec,
    StyleDef,
    Theme,
    body_font,
    catalog_styles,
)
from md2docx.table_handler import TableHandler

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page geometry (twips)
# ---------------------------------------------------------------------------

_A4_WIDTH = 11906    # 210mm
_A4_HEIGHT = 16838   # 297mm
_MARGIN = 1440       # 1 inch on every side
_HEADER_FOOTER = 708
_CONTENT_WIDTH = _A4_WIDTH - 2 * _MARGIN

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

_XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Fixed timestamp so identical input gives byte-identical archives.
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _xml_escape(s: str) -> str:
    """Escape XML special characters for string-built XML."""
    return (
        xml_safe(s).replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _zip_info(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_ZIP_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    return info


def _border_xml(side: str, border: BorderSpec) -> str:
    return (
        f'<w:{side} w:val="{border.style}" w:sz="{border.size}"'
        f' w:space="{border.space}" w:color="{border.color}"/>'
    )


# ---------------------------------------------------------------------------
# DocxRenderer
# ---------------------------------------------------------------------------

class DocxRenderer:
    """Render a list of document blocks to DOCX bytes."""

    def __init__(self, theme: str | Theme = Theme.MINIMAL, title: str = "") -> None:
        self.theme = Theme.coerce(theme)
        self.title = title
        self.tables = TableHandler(_CONTENT_WIDTH)

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, blocks: list[DocumentBlock]) -> bytes:
        """Return a complete DOCX file as *bytes* for *blocks*."""
        body_elements: list[Element] = []
        for block in blocks:
            body_elements.append(self._render_block(block))
        return self._package_docx(body_elements)

    def render_to_file(self, blocks: list[DocumentBlock], path: str) -> None:
        """Render and write to *path*."""
        data = self.render(blocks)
        with open(path, "wb") as fh:
            fh.write(data)

    # ======================================================================
    # Block dispatch
    # ======================================================================

    def _render_block(self, block: DocumentBlock) -> Element:
        if isinstance(block, TableBlock):
            return self.tables.render_table(block)
        if isinstance(block, ParagraphBlock):
            return self._render_paragraph(block)
        raise TypeError(f"Unsupported block type {type(block).__name__}")

    def _render_paragraph(self, block: ParagraphBlock) -> Element:
        outline: Optional[int] = None
        if block.is_heading:
            outline = block.heading_level - 1
        return make_paragraph(
            [(span.text, span.font) for span in block.spans],
            block.para,
            style_id=block.style_id,
            outline_level=outline,
        )

    # ======================================================================
    # DOCX ZIP packaging
    # ======================================================================

    def _package_docx(self, body_elements: list[Element]) -> bytes:
        """Assemble body elements into a DOCX ZIP archive."""
        buf = io.BytesIO()

        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
            # [Content_Types].xml must be the first entry.
            zf.writestr(_zip_info("[Content_Types].xml"), self._build_content_types())
            zf.writestr(_zip_info("_rels/.rels"), self._build_package_rels())
            zf.writestr(_zip_info("docProps/core.xml"), self._build_core_xml())
            zf.writestr(_zip_info("docProps/app.xml"), self._build_app_xml())
            zf.writestr(
                _zip_info("word/_rels/document.xml.rels"),
                self._build_document_rels(),
            )
            zf.writestr(_zip_info("word/settings.xml"), self._build_settings_xml())
            zf.writestr(_zip_info("word/styles.xml"), self._build_styles_xml())
            zf.writestr(
                _zip_info("word/document.xml"),
                self._build_document_xml(body_elements),
            )

        return buf.getvalue()

    # -- Fixed-structure XML files ------------------------------------------

    def _build_content_types(self) -> str:
        ct = "application/vnd.openxmlformats-officedocument"
        return (
            _XML_DECL +
            '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
            '<Default Extension="rels"'
            ' ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
            '<Default Extension="xml" ContentType="application/xml"/>'
            '<Override PartName="/word/document.xml"'
            f' ContentType="{ct}.wordprocessingml.document.main+xml"/>'
            '<Override PartName="/word/styles.xml"'
            f' ContentType="{ct}.wordprocessingml.styles+xml"/>'
            '<Override PartName="/word/settings.xml"'
            f' ContentType="{ct}.wordprocessingml.settings+xml"/>'
            '<Override PartName="/docProps/core.xml"'
            ' ContentType="application/vnd.openxmlformats-package.core-properties+xml"/>'
            '<Override PartName="/docProps/app.xml"'
            f' ContentType="{ct}.extended-properties+xml"/>'
            '</Types>'
        )

    def _build_package_rels(self) -> str:
        rel = "http://schemas.openxmlformats.org"
        return (
            _XML_DECL +
            f'<Relationships xmlns="{rel}/package/2006/relationships">'
            '<Relationship Id="rId1"'
            f' Type="{rel}/officeDocument/2006/relationships/officeDocument"'
            ' Target="word/document.xml"/>'
            '<Relationship Id="rId2"'
            f' Type="{rel}/package/2006/relationships/metadata/core-properties"'
            ' Target="docProps/core.xml"/>'
            '<Relationship Id="rId3"'
            f' Type="{rel}/officeDocument/2006/relationships/extended-properties"'
            ' Target="docProps/app.xml"/>'
            '</Relationships>'
        )

    def _build_document_rels(self) -> str:
        rel = "http://schemas.openxmlformats.org"
        return (
            _XML_DECL +
            f'<Relationships xmlns="{rel}/package/2006/relationships">'
            '<Relationship Id="rId1"'
            f' Type="{rel}/officeDocument/2006/relationships/styles"'
            ' Target="styles.xml"/>'
            '<Relationship Id="rId2"'
            f' Type="{rel}/officeDocument/2006/relationships/settings"'
            ' Target="settings.xml"/>'
            '</Relationships>'
        )

    def _build_core_xml(self) -> str:
        return (
            _XML_DECL +
            '<cp:coreProperties'
            ' xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties"'
            ' xmlns:dc="http://purl.org/dc/elements/1.1/"'
            ' xmlns:dcterms="http://purl.org/dc/terms/"'
            ' xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
            f'<dc:title>{_xml_escape(self.title)}</dc:title>'
            '<dc:creator>md2docx</dc:creator>'
            '</cp:coreProperties>'
        )

    def _build_app_xml(self) -> str:
        return (
            _XML_DECL +
            '<Properties'
            ' xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties">'
            '<Application>md2docx</Application>'
            f'<AppVersion>{_xml_escape(__version__)}</AppVersion>'
            '</Properties>'
        )

    def _build_settings_xml(self) -> str:
        return (
            _XML_DECL +
            f'<w:settings xmlns:w="{NS["w"]}">'
            '<w:defaultTabStop w:val="720"/>'
            '<w:compat>'
            '<w:compatSetting w:name="compatibilityMode"'
            ' w:uri="http://schemas.microsoft.com/office/word" w:val="15"/>'
            '</w:compat>'
            '</w:settings>'
        )

    # -- styles.xml (style catalog) ----------------------------------------

    def _build_styles_xml(self) -> str:
        """Build ``word/styles.xml``: document defaults plus the named styles."""
        font = body_font(self.theme)
        L = []  # noqa: E741
        a = L.append

        a(_XML_DECL)
        a(f'<w:styles xmlns:w="{NS["w"]}">')

        face = _xml_escape(font.family)
        a('<w:docDefaults>'
          '<w:rPrDefault><w:rPr>'
          f'<w:rFonts w:ascii="{face}" w:hAnsi="{face}" w:cs="{face}" w:eastAsia="{face}"/>'
          f'<w:color w:val="{font.color}"/>'
          f'<w:sz w:val="{font.half_points}"/><w:szCs w:val="{font.half_points}"/>'
          '</w:rPr></w:rPrDefault>'
          '<w:pPrDefault><w:pPr>'
          '<w:spacing w:after="0" w:line="240" w:lineRule="auto"/>'
          '</w:pPr></w:pPrDefault>'
          '</w:docDefaults>')

        for style in catalog_styles(self.theme):
            a(self._style_xml(style))

        a('</w:styles>')
        return "".join(L)

    def _style_xml(self, style: StyleDef) -> str:
        font, para = style.font, style.para
        L = []  # noqa: E741
        a = L.append

        a(f'<w:style w:type="paragraph" w:customStyle="1" w:styleId="{style.style_id}">')
        a(f'<w:name w:val="{_xml_escape(style.name)}"/>')
        a('<w:qFormat/>')

        is_heading = style.style_id.startswith("Heading")
        a('<w:pPr>')
        if is_heading:
            a('<w:keepNext/>')
        if para.borders:
            a('<w:pBdr>')
            for side in ("top", "left", "bottom", "right"):
                if side in para.borders:
                    a(_border_xml(side, para.borders[side]))
            a('</w:pBdr>')
        if para.shading:
            a(f'<w:shd w:val="clear" w:color="auto" w:fill="{para.shading}"/>')
        spacing = (
            f'<w:spacing w:before="{para.space_before_twips}"'
            f' w:after="{para.space_after_twips}"'
        )
        if para.line_twips is not None:
            spacing += f' w:line="{para.line_twips}" w:lineRule="auto"'
        a(spacing + '/>')
        if para.indent_left_twips or para.indent_right_twips:
            a(f'<w:ind w:left="{para.indent_left_twips}"'
              f' w:right="{para.indent_right_twips}"/>')
        if is_heading:
            level = int(style.style_id[len("Heading"):])
            a(f'<w:outlineLvl w:val="{level - 1}"/>')
        a('</w:pPr>')

        face = _xml_escape(font.family)
        a('<w:rPr>')
        a(f'<w:rFonts w:ascii="{face}" w:hAnsi="{face}" w:cs="{face}"/>')
        if font.bold:
            a('<w:b/>')
        if font.italic:
            a('<w:i/>')
        a(f'<w:color w:val="{font.color}"/>')
        a(f'<w:sz w:val="{font.half_points}"/><w:szCs w:val="{font.half_points}"/>')
        a('</w:rPr>')

        a('</w:style>')
        return "".join(L)

    # -- document.xml (body content) ---------------------------------------

    def _build_document_xml(self, body_elements: list[Element]) -> str:
        """Build ``word/document.xml`` with the body and a single section."""
        document = Element(w("document"))
        body = SubElement(document, w("body"))

        for el in body_elements:
            body.append(el)

        # The body must contain at least one paragraph and may not end on a table.
        if not body_elements or body_elements[-1].tag == w("tbl"):
            SubElement(body, w("p"))

        body.append(self._build_section_properties())
        return _XML_DECL + tostring(document, encoding="unicode")

    def _build_section_properties(self) -> Element:
        sect = Element(w("sectPr"))

        pg_sz = SubElement(sect, w("pgSz"))
        pg_sz.set(w("w"), str(_A4_WIDTH))
        pg_sz.set(w("h"), str(_A4_HEIGHT))

        pg_mar = SubElement(sect, w("pgMar"))
        for key in ("top", "right", "bottom", "left"):
            pg_mar.set(w(key), str(_MARGIN))
        pg_mar.set(w("header"), str(_HEADER_FOOTER))
        pg_mar.set(w("footer"), str(_HEADER_FOOTER))
        pg_mar.set(w("gutter"), "0")

        SubElement(sect, w("cols")).set(w("space"), "720")
        return sect
