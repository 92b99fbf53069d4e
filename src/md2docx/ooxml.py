"""WordprocessingML element builders shared by the renderer and table handler."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Iterable, Optional
from xml.etree.ElementTree import Element, SubElement

from md2docx.styles import BorderSpec, FontSpec, ParaSpec

# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------

NS = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

for _prefix, _uri in NS.items():
    ET.register_namespace(_prefix, _uri)

_XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

# Characters XML 1.0 does not allow, even escaped.
_ILLEGAL_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")

_ALIGN_MAP = {
    "left": "left",
    "center": "center",
    "right": "right",
    "both": "both",
    "justify": "both",
}

# Schema order of pBdr children.
_BORDER_SIDES = ("top", "left", "bottom", "right")


def w(tag: str) -> str:
    """Return the Clark-notation name of a ``w:`` element or attribute."""
    return f"{{{NS['w']}}}{tag}"


def xml_safe(text: str) -> str:
    """Drop characters that cannot appear in an XML 1.0 document."""
    return _ILLEGAL_XML_CHARS.sub("", text)


def _set(el: Element, **attrs: object) -> Element:
    for key, value in attrs.items():
        el.set(w(key), str(value))
    return el


# ---------------------------------------------------------------------------
# Property builders
# ---------------------------------------------------------------------------

def border_element(parent: Element, side: str, border: BorderSpec) -> Element:
    return _set(
        SubElement(parent, w(side)),
        val=border.style,
        sz=border.size,
        space=border.space,
        color=border.color,
    )


def shading_element(parent: Element, fill: str) -> Element:
    return _set(SubElement(parent, w("shd")), val="clear", color="auto", fill=fill)


def build_run_properties(parent: Element, font: FontSpec) -> Element:
    """Append a ``w:rPr`` for *font* to *parent* (children in schema order)."""
    rpr = SubElement(parent, w("rPr"))
    _set(
        SubElement(rpr, w("rFonts")),
        ascii=font.family,
        hAnsi=font.family,
        cs=font.family,
        eastAsia=font.family,
    )
    if font.bold:
        SubElement(rpr, w("b"))
    if font.italic:
        SubElement(rpr, w("i"))
    if font.strikethrough:
        SubElement(rpr, w("strike"))
    if font.color:
        _set(SubElement(rpr, w("color")), val=font.color)
    _set(SubElement(rpr, w("sz")), val=font.half_points)
    _set(SubElement(rpr, w("szCs")), val=font.half_points)
    if font.underline:
        _set(SubElement(rpr, w("u")), val="single")
    if font.background:
        shading_element(rpr, font.background)
    return rpr


def build_paragraph_properties(
    parent: Element,
    para: ParaSpec,
    *,
    style_id: str = "",
    outline_level: Optional[int] = None,
) -> Element:
    """Append a ``w:pPr`` for *para* to *parent* (children in schema order)."""
    ppr = SubElement(parent, w("pPr"))
    if style_id:
        _set(SubElement(ppr, w("pStyle")), val=style_id)

    sides = [s for s in _BORDER_SIDES if s in para.borders]
    if sides:
        pbdr = SubElement(ppr, w("pBdr"))
        for side in sides:
            border_element(pbdr, side, para.borders[side])

    if para.shading:
        shading_element(ppr, para.shading)

    spacing = _set(
        SubElement(ppr, w("spacing")),
        before=para.space_before_twips,
        after=para.space_after_twips,
    )
    if para.line_twips is not None:
        _set(spacing, line=para.line_twips, lineRule="auto")

    if para.indent_left_twips or para.indent_right_twips or para.hanging_twips:
        ind = _set(
            SubElement(ppr, w("ind")),
            left=para.indent_left_twips,
            right=para.indent_right_twips,
        )
        if para.hanging_twips:
            _set(ind, hanging=para.hanging_twips)

    _set(SubElement(ppr, w("jc")), val=_ALIGN_MAP.get(para.align, "left"))

    if outline_level is not None:
        _set(SubElement(ppr, w("outlineLvl")), val=outline_level)
    return ppr


# ---------------------------------------------------------------------------
# Paragraphs and runs
# ---------------------------------------------------------------------------

def make_run(parent: Element, text: str, font: FontSpec) -> Element:
    """Append a ``w:r`` with *text*; newlines become ``w:br`` breaks."""
    run = SubElement(parent, w("r"))
    build_run_properties(run, font)
    for idx, line in enumerate(text.split("\n")):
        if idx:
            SubElement(run, w("br"))
        if line:
            t = SubElement(run, w("t"))
            t.set(_XML_SPACE, "preserve")
            t.text = xml_safe(line)
    return run


def make_paragraph(
    runs: Iterable[tuple[str, FontSpec]],
    para: ParaSpec,
    *,
    style_id: str = "",
    outline_level: Optional[int] = None,
) -> Element:
    """Build a ``w:p`` from ``(text, font)`` runs; empty runs are skipped."""
    p = Element(w("p"))
    build_paragraph_properties(p, para, style_id=style_id, outline_level=outline_level)
    for text, font in runs:
        if not text:
            continue
        make_run(p, text, font)
    return p
