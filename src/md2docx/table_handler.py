"""DOCX table handler for converting table blocks to WordprocessingML.

Converts :class:`~md2docx.assembler.TableBlock` objects into ``w:tbl``
elements using ElementTree.  It supports:
- Header row distinction (bold text, shaded background, repeated on each page)
- Ragged rows, padded with empty cells up to the widest row
- Theme-coloured outer and inner borders
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement

from md2docx.ooxml import border_element, make_paragraph, shading_element, w
from md2docx.styles import ParaSpec, mm_to_twips

if TYPE_CHECKING:
    from md2docx.assembler import TableBlock, TableCellBlock, TableRowBlock

# Schema order of tblBorders children.
_TABLE_BORDER_SIDES = ("top", "left", "bottom", "right", "insideH", "insideV")


class TableHandler:
    """Converts table blocks to ``w:tbl`` elements."""

    def __init__(self, content_width: int) -> None:
        """Initialise with the usable page width in twips."""
        self.content_width = content_width
        self.cell_margin_top = mm_to_twips(3)
        self.cell_margin_bottom = mm_to_twips(3)
        self.cell_margin_left = mm_to_twips(4)
        self.cell_margin_right = mm_to_twips(4)

    def render_table(self, table: TableBlock) -> Element:
        """Convert *table* to a ``w:tbl`` Element.

        Raises:
            ValueError: If the table has no rows.
        """
        if not table.rows:
            raise ValueError("Cannot render a table without rows")

        col_count = max(1, table.column_count)
        col_width = self.content_width // col_count

        tbl = Element(w("tbl"))
        self._build_table_properties(tbl, table.borders)

        grid = SubElement(tbl, w("tblGrid"))
        for _ in range(col_count):
            SubElement(grid, w("gridCol")).set(w("w"), str(col_width))

        for row in table.rows:
            tbl.append(self._render_row(row, col_count, col_width))

        return tbl

    def _build_table_properties(self, tbl: Element, borders: ParaSpec) -> None:
        tbl_pr = SubElement(tbl, w("tblPr"))

        tbl_w = SubElement(tbl_pr, w("tblW"))
        tbl_w.set(w("w"), "5000")
        tbl_w.set(w("type"), "pct")

        tbl_borders = SubElement(tbl_pr, w("tblBorders"))
        for side in _TABLE_BORDER_SIDES:
            if side in borders.borders:
                border_element(tbl_borders, side, borders.borders[side])

        SubElement(tbl_pr, w("tblLayout")).set(w("type"), "fixed")

        margins = SubElement(tbl_pr, w("tblCellMar"))
        for side, value in (
            ("top", self.cell_margin_top),
            ("left", self.cell_margin_left),
            ("bottom", self.cell_margin_bottom),
            ("right", self.cell_margin_right),
        ):
            mar = SubElement(margins, w(side))
            mar.set(w("w"), str(value))
            mar.set(w("type"), "dxa")

    def _render_row(self, row: TableRowBlock, col_count: int, col_width: int) -> Element:
        tr = Element(w("tr"))
        if row.is_header:
            tr_pr = SubElement(tr, w("trPr"))
            SubElement(tr_pr, w("tblHeader"))

        for cell in row.cells[:col_count]:
            tr.append(self._render_cell(cell, col_width))

        # Pad short rows so every row spans the full grid.
        for _ in range(len(row.cells), col_count):
            tr.append(self._render_empty_cell(col_width))

        return tr

    def _render_cell(self, cell: TableCellBlock, col_width: int) -> Element:
        tc = Element(w("tc"))
        self._build_cell_properties(tc, col_width, cell.shading)
        tc.append(make_paragraph(
            [(span.text, span.font) for span in cell.spans],
            cell.para.derive(shading=""),
        ))
        return tc

    def _render_empty_cell(self, col_width: int) -> Element:
        tc = Element(w("tc"))
        self._build_cell_properties(tc, col_width, "")
        # A cell must end with a paragraph, even an empty one.
        SubElement(tc, w("p"))
        return tc

    def _build_cell_properties(self, tc: Element, col_width: int, shading: str) -> None:
        tc_pr = SubElement(tc, w("tcPr"))
        tc_w = SubElement(tc_pr, w("tcW"))
        tc_w.set(w("w"), str(col_width))
        tc_w.set(w("type"), "dxa")
        if shading:
            shading_element(tc_pr, shading)
