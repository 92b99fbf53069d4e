"""Document assembler: parsed elements -> ordered document blocks.

Walks the parsed elements once, left to right, and turns each one into
paragraph and table blocks styled for the selected theme.  The resulting
block list is what :class:`md2docx.renderer.DocxRenderer` serialises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from md2docx.code_normalizer import normalize_code, split_code
from md2docx.elements import (
    Blockquote,
    CodeBlock,
    Heading,
    ListBlock,
    Paragraph,
    ParsedElement,
    Rule,
    Table,
)
from md2docx.inline import InlineFormatter, StyledSpan
from md2docx.styles import FontSpec, ParaSpec, StyleDef, Theme, resolve_style

logger = logging.getLogger(__name__)

BULLET = "•"
RULE_TEXT = "_" * 47


# ---------------------------------------------------------------------------
# Block definitions
# ---------------------------------------------------------------------------

@dataclass
class ParagraphBlock:
    spans: list[StyledSpan] = field(default_factory=list)
    para: ParaSpec = field(default_factory=ParaSpec)
    style_id: str = ""
    heading_level: int = 0

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)

    @property
    def is_heading(self) -> bool:
        return self.heading_level > 0


@dataclass
class TableCellBlock:
    spans: list[StyledSpan] = field(default_factory=list)
    para: ParaSpec = field(default_factory=ParaSpec)
    shading: str = ""

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass
class TableRowBlock:
    cells: list[TableCellBlock] = field(default_factory=list)
    is_header: bool = False


@dataclass
class TableBlock:
    rows: list[TableRowBlock] = field(default_factory=list)
    borders: ParaSpec = field(default_factory=ParaSpec)

    @property
    def column_count(self) -> int:
        return max((len(row.cells) for row in self.rows), default=0)

    @property
    def header(self) -> TableRowBlock | None:
        if self.rows and self.rows[0].is_header:
            return self.rows[0]
        return None


DocumentBlock = Union[ParagraphBlock, TableBlock]


def plain_span(text: str, font: FontSpec) -> StyledSpan:
    """A single unformatted span covering all of *text*."""
    return StyledSpan(text=text, start=0, end=len(text), font=font)


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------

class DocumentAssembler:
    """Build document blocks from parsed elements for one theme."""

    def __init__(self, theme: str | Theme = Theme.MINIMAL) -> None:
        self.theme = Theme.coerce(theme)
        self.inline = InlineFormatter(self.theme)

    # -- public API ---------------------------------------------------------

    def assemble(self, elements: list[ParsedElement]) -> list[DocumentBlock]:
        """Return the document body for *elements*, preserving their order."""
        blocks: list[DocumentBlock] = []
        for element in elements:
            blocks.extend(self._assemble_element(element))
        logger.debug("Assembled %d blocks from %d elements", len(blocks), len(elements))
        return blocks

    # -- dispatch -----------------------------------------------------------

    def _assemble_element(self, element: ParsedElement) -> list[DocumentBlock]:
        handler = getattr(self, f"_assemble_{element.kind}", None)
        if handler is None:
            raise TypeError(f"No assembler for element kind {element.kind!r}")
        return handler(element)

    def _style(self, kind: str, level: int = 1) -> StyleDef:
        return resolve_style(self.theme, kind, level)

    # -- per-kind handlers --------------------------------------------------

    def _assemble_heading(self, element: Heading) -> list[DocumentBlock]:
        level = max(1, min(6, element.level))
        style = self._style("heading", level)
        return [ParagraphBlock(
            spans=[plain_span(element.text, style.font)],
            para=style.para,
            style_id=style.style_id,
            heading_level=level,
        )]

    def _assemble_paragraph(self, element: Paragraph) -> list[DocumentBlock]:
        if not element.text.strip():
            return []
        style = self._style("body")
        return [ParagraphBlock(spans=self.inline.format(element.text), para=style.para)]

    def _assemble_list(self, element: ListBlock) -> list[DocumentBlock]:
        style = self._style("list_item")
        blocks: list[DocumentBlock] = []
        for number, item in enumerate(element.items, start=1):
            marker = f"{number}." if element.ordered else BULLET
            blocks.append(ParagraphBlock(
                spans=[plain_span(f"{marker} {item}", style.font)],
                para=style.para,
            ))
        blocks.append(self._spacer())
        return blocks

    def _assemble_code(self, element: CodeBlock) -> list[DocumentBlock]:
        style = self._style("code_line")
        lines = normalize_code(split_code(element.text), element.language)
        blocks: list[DocumentBlock] = []
        for line in lines:
            # Blank lines still take a paragraph so the block keeps its height.
            text = line if line.strip() else ""
            blocks.append(ParagraphBlock(
                spans=[plain_span(text, style.font)],
                para=style.para,
                style_id=style.style_id,
            ))
        blocks.append(self._spacer())
        return blocks

    def _assemble_table(self, element: Table) -> list[DocumentBlock]:
        if element.is_empty:
            return []

        rows: list[TableRowBlock] = []
        if element.headers:
            header = self._style("table_header")
            rows.append(TableRowBlock(
                cells=[
                    TableCellBlock(
                        spans=[plain_span(text, header.font)],
                        para=header.para,
                        shading=header.para.shading,
                    )
                    for text in element.headers
                ],
                is_header=True,
            ))

        cell = self._style("table_cell")
        for row in element.rows:
            rows.append(TableRowBlock(cells=[
                TableCellBlock(spans=[plain_span(text, cell.font)], para=cell.para)
                for text in row
            ]))

        return [TableBlock(rows=rows, borders=self._style("table").para)]

    def _assemble_blockquote(self, element: Blockquote) -> list[DocumentBlock]:
        style = self._style("blockquote")
        return [ParagraphBlock(
            spans=[plain_span(element.text, style.font)],
            para=style.para,
            style_id=style.style_id,
        )]

    def _assemble_rule(self, _element: Rule) -> list[DocumentBlock]:
        style = self._style("horizontal_rule")
        return [ParagraphBlock(spans=[plain_span(RULE_TEXT, style.font)], para=style.para)]

    # -- helpers ------------------------------------------------------------

    def _spacer(self) -> ParagraphBlock:
        return ParagraphBlock(para=self._style("spacer").para)
