"""High-level Markdown-to-DOCX conversion orchestrator.

Ties together the element parser, assembler and renderer into a single
public API for converting Markdown text, HTML or element trees to DOCX.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bs4 import Tag

from md2docx.assembler import DocumentAssembler, DocumentBlock
from md2docx.markup import markdown_to_tree, parse_html
from md2docx.parser import ElementParser
from md2docx.renderer import DocxRenderer
from md2docx.styles import THEMES, Theme

logger = logging.getLogger(__name__)


class ConversionError(Exception):
    """Raised when a document could not be produced."""


class Converter:
    """Convert Markdown content to DOCX format.

    Usage::

        converter = Converter(theme="elegant")
        converter.convert_file("input.md", "output.docx")

        # or from string
        docx_bytes = converter.convert_text("# Hello")
    """

    THEMES = THEMES

    def __init__(self, theme: str = "minimal", include_toc: bool = False) -> None:
        self.theme = Theme.coerce(theme)
        # Only the Markdown front-end reads this; block construction ignores it.
        self.include_toc = include_toc
        self.parser = ElementParser()
        self.assembler = DocumentAssembler(self.theme)
        self.renderer = DocxRenderer(self.theme)

    def convert_text(self, markdown_text: str) -> bytes:
        """Convert Markdown text to DOCX bytes."""
        tree = markdown_to_tree(markdown_text, include_toc=self.include_toc)
        return self.convert_tree(tree)

    def convert_html(self, html: str) -> bytes:
        """Convert already-rendered HTML to DOCX bytes."""
        return self.convert_tree(parse_html(html))

    def build_blocks(self, root: Tag) -> list[DocumentBlock]:
        """Return the document blocks for the element tree *root*."""
        elements = self.parser.parse(root)
        return self.assembler.assemble(elements)

    def convert_tree(self, root: Tag) -> bytes:
        """Convert an element tree to DOCX bytes.

        Raises:
            ConversionError: If the document package could not be written.
        """
        blocks = self.build_blocks(root)
        try:
            return self.renderer.render(blocks)
        except Exception as exc:
            logger.exception("DOCX serialisation failed")
            raise ConversionError("Failed to convert to DOCX format") from exc

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a Markdown file and write the DOCX output.

        Args:
            input_path: Path to the input ``.md`` file.
            output_path: Path for the output ``.docx`` file.
            encoding: Text encoding of the source file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        md_text = input_path.read_text(encoding=encoding)
        docx_bytes = self.convert_text(md_text)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(docx_bytes)
        logger.info("Wrote %s (%d bytes)", output_path, len(docx_bytes))


def convert_markdown(
    markdown_text: str, theme: str = "minimal", include_toc: bool = False
) -> bytes:
    """Convert *markdown_text* to DOCX bytes in one call."""
    return Converter(theme=theme, include_toc=include_toc).convert_text(markdown_text)
