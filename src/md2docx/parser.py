"""Element parser: HTML element tree -> typed :mod:`md2docx.elements`.

The input is a BeautifulSoup tree (or any of its tags).  Every node
exposes a tag name, ordered children and a text accessor; the parser
walks it once and produces a flat list of parsed elements.

Parsing is best-effort and never raises: unknown tags with text degrade
to plain paragraphs and whitespace-only nodes are dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

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

logger = logging.getLogger(__name__)

# Tags whose children are parsed as independent blocks.
CONTAINER_TAGS = frozenset({
    "[document]", "html", "body", "div", "section", "article", "main",
    "nav", "header", "footer", "aside", "figure",
})

# Tags that never carry document content.
_SKIPPED_TAGS = frozenset({"head", "script", "style", "template", "meta", "link"})

# Inline tags re-encoded as the delimiters understood by the inline formatter.
_INLINE_DELIMITERS = {
    "strong": "**",
    "b": "**",
    "em": "*",
    "i": "*",
    "code": "`",
    "kbd": "`",
    "samp": "`",
    "del": "~~",
    "s": "~~",
    "strike": "~~",
    "u": "__",
    "ins": "__",
}

_HEADING_RE = re.compile(r"^h(\d+)$")
_BACKTICK_RUN_RE = re.compile(r"`+")
_LANGUAGE_PREFIX = "language-"


def clamp_heading_level(level: int) -> int:
    return max(1, min(6, level))


def _longest_backtick_run(text: str) -> int:
    return max((len(run) for run in _BACKTICK_RUN_RE.findall(text)), default=0)


class ElementParser:
    """Convert an element tree into a list of :data:`ParsedElement`."""

    # -- public API ---------------------------------------------------------

    def parse(self, root: Tag) -> list[ParsedElement]:
        """Return the parsed elements under *root*, in document order."""
        if self._tag_name(root) in CONTAINER_TAGS:
            elements = self._parse_children(root)
        else:
            elements = self._parse_node(root)
        logger.debug("Parsed %d elements", len(elements))
        return elements

    # -- traversal ----------------------------------------------------------

    def _parse_children(self, container: Tag) -> list[ParsedElement]:
        elements: list[ParsedElement] = []
        for child in container.children:
            elements.extend(self._parse_node(child))
        return elements

    def _parse_node(self, node) -> list[ParsedElement]:
        if isinstance(node, PreformattedString):
            # Comments, doctypes, CDATA and processing instructions.
            return []
        if isinstance(node, NavigableString):
            text = str(node)
            return [Paragraph(text=text.strip())] if text.strip() else []
        if not isinstance(node, Tag):
            return []

        name = self._tag_name(node)
        if name in _SKIPPED_TAGS:
            return []
        if name in CONTAINER_TAGS:
            return self._parse_children(node)

        element = self._parse_element(node, name)
        return [element] if element is not None else []

    def _parse_element(self, node: Tag, name: str) -> Optional[ParsedElement]:
        match = _HEADING_RE.match(name)
        if match:
            return Heading(
                level=clamp_heading_level(int(match.group(1))),
                text=node.get_text().strip(),
            )

        handler = getattr(self, f"_handle_{name}", None)
        if handler is not None:
            return handler(node)

        # Fallback: keep any text rather than silently dropping it.
        if node.get_text().strip():
            logger.debug("Treating <%s> as a plain paragraph", name)
            return Paragraph(text=self.markup_text(node).strip())
        return None

    # -- block handlers -----------------------------------------------------

    def _handle_p(self, node: Tag) -> Paragraph:
        return Paragraph(text=self.markup_text(node))

    def _handle_ul(self, node: Tag) -> ListBlock:
        return self._list(node, ordered=False)

    def _handle_ol(self, node: Tag) -> ListBlock:
        return self._list(node, ordered=True)

    def _handle_pre(self, node: Tag) -> CodeBlock:
        code = node.find("code")
        language = ""
        if isinstance(code, Tag):
            for token in code.get("class") or []:
                if token.startswith(_LANGUAGE_PREFIX):
                    language = token[len(_LANGUAGE_PREFIX):].lower()
                    break
        return CodeBlock(text=node.get_text(), language=language)

    def _handle_table(self, node: Tag) -> Table:
        headers: tuple[str, ...] = ()
        thead = node.find("thead")
        if isinstance(thead, Tag):
            header_row = thead.find("tr")
            if isinstance(header_row, Tag):
                headers = self._row_cells(header_row)

        rows: list[tuple[str, ...]] = []
        for child in node.children:
            name = self._tag_name(child)
            if name == "tbody":
                for tr in child.find_all("tr", recursive=False):
                    rows.append(self._row_cells(tr))
            elif name == "tr":
                # Browsers wrap bare rows in an implicit tbody.
                rows.append(self._row_cells(child))

        return Table(headers=headers, rows=tuple(rows))

    def _handle_blockquote(self, node: Tag) -> Blockquote:
        return Blockquote(text=node.get_text().strip())

    def _handle_hr(self, _node: Tag) -> Rule:
        return Rule()

    # -- helpers ------------------------------------------------------------

    def _list(self, node: Tag, *, ordered: bool) -> ListBlock:
        items = tuple(
            self._item_text(li)
            for li in node.find_all("li", recursive=False)
        )
        return ListBlock(ordered=ordered, items=items)

    def _item_text(self, li: Tag) -> str:
        parts: list[str] = []
        for child in li.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                parts.append(str(child))
            elif isinstance(child, Tag) and self._tag_name(child) not in ("ul", "ol"):
                parts.append(child.get_text())
        return " ".join("".join(parts).split())

    def _row_cells(self, tr: Tag) -> tuple[str, ...]:
        return tuple(
            cell.get_text().strip()
            for cell in tr.find_all(["th", "td"], recursive=False)
        )

    def markup_text(self, node: Tag) -> str:
        """Flatten *node* to text, re-encoding inline formatting as delimiters."""
        parts: list[str] = []
        for child in node.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                parts.append(str(child))
                continue
            if not isinstance(child, Tag):
                continue
            name = self._tag_name(child)
            if name == "br":
                parts.append("\n")
                continue
            delimiter = _INLINE_DELIMITERS.get(name)
            if delimiter == "`":
                code = child.get_text()
                fence = "`" * (_longest_backtick_run(code) + 1)
                if code.startswith("`") or code.endswith("`"):
                    code = f" {code} "
                parts.append(f"{fence}{code}{fence}")
            elif delimiter:
                parts.append(f"{delimiter}{self.markup_text(child)}{delimiter}")
            else:
                parts.append(self.markup_text(child))
        return "".join(parts)

    @staticmethod
    def _tag_name(node) -> str:
        return (getattr(node, "name", None) or "").lower()
