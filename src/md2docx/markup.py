"""Markdown -> HTML element tree front-end.

Uses mistune v3 to render Markdown to HTML and BeautifulSoup to turn the
HTML into the element tree consumed by :class:`md2docx.parser.ElementParser`.
Also builds the optional contents list.
"""

from __future__ import annotations

import re

import mistune
from bs4 import BeautifulSoup, Tag

TOC_MARKER = "[[toc]]"

_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

_markdown = mistune.create_markdown(
    escape=False,
    plugins=["table", "strikethrough", "url"],
)


def render_markdown(markdown_text: str) -> str:
    """Return the HTML rendering of *markdown_text*."""
    return str(_markdown(markdown_text))


def parse_html(html: str) -> BeautifulSoup:
    """Parse *html* into an element tree."""
    return BeautifulSoup(html, "html.parser")


def markdown_to_tree(markdown_text: str, *, include_toc: bool = False) -> BeautifulSoup:
    """Render *markdown_text* and return its element tree."""
    tree = parse_html(render_markdown(markdown_text))
    if include_toc:
        insert_toc(tree)
    return tree


def insert_toc(tree: BeautifulSoup) -> bool:
    """Insert a contents list built from the headings of *tree*.

    The list replaces a ``[[toc]]`` marker paragraph when there is one,
    otherwise it follows the first ``h1``, otherwise it opens the document.
    Returns ``False`` when the tree has no headings.
    """
    headings = tree.find_all(_HEADING_TAGS)
    if not headings:
        return False

    nav = tree.new_tag("nav", attrs={"class": "toc"})
    ul = tree.new_tag("ul")
    nav.append(ul)
    for heading in headings:
        li = tree.new_tag("li")
        li.string = " ".join(heading.get_text().split())
        ul.append(li)

    marker = _find_marker(tree)
    if marker is not None:
        marker.replace_with(nav)
        return True

    first_h1 = tree.find("h1")
    if isinstance(first_h1, Tag):
        first_h1.insert_after(nav)
    else:
        tree.insert(0, nav)
    return True


def _find_marker(tree: BeautifulSoup) -> Tag | None:
    pattern = re.compile(re.escape(TOC_MARKER), re.IGNORECASE)
    for p in tree.find_all("p"):
        if pattern.fullmatch(p.get_text().strip()):
            return p
    return None
