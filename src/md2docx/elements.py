"""Typed intermediate representation produced by the element parser.

Each logical block of the source tree becomes exactly one of the frozen
dataclasses below.  The ``kind`` class attribute is the discriminator the
assembler dispatches on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class Heading:
    kind: ClassVar[str] = "heading"

    level: int
    text: str


@dataclass(frozen=True)
class Paragraph:
    """Paragraph text; inline markup is kept as literal delimiters."""

    kind: ClassVar[str] = "paragraph"

    text: str


@dataclass(frozen=True)
class ListBlock:
    kind: ClassVar[str] = "list"

    ordered: bool
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class CodeBlock:
    kind: ClassVar[str] = "code"

    text: str
    language: str = ""


@dataclass(frozen=True)
class Table:
    """Header cells (possibly empty) and body rows; rows may be ragged."""

    kind: ClassVar[str] = "table"

    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.headers and not self.rows


@dataclass(frozen=True)
class Blockquote:
    kind: ClassVar[str] = "blockquote"

    text: str


@dataclass(frozen=True)
class Rule:
    kind: ClassVar[str] = "rule"


ParsedElement = Union[Heading, Paragraph, ListBlock, CodeBlock, Table, Blockquote, Rule]

ELEMENT_KINDS = (
    Heading.kind,
    Paragraph.kind,
    ListBlock.kind,
    CodeBlock.kind,
    Table.kind,
    Blockquote.kind,
    Rule.kind,
)
