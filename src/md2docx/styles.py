"""Theme-dependent style resolution.

Maps a :class:`Theme` and a semantic element kind (heading, body,
code_block, blockquote, ...) to a concrete font and paragraph
specification.  Every call builds a fresh :class:`StyleDef`; there is no
shared style registry.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

_TWIPS_PER_MM = 1440 / 25.4


def mm_to_twips(mm: float) -> int:
    """Convert millimetres to twentieths of a point."""
    return int(round(mm * _TWIPS_PER_MM))


# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------

class Theme(str, Enum):
    MINIMAL = "minimal"
    ELEGANT = "elegant"

    @classmethod
    def coerce(cls, value: str | Theme) -> Theme:
        """Return the theme named by *value*, raising ``ValueError`` if unknown."""
        if isinstance(value, Theme):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown theme {value!r}. Choose from: "
                f"{', '.join(t.value for t in cls)}"
            ) from None


THEMES = [t.value for t in Theme]


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class FontSpec:
    """Font specification for a text run."""

    family: str = "Calibri"
    size_pt: float = 11.0
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    color: str = "374151"
    background: str = ""

    def derive(self, **overrides) -> FontSpec:
        """Return a copy with selected fields overridden."""
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone

    @property
    def half_points(self) -> int:
        """Size in OOXML half-point units."""
        return int(round(self.size_pt * 2))


@dataclass
class BorderSpec:
    """A single paragraph or table border line."""

    color: str
    size: int  # eighths of a point
    space: int = 1
    style: str = "single"


@dataclass
class ParaSpec:
    """Paragraph layout specification."""

    align: str = "left"  # left, center, right, both
    indent_left_mm: float = 0.0
    indent_right_mm: float = 0.0
    hanging_mm: float = 0.0
    space_before_mm: float = 0.0
    space_after_mm: float = 0.0
    line_twips: Optional[int] = None
    shading: str = ""
    borders: dict[str, BorderSpec] = field(default_factory=dict)

    def derive(self, **overrides) -> ParaSpec:
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone

    @property
    def space_before_twips(self) -> int:
        return mm_to_twips(self.space_before_mm)

    @property
    def space_after_twips(self) -> int:
        return mm_to_twips(self.space_after_mm)

    @property
    def indent_left_twips(self) -> int:
        return mm_to_twips(self.indent_left_mm)

    @property
    def indent_right_twips(self) -> int:
        return mm_to_twips(self.indent_right_mm)

    @property
    def hanging_twips(self) -> int:
        return mm_to_twips(self.hanging_mm)


@dataclass
class StyleDef:
    """Complete style definition combining font and paragraph specs.

    ``style_id`` is set for the kinds that appear in the document's named
    style catalog (``Heading1``..``Heading3``, ``CodeBlock``, ``Quote``).
    """

    name: str
    font: FontSpec
    para: ParaSpec
    style_id: str = ""


# ---------------------------------------------------------------------------
# Palettes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Palette:
    font: str
    heading_sizes: tuple[float, float, float]
    heading_colors: tuple[str, str, str]
    heading_rule: str
    quote_border: str
    quote_tint: str
    table_header_fill: str
    rule_color: str


_PALETTES = {
    Theme.MINIMAL: _Palette(
        font="Calibri",
        heading_sizes=(14.0, 12.0, 10.0),
        heading_colors=("1E40AF", "2563EB", "3B82F6"),
        heading_rule="93C5FD",
        quote_border="3B82F6",
        quote_tint="EFF6FF",
        table_header_fill="F8FAFC",
        rule_color="E5E7EB",
    ),
    Theme.ELEGANT: _Palette(
        font="Georgia",
        heading_sizes=(16.0, 13.0, 11.0),
        heading_colors=("7C3AED", "8B5CF6", "A855F7"),
        heading_rule="D8B4FE",
        quote_border="8B5CF6",
        quote_tint="FAF5FF",
        table_header_fill="FAF5FF",
        rule_color="E9D5FF",
    ),
}

CODE_FONT = "Consolas"
TEXT_COLOR = "374151"
CODE_COLOR = "2D3748"

_HEADING_SPACE_BEFORE = (12.0, 10.0, 8.0)
_HEADING_SPACE_AFTER = (6.0, 4.0, 3.0)
_CODE_FRAME = "E2E8F0"


# ---------------------------------------------------------------------------
# Per-kind builders
# ---------------------------------------------------------------------------

def _body_font(palette: _Palette) -> FontSpec:
    return FontSpec(family=palette.font, size_pt=11.0, color=TEXT_COLOR)


def _heading(palette: _Palette, level: int) -> StyleDef:
    # Only three heading styles exist; deeper levels share the third.
    idx = max(1, min(3, level)) - 1
    para = ParaSpec(
        space_before_mm=_HEADING_SPACE_BEFORE[idx],
        space_after_mm=_HEADING_SPACE_AFTER[idx],
    )
    if idx == 0:
        para.borders["bottom"] = BorderSpec(color=palette.heading_rule, size=6)
    return StyleDef(
        name=f"Heading {idx + 1}",
        style_id=f"Heading{idx + 1}",
        font=FontSpec(
            family=palette.font,
            size_pt=palette.heading_sizes[idx],
            bold=True,
            color=palette.heading_colors[idx],
        ),
        para=para,
    )


def _body(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="body",
        font=_body_font(palette),
        para=ParaSpec(space_before_mm=3.0, space_after_mm=6.0),
    )


def _list_item(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="list_item",
        font=_body_font(palette),
        para=ParaSpec(
            indent_left_mm=12.0,
            hanging_mm=6.0,
            space_before_mm=1.0,
            space_after_mm=1.0,
        ),
    )


def _code_block(_palette: _Palette, _level: int) -> StyleDef:
    frame = {
        side: BorderSpec(color=_CODE_FRAME, size=2)
        for side in ("top", "left", "bottom", "right")
    }
    return StyleDef(
        name="Code Block",
        style_id="CodeBlock",
        font=FontSpec(family=CODE_FONT, size_pt=9.0, color=CODE_COLOR),
        para=ParaSpec(
            indent_left_mm=8.0,
            indent_right_mm=8.0,
            space_before_mm=4.0,
            space_after_mm=4.0,
            shading="F8FAFC",
            borders=frame,
        ),
    )


def _code_line(palette: _Palette, level: int) -> StyleDef:
    # Lines of one block sit flush against each other.
    style = _code_block(palette, level)
    style.font.size_pt = 10.0
    style.para.space_before_mm = 0.0
    style.para.space_after_mm = 0.0
    style.para.line_twips = 240
    return style


def _inline_code(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="inline_code",
        font=FontSpec(
            family=CODE_FONT,
            size_pt=11.0,
            color=CODE_COLOR,
            background="F1F5F9",
        ),
        para=_body(palette, 0).para,
    )


def _blockquote(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="Quote",
        style_id="Quote",
        font=FontSpec(
            family=palette.font,
            size_pt=11.0,
            italic=True,
            color="4A5568",
        ),
        para=ParaSpec(
            indent_left_mm=15.0,
            indent_right_mm=5.0,
            space_before_mm=6.0,
            space_after_mm=6.0,
            shading=palette.quote_tint,
            borders={"left": BorderSpec(color=palette.quote_border, size=12)},
        ),
    )


def _table(palette: _Palette, _level: int) -> StyleDef:
    outer = BorderSpec(color="E2E8F0", size=4, space=0)
    inner = BorderSpec(color="F1F5F9", size=2, space=0)
    return StyleDef(
        name="table",
        font=_body_font(palette),
        para=ParaSpec(
            space_after_mm=8.0,
            borders={
                "top": outer,
                "left": outer,
                "bottom": outer,
                "right": outer,
                "insideH": inner,
                "insideV": inner,
            },
        ),
    )


def _table_header(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="table_header",
        font=FontSpec(family=palette.font, size_pt=11.0, bold=True, color="1F2937"),
        para=ParaSpec(align="center", shading=palette.table_header_fill),
    )


def _table_cell(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="table_cell",
        font=FontSpec(family=palette.font, size_pt=10.0, color=TEXT_COLOR),
        para=ParaSpec(),
    )


def _horizontal_rule(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="horizontal_rule",
        font=FontSpec(family=palette.font, size_pt=11.0, color=palette.rule_color),
        para=ParaSpec(align="center", space_before_mm=8.0, space_after_mm=8.0),
    )


def _spacer(palette: _Palette, _level: int) -> StyleDef:
    return StyleDef(
        name="spacer",
        font=_body_font(palette),
        para=ParaSpec(space_after_mm=6.0),
    )


_KIND_BUILDERS = {
    "heading": _heading,
    "body": _body,
    "list_item": _list_item,
    "code_block": _code_block,
    "code_line": _code_line,
    "inline_code": _inline_code,
    "blockquote": _blockquote,
    "table": _table,
    "table_header": _table_header,
    "table_cell": _table_cell,
    "horizontal_rule": _horizontal_rule,
    "spacer": _spacer,
}

STYLE_KINDS = list(_KIND_BUILDERS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_style(theme: str | Theme, kind: str, level: int = 1) -> StyleDef:
    """Return the style for *kind* under *theme*.

    *level* only matters for ``heading``; it is clamped to 1..6 and levels
    4-6 resolve to the level-3 style.  Unknown kinds fall back to ``body``.
    """
    palette = _PALETTES[Theme.coerce(theme)]
    builder = _KIND_BUILDERS.get(kind, _body)
    return builder(palette, max(1, min(6, level)))


def body_font(theme: str | Theme) -> FontSpec:
    return resolve_style(theme, "body").font


def catalog_styles(theme: str | Theme) -> list[StyleDef]:
    """Return the named paragraph styles written to the style catalog."""
    return [
        resolve_style(theme, "heading", 1),
        resolve_style(theme, "heading", 2),
        resolve_style(theme, "heading", 3),
        resolve_style(theme, "code_block"),
        resolve_style(theme, "blockquote"),
    ]
