"""Inline formatting: split paragraph text into styled spans.

Recognised delimiters::

    **bold**   *italic*   ~~strike~~   __underline__   `code`

The text is scanned once, left to right.  Delimiter runs are pushed on a
stack of open delimiters and a closing run matches the nearest open
delimiter of the same kind, so crossing pairs such as ``*a **b* c**``
resolve to overlapping format sets instead of garbled text.  Delimiters
that never find a partner stay in the output as literal characters.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from md2docx.styles import FontSpec, Theme, resolve_style

BOLD = "bold"
ITALIC = "italic"
STRIKE = "strike"
UNDERLINE = "underline"
CODE = "code"

# (delimiter character, run size) -> format
_DELIMITER_FORMATS = {
    ("*", 2): BOLD,
    ("*", 1): ITALIC,
    ("_", 2): UNDERLINE,
    ("~", 2): STRIKE,
}


@dataclass
class StyledSpan:
    """A run of text with its formats and its ``[start, end)`` source range."""

    text: str
    start: int
    end: int
    bold: bool = False
    italic: bool = False
    strike: bool = False
    underline: bool = False
    code: bool = False
    font: FontSpec = field(default_factory=FontSpec)

    @property
    def formats(self) -> frozenset[str]:
        return frozenset(
            name for name in (BOLD, ITALIC, STRIKE, UNDERLINE, CODE)
            if getattr(self, name)
        )

    @property
    def is_plain(self) -> bool:
        return not self.formats


@dataclass
class _Piece:
    kind: str  # text, code, open, close
    start: int
    text: str
    fmt: str = ""
    char: str = ""
    matched: bool = False


class InlineFormatter:
    """Resolve inline markup for one theme."""

    def __init__(self, theme: str | Theme = Theme.MINIMAL) -> None:
        self.theme = Theme.coerce(theme)
        self._body_font = resolve_style(self.theme, "body").font
        self._code_font = resolve_style(self.theme, "inline_code").font

    # -- public API ---------------------------------------------------------

    def format(self, text: str) -> list[StyledSpan]:
        """Return the styled spans of *text* in source order."""
        spans = self._build_spans(text, self._tokenize(text))
        if not spans:
            return [self._make_span(text, 0, len(text), frozenset())]
        return spans

    # -- scanning -----------------------------------------------------------

    def _tokenize(self, text: str) -> list[_Piece]:
        pieces: list[_Piece] = []
        stack: list[_Piece] = []
        n = len(text)
        i = 0
        buf_start = 0

        def flush(upto: int) -> None:
            if buf_start < upto:
                pieces.append(_Piece("text", buf_start, text[buf_start:upto]))

        while i < n:
            ch = text[i]

            if ch == "`":
                run = _run_length(text, i, ch)
                close = _find_backtick_run(text, i + run, run)
                if close == -1:
                    i += run
                    continue
                flush(i)
                start = i + run
                content = text[start:close]
                # One padding space on each side is not part of the code.
                if len(content) > 2 and content[0] == content[-1] == " " and content.strip(" "):
                    content = content[1:-1]
                    start += 1
                pieces.append(_Piece(CODE, start, content))
                i = close + run
                buf_start = i
                continue

            if ch not in "*_~":
                i += 1
                continue

            run = _run_length(text, i, ch)
            if ch != "*" and run < 2:
                i += run
                continue

            prev = text[i - 1] if i > 0 else ""
            nxt = text[i + run] if i + run < n else ""
            can_open = bool(nxt) and not nxt.isspace()
            can_close = bool(prev) and not prev.isspace()

            pos = i
            remaining = run
            if can_close:
                while remaining > 0:
                    opener = _nearest_opener(stack, ch, remaining)
                    if opener is None:
                        break
                    flush(pos)
                    size = len(opener.text)
                    pieces.append(_Piece("close", pos, text[pos:pos + size], opener.fmt, ch, True))
                    opener.matched = True
                    stack.remove(opener)
                    pos += size
                    remaining -= size
                    buf_start = pos

            if remaining > 0 and can_open:
                sizes = _opener_sizes(ch, remaining)
                # Surplus characters stay literal, ahead of the openers.
                pos += remaining - sum(sizes)
                flush(pos)
                for size in sizes:
                    opener = _Piece("open", pos, text[pos:pos + size],
                                    _DELIMITER_FORMATS[(ch, size)], ch)
                    pieces.append(opener)
                    stack.append(opener)
                    pos += size
                buf_start = pos

            i += run

        flush(n)

        for piece in pieces:
            if piece.kind == "open" and not piece.matched:
                piece.kind = "text"
        return pieces

    # -- span construction --------------------------------------------------

    def _build_spans(self, text: str, pieces: list[_Piece]) -> list[StyledSpan]:
        active: Counter[str] = Counter()
        spans: list[StyledSpan] = []

        for piece in pieces:
            if piece.kind == "open":
                active[piece.fmt] += 1
                continue
            if piece.kind == "close":
                active[piece.fmt] -= 1
                continue
            if not piece.text:
                continue

            formats = {fmt for fmt, count in active.items() if count > 0}
            if piece.kind == CODE:
                formats.add(CODE)
            formats = frozenset(formats)
            end = piece.start + len(piece.text)

            last = spans[-1] if spans else None
            if last is not None and last.formats == formats and last.end == piece.start:
                last.text += piece.text
                last.end = end
            else:
                spans.append(self._make_span(piece.text, piece.start, end, formats))

        return spans

    def _make_span(
        self, text: str, start: int, end: int, formats: frozenset[str]
    ) -> StyledSpan:
        base = self._code_font if CODE in formats else self._body_font
        font = base.derive(
            bold=BOLD in formats,
            italic=ITALIC in formats,
            strikethrough=STRIKE in formats,
            underline=UNDERLINE in formats,
        )
        return StyledSpan(
            text=text,
            start=start,
            end=end,
            bold=BOLD in formats,
            italic=ITALIC in formats,
            strike=STRIKE in formats,
            underline=UNDERLINE in formats,
            code=CODE in formats,
            font=font,
        )


def format_inline(text: str, theme: str | Theme = Theme.MINIMAL) -> list[StyledSpan]:
    """Split *text* into styled spans using *theme*'s body font."""
    return InlineFormatter(theme).format(text)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run_length(text: str, start: int, ch: str) -> int:
    end = start
    while end < len(text) and text[end] == ch:
        end += 1
    return end - start


def _find_backtick_run(text: str, start: int, size: int) -> int:
    """Return the index of the next run of exactly *size* backticks, or -1."""
    i = start
    while i < len(text):
        if text[i] == "`":
            run = _run_length(text, i, "`")
            if run == size:
                return i
            i += run
        else:
            i += 1
    return -1


def _nearest_opener(stack: list[_Piece], ch: str, available: int) -> Optional[_Piece]:
    for opener in reversed(stack):
        if opener.char == ch and len(opener.text) <= available:
            return opener
    return None


def _opener_sizes(ch: str, run: int) -> list[int]:
    if ch != "*":
        return [2]
    if run >= 3:
        return [2, 1]
    return [run]
