"""Whitespace and indentation normalisation for code blocks."""

from __future__ import annotations

STRUCTURED_LANGUAGES = frozenset({"json", "yaml"})
INDENT_WIDTH = 2

_OPENERS = ("{", "[")
_CLOSERS = ("}", "]")


def split_code(text: str) -> list[str]:
    """Split raw code text into lines, normalising Windows line endings."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def normalize_code(lines: list[str], language: str = "") -> list[str]:
    """Return a cleaned copy of *lines* ready for rendering.

    Leading and trailing blank lines are always removed.  JSON and YAML
    are re-indented from their bracket nesting; everything else only has
    runs of blank lines collapsed to a single blank line.
    """
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    trimmed = list(lines[start:end])

    if (language or "").lower() in STRUCTURED_LANGUAGES:
        return _normalize_structured(trimmed)
    return _collapse_blank_runs(trimmed)


def _collapse_blank_runs(lines: list[str]) -> list[str]:
    normalized: list[str] = []
    previous_blank = False
    for line in lines:
        blank = not line.strip()
        if blank and previous_blank:
            continue
        normalized.append(line)
        previous_blank = blank
    return normalized


def _normalize_structured(lines: list[str]) -> list[str]:
    normalized: list[str] = []
    # Nesting depth contributed by all lines before the current one.
    depth = 0

    for i, line in enumerate(lines):
        stripped = line.strip()

        if not stripped:
            prev_line = lines[i - 1].strip() if i > 0 else ""
            next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""
            # Keep one separator between sibling objects.
            if prev_line.endswith(("}", "},")) and (
                next_line.startswith('"') and ": {" in next_line
            ):
                normalized.append("")
            continue

        level = depth
        if stripped.startswith(_CLOSERS):
            level -= 1
        normalized.append(" " * (max(0, level) * INDENT_WIDTH) + stripped)

        if stripped.endswith(_OPENERS):
            depth += 1
        elif stripped.startswith(_CLOSERS):
            depth -= 1

    return normalized
