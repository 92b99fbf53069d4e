"""Command-line interface for md2docx.

Usage::

    md2docx input.md                     # writes input.docx
    md2docx input.md -o output.docx      # explicit output path
    md2docx input.md --theme elegant     # use the elegant theme
    md2docx input.md --toc               # add a contents list
    md2docx --list-themes                # list available themes
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from md2docx import __version__
from md2docx.converter import ConversionError, Converter
from md2docx.styles import THEMES

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2docx",
        description="Convert Markdown files to Word (.docx) documents.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the Markdown file to convert.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output DOCX file path. Defaults to <input>.docx.",
    )
    parser.add_argument(
        "-t", "--theme",
        default="minimal",
        choices=THEMES,
        help="Visual theme (default: %(default)s).",
    )
    parser.add_argument(
        "--toc",
        action="store_true",
        help="Insert a table of contents built from the headings.",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-themes",
        action="store_true",
        help="List available themes and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.list_themes:
        print("Available themes:")
        for theme in THEMES:
            print(f"  - {theme}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(".docx")

    if args.verbose:
        print(f"Input:  {input_path}")
        print(f"Output: {output_path}")
        print(f"Theme:  {args.theme}")
        print(f"TOC:    {'yes' if args.toc else 'no'}")

    try:
        converter = Converter(theme=args.theme, include_toc=args.toc)
        converter.convert_file(input_path, output_path, encoding=args.encoding)
    except (ConversionError, OSError, LookupError, UnicodeDecodeError) as exc:
        logger.debug("Conversion of %s failed", input_path, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
