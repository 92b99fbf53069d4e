"""Convert Markdown and HTML to Word (.docx) documents."""

__version__ = "0.1.0"

from md2docx.converter import ConversionError, Converter, convert_markdown  # noqa: E402
from md2docx.styles import THEMES, Theme  # noqa: E402

__all__ = [
    "__version__",
    "ConversionError",
    "Converter",
    "THEMES",
    "Theme",
    "convert_markdown",
]
