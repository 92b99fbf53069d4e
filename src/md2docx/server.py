"""FastAPI web service for Markdown to DOCX conversion.

Endpoints::

    GET  /              Web UI (single-page HTML).
    POST /convert       Upload a .md file and receive .docx back.
    POST /convert/text  Send raw Markdown text, receive .docx bytes.
    GET  /health        Health check.
    GET  /themes        List available themes.

Run::

    uvicorn md2docx.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, Response

from md2docx import __version__
from md2docx.converter import ConversionError, Converter
from md2docx.renderer import DOCX_MEDIA_TYPE
from md2docx.styles import THEMES

logger = logging.getLogger(__name__)

app = FastAPI(
    title="md2docx",
    description="Markdown to Word conversion service",
    version=__version__,
)

DEFAULT_FILENAME = "my-document.docx"


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


_STATIC_DIR = Path(__file__).parent / "static"
try:
    _INDEX_HTML = (_STATIC_DIR / "index.html").read_text(encoding="utf-8")
except FileNotFoundError:
    _INDEX_HTML = "<html><body><h1>md2docx</h1><p>Web UI not found.</p></body></html>"


def _make_converter(theme: str, include_toc: bool) -> Converter:
    try:
        return Converter(theme=theme, include_toc=include_toc)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


async def _convert(converter: Converter, md_text: str) -> bytes:
    # Packaging is synchronous; keep it off the event loop.
    try:
        return await run_in_threadpool(converter.convert_text, md_text)
    except ConversionError as exc:
        raise HTTPException(
            status_code=500,
            detail="Failed to convert markdown to Word document",
        ) from exc


def _docx_response(docx_bytes: bytes, filename: str) -> Response:
    return Response(
        content=docx_bytes,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the web UI."""
    return HTMLResponse(content=_INDEX_HTML)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/themes")
async def list_themes() -> dict[str, list[str]]:
    """List available themes."""
    return {"themes": THEMES}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    theme: str = Form("minimal"),
    include_toc: bool = Form(False),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a Markdown file and receive DOCX back.

    - **file**: Markdown file (.md)
    - **theme**: Theme name (minimal, elegant)
    - **include_toc**: Insert a table of contents
    - **encoding**: Source file encoding
    """
    converter = _make_converter(theme, include_toc)
    raw = await file.read()
    try:
        md_text = raw.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail=f"Cannot decode upload: {exc}") from exc

    docx_bytes = await _convert(converter, md_text)

    stem = Path(file.filename or "").stem
    filename = f"{stem}.docx" if stem else DEFAULT_FILENAME
    logger.info("Converted upload %s (%d bytes)", filename, len(docx_bytes))
    return _docx_response(docx_bytes, filename)


@app.post("/convert/text")
async def convert_text(
    markdown: str = Form(...),
    theme: str = Form("minimal"),
    include_toc: bool = Form(False),
) -> Response:
    """Send raw Markdown text and receive DOCX bytes.

    - **markdown**: Markdown source text
    - **theme**: Theme name (minimal, elegant)
    - **include_toc**: Insert a table of contents
    """
    converter = _make_converter(theme, include_toc)
    docx_bytes = await _convert(converter, markdown)
    return _docx_response(docx_bytes, DEFAULT_FILENAME)
