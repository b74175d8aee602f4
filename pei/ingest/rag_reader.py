"""Support-file ingestion: turn uploads into :class:`RagFile` records.

Supported formats
-----------------
* **.txt / .md / .csv / .json** -- decoded as UTF-8 text
* **.pdf**  -- page text and tables via pdfplumber
* **.docx** -- paragraphs and tables via python-docx
* **.png / .jpg / .jpeg / .webp / .gif** -- stored as base64 image data

Usage::

    from pei.ingest.rag_reader import read_rag_file

    rag = read_rag_file("laudo.pdf")
    store.add_rag_file(rag)
"""
from __future__ import annotations

import base64
import io
import logging
import mimetypes
from pathlib import Path
from typing import List, Optional

from pei.config.models import RagFile

logger = logging.getLogger(__name__)

_TEXT_SUFFIXES = {".txt", ".md", ".csv", ".json"}
_IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}
_PDF_SUFFIX = ".pdf"
_DOCX_SUFFIX = ".docx"
_DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_SUFFIXES = sorted(_TEXT_SUFFIXES | set(_IMAGE_MIME_TYPES) | {_PDF_SUFFIX, _DOCX_SUFFIX})


def _table_text(rows: List[List[Optional[str]]]) -> str:
    """Pipe-separated rendering of a table, skipping empty rows."""
    lines = []
    for row in rows:
        cells = [str(c).strip() for c in row if c and str(c).strip()]
        if cells:
            lines.append(" | ".join(cells))
    return "\n".join(lines)


def _pdf_text(data: bytes, name: str) -> str:
    import pdfplumber

    parts: List[str] = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page_number, page in enumerate(pdf.pages, start=1):
                text = (page.extract_text() or "").strip()
                tables = [_table_text(t) for t in (page.extract_tables() or [])]
                body = "\n\n".join(p for p in [text, *tables] if p)
                if body:
                    parts.append(f"[Página {page_number}]\n{body}")
    except Exception as exc:
        raise RuntimeError(f"Failed to read PDF {name}: {exc}") from exc
    return "\n\n".join(parts)


def _docx_text(data: bytes, name: str) -> str:
    import docx

    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as exc:
        raise RuntimeError(f"Failed to open DOCX {name}: {exc}") from exc

    parts = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    for table in document.tables:
        rendered = _table_text([[cell.text for cell in row.cells] for row in table.rows])
        if rendered:
            parts.append(rendered)
    return "\n".join(parts)


def rag_file_from_bytes(name: str, data: bytes, mime_type: Optional[str] = None) -> RagFile:
    """Build an unselected :class:`RagFile` from raw upload bytes.

    Raises
    ------
    ValueError
        If the extension is not supported.
    RuntimeError
        If a PDF or DOCX cannot be parsed.
    """
    suffix = Path(name).suffix.lower()

    if suffix in _IMAGE_MIME_TYPES:
        return RagFile(
            name=name,
            type="image",
            mime_type=mime_type or _IMAGE_MIME_TYPES[suffix],
            content=base64.b64encode(data).decode("ascii"),
        )

    if suffix in _TEXT_SUFFIXES:
        content = data.decode("utf-8", errors="replace")
        text_mime = mime_type or mimetypes.guess_type(name)[0] or "text/plain"
    elif suffix == _PDF_SUFFIX:
        content = _pdf_text(data, name)
        text_mime = "application/pdf"
    elif suffix == _DOCX_SUFFIX:
        content = _docx_text(data, name)
        text_mime = _DOCX_MIME
    else:
        raise ValueError(
            f"Unsupported file type '{suffix}' for: {name}. "
            f"Supported extensions: {', '.join(SUPPORTED_SUFFIXES)}"
        )

    if not content.strip():
        logger.warning("No text extracted from %s", name)
    logger.info("Read support file %s (%d chars)", name, len(content))
    return RagFile(name=name, type="text", mime_type=text_mime, content=content)


def read_rag_file(file_path: str) -> RagFile:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {file_path}")
    return rag_file_from_bytes(path.name, path.read_bytes())
