"""Support-file (RAG) endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, HTTPException, UploadFile

from pei.config.models import RagFile
from pei.ingest.rag_reader import rag_file_from_bytes
from shared.schemas import RagFileCreate, RagFileSelect, RagFileSummary

from .. import db

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def _summary(doc: dict) -> RagFileSummary:
    return RagFileSummary(
        id=doc["id"],
        name=doc["name"],
        type=doc.get("type", "text"),
        mime_type=doc.get("mime_type", "text/plain"),
        selected=doc.get("selected", False),
        size=len(doc.get("content", "")),
    )


def _not_found(file_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "FILE_NOT_FOUND", "message": f"Ficheiro {file_id} não encontrado."},
    )


@router.get("/files", response_model=list[RagFileSummary])
async def list_files():
    return [_summary(d) for d in db.list_rag_files()]


@router.post("/files", status_code=201, response_model=RagFileSummary)
async def create_file(body: RagFileCreate):
    """Register a support file given as JSON."""
    rag = RagFile(**body.model_dump())
    return _summary(db.add_rag_file(rag.model_dump(mode="json")))


@router.post("/files/upload", status_code=201, response_model=RagFileSummary)
async def upload_file(file: UploadFile = File(...)):
    """Upload a text, PDF, DOCX or image file."""
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail={"code": "FILE_TOO_LARGE", "message": "O ficheiro deve ter no máximo 20MB."},
        )
    try:
        image_mime = file.content_type if (file.content_type or "").startswith("image/") else None
        rag = rag_file_from_bytes(file.filename or "upload", content, image_mime)
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail={"code": "UNSUPPORTED_FILE", "message": str(e)},
        )
    except RuntimeError as e:
        logger.warning("Upload parse failed: %s", e)
        raise HTTPException(
            status_code=422,
            detail={"code": "UNREADABLE_FILE", "message": str(e)},
        )
    return _summary(db.add_rag_file(rag.model_dump(mode="json")))


@router.patch("/files/{file_id}", response_model=RagFileSummary)
async def select_file(file_id: str, body: RagFileSelect):
    """Include or exclude a file from prompt context."""
    doc = db.set_rag_file_selected(file_id, body.selected)
    if doc is None:
        raise _not_found(file_id)
    return _summary(doc)


@router.delete("/files/{file_id}")
async def delete_file(file_id: str):
    if not db.delete_rag_file(file_id):
        raise _not_found(file_id)
    return {"status": "deleted", "file_id": file_id}
