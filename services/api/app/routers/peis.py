"""Saved PEI endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from pei.config.fields import FIELD_ORDER
from pei.form.state import FormState
from shared.schemas import PeiSaveRequest, PeiSummary

from .. import db

logger = logging.getLogger(__name__)
router = APIRouter()

UNTITLED_PEI = "PEI sem nome"


def _not_found(pei_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "PEI_NOT_FOUND", "message": f"PEI {pei_id} não encontrado."},
    )


@router.get("/peis", response_model=list[PeiSummary])
async def list_peis():
    """List saved PEIs, most recent first."""
    summaries = []
    for doc in db.list_peis():
        form = FormState()
        form.data = dict(doc.get("data", {}))
        summaries.append(PeiSummary(
            id=doc["id"],
            student_name=doc.get("student_name", ""),
            timestamp=doc.get("timestamp", ""),
            progress=round(form.completion_ratio(FIELD_ORDER) * 100),
        ))
    return summaries


@router.post("/peis", status_code=201)
async def save_pei(body: PeiSaveRequest):
    """Create a PEI, or overwrite it when ``id`` is given."""
    if body.id and db.get_pei(body.id) is None:
        raise _not_found(body.id)
    name = body.student_name.strip() or body.data.get("aluno-nome", "").strip() or UNTITLED_PEI
    return db.save_pei(body.model_dump(mode="json"), body.id, name)


@router.get("/peis/{pei_id}")
async def get_pei(pei_id: str):
    doc = db.get_pei(pei_id)
    if not doc:
        raise _not_found(pei_id)
    return doc


@router.delete("/peis/{pei_id}")
async def delete_pei(pei_id: str):
    """Delete the whole record."""
    if not db.delete_pei(pei_id):
        raise _not_found(pei_id)
    return {"status": "deleted", "pei_id": pei_id}
