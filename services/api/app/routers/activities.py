"""Activity bank endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException

from shared.schemas import ActivityCreate, ActivityFlagsUpdate

from .. import db

router = APIRouter()


def _not_found(activity_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "ACTIVITY_NOT_FOUND", "message": f"Atividade {activity_id} não encontrada."},
    )


@router.get("/activities")
async def list_activities(
    favorites: bool = False,
    dua: bool = False,
    discipline: Optional[str] = None,
    tag: Optional[str] = None,
):
    """List the bank, optionally filtered."""
    items = db.list_activities()
    if favorites:
        items = [a for a in items if a.get("is_favorited")]
    if dua:
        items = [a for a in items if a.get("is_dua")]
    if discipline:
        items = [a for a in items if a.get("discipline") == discipline]
    if tag:
        items = [a for a in items if tag in a.get("goal_tags", [])]
    return items


@router.post("/activities", status_code=201)
async def add_activities(body: ActivityCreate):
    return db.add_activities(
        [a.model_dump(mode="json") for a in body.activities], body.source_pei_id,
    )


@router.get("/activities/{activity_id}")
async def get_activity(activity_id: str):
    doc = db.get_activity(activity_id)
    if not doc:
        raise _not_found(activity_id)
    return doc


@router.patch("/activities/{activity_id}")
async def update_activity(activity_id: str, body: ActivityFlagsUpdate):
    """Toggle favourite / DUA flags."""
    doc = db.update_activity(activity_id, **body.flags())
    if doc is None:
        raise _not_found(activity_id)
    return doc


@router.delete("/activities/{activity_id}")
async def delete_activity(activity_id: str):
    if not db.delete_activity(activity_id):
        raise _not_found(activity_id)
    return {"status": "deleted", "activity_id": activity_id}
