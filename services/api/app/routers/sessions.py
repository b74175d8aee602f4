"""Form session endpoints: field edits, AI actions, approval and save."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from pei.agents.invoker import AIInvoker
from pei.agents.orchestrator import ERROR, ActionResult, PeiOrchestrator
from pei.form.approval import ApprovalError
from pei.form.state import FormValidationError
from pei.storage.base import RecordNotFoundError
from shared.schemas import (
    ActionRequest,
    ActionResponse,
    DraftEdit,
    FieldUpdate,
    SaveActivitiesRequest,
    SessionState,
    ValidationResponse,
)

from .. import sessions

logger = logging.getLogger(__name__)
router = APIRouter()


def _state(session: sessions.Session) -> SessionState:
    orch: PeiOrchestrator = session.orchestrator
    form, ctx = orch.form, orch.context
    return SessionState(
        session_id=session.id,
        record_id=form.record_id,
        current_view=ctx.current_view,
        editing_pei_id=ctx.editing_pei_id,
        selected_activity_id=ctx.selected_activity_id,
        thinking_mode_enabled=ctx.thinking_mode_enabled,
        data=dict(form.data),
        ai_generated_fields=sorted(form.ai_generated),
        errors=dict(form.errors),
        smart_analyses=dict(form.smart_analyses),
        goal_activities=dict(form.goal_activities),
        pending_draft=orch.gate.pending,
        progress=form.section_progress(),
    )


def _error_status(code: str) -> int:
    return 422 if code == "validation" else 502


def _action_response(result: ActionResult) -> ActionResponse:
    if result.status == ERROR:
        raise HTTPException(
            status_code=_error_status(result.error_code),
            detail={
                "code": result.error_code,
                "message": result.message,
                "fields": result.error_fields,
            },
        )
    return ActionResponse(
        action=result.action,
        field_id=result.field_id,
        status=result.status,
        message=result.message,
        draft=result.draft,
        critique=result.critique,
        activities=result.activities,
        analysis=result.analysis,
        text=result.text,
        elapsed_seconds=round(result.elapsed_seconds, 3),
    )


def _approval_conflict(e: ApprovalError) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": "NO_PENDING_DRAFT", "message": str(e)})


@router.post("/sessions", status_code=201, response_model=SessionState)
async def open_session(view: Optional[str] = None, invoker: AIInvoker = Depends(sessions.get_invoker)):
    """Open a new blank form session."""
    return _state(await sessions.create_session(invoker, view))


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session(session_id: str):
    return _state(sessions.get_session(session_id))


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    await sessions.close_session(session_id)
    return {"status": "closed", "session_id": session_id}


@router.put("/sessions/{session_id}/fields/{field_id}", response_model=SessionState)
async def update_field(session_id: str, field_id: str, body: FieldUpdate):
    """User edit: clears the AI tag and the error of the field."""
    session = sessions.get_session(session_id)
    session.orchestrator.form.set(field_id, body.value)
    return _state(session)


@router.post("/sessions/{session_id}/validate", response_model=ValidationResponse)
async def validate(session_id: str):
    form = sessions.get_session(session_id).orchestrator.form
    form.validate()
    return ValidationResponse(
        valid=not form.errors,
        errors=dict(form.errors),
        first_error_field=form.first_error_field(),
    )


@router.post("/sessions/{session_id}/actions", response_model=ActionResponse)
async def run_action(session_id: str, body: ActionRequest):
    """Run one AI action; text suggestions are staged for approval."""
    orch = sessions.get_session(session_id).orchestrator
    try:
        result = await orch.run_action(
            body.field_id, body.action, text=body.text, instruction=body.instruction,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "UNKNOWN_ACTION", "message": str(e)})
    return _action_response(result)


@router.get("/sessions/{session_id}/fields/{field_id}/actions")
async def field_actions(session_id: str, field_id: str):
    orch = sessions.get_session(session_id).orchestrator
    return {"field_id": field_id, "actions": orch.available_actions(field_id)}


@router.post("/sessions/{session_id}/approve", response_model=SessionState)
async def approve(session_id: str):
    """Commit the pending suggestion to the form."""
    session = sessions.get_session(session_id)
    try:
        session.orchestrator.approve()
    except ApprovalError as e:
        raise _approval_conflict(e)
    return _state(session)


@router.post("/sessions/{session_id}/reject", response_model=SessionState)
async def reject(session_id: str):
    session = sessions.get_session(session_id)
    session.orchestrator.reject()
    return _state(session)


@router.put("/sessions/{session_id}/draft", response_model=SessionState)
async def edit_draft(session_id: str, body: DraftEdit):
    """Edit the pending suggestion before approving it."""
    session = sessions.get_session(session_id)
    try:
        session.orchestrator.edit_draft(body.content)
    except ApprovalError as e:
        raise _approval_conflict(e)
    return _state(session)


@router.post("/sessions/{session_id}/thinking", response_model=SessionState)
async def toggle_thinking(session_id: str):
    session = sessions.get_session(session_id)
    session.orchestrator.context.toggle_thinking_mode()
    return _state(session)


@router.post("/sessions/{session_id}/save")
async def save(session_id: str):
    """Explicit save; requires every required field."""
    orch = sessions.get_session(session_id).orchestrator
    try:
        record = await orch.save()
    except FormValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"code": "validation", "message": str(e), "fields": e.field_ids},
        )
    return {"status": "saved", "pei_id": record.id, "student_name": record.student_name}


@router.post("/sessions/{session_id}/activities", status_code=201)
async def save_activities(session_id: str, body: Optional[SaveActivitiesRequest] = None):
    """Bank the given activities, or the last suggestion of the session."""
    orch = sessions.get_session(session_id).orchestrator
    activities = body.activities if body and body.activities else None
    saved = await orch.save_activities(activities)
    return {"saved": len(saved), "activities": saved}


@router.post("/sessions/{session_id}/load/{pei_id}", response_model=SessionState)
async def load(session_id: str, pei_id: str):
    """Replace the session form with a saved PEI."""
    session = sessions.get_session(session_id)
    try:
        await session.orchestrator.load(pei_id)
    except RecordNotFoundError:
        raise HTTPException(
            status_code=404,
            detail={"code": "PEI_NOT_FOUND", "message": f"PEI {pei_id} não encontrado."},
        )
    return _state(session)


@router.post("/sessions/{session_id}/new", response_model=SessionState)
async def new_pei(session_id: str):
    session = sessions.get_session(session_id)
    session.orchestrator.new_pei()
    return _state(session)
