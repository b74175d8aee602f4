"""Form session schemas for API contracts."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from pei.config.models import Activity, CritiqueResult, PeiAnalysis, SuggestionDraft

__all__ = [
    "ActionRequest",
    "ActionResponse",
    "ApiError",
    "DraftEdit",
    "FieldUpdate",
    "SaveActivitiesRequest",
    "SessionState",
    "ValidationResponse",
]


class ApiError(BaseModel):
    """Body of the ``detail`` of every session error."""

    code: str
    message: str
    fields: List[str] = Field(default_factory=list)


class FieldUpdate(BaseModel):
    value: str = ""


class DraftEdit(BaseModel):
    content: str


class ActionRequest(BaseModel):
    """Run an AI action for one field (``field_id`` empty for whole-PEI actions)."""

    action: str
    field_id: str = ""
    text: Optional[str] = None
    instruction: Optional[str] = None


class ActionResponse(BaseModel):
    action: str
    field_id: str = ""
    status: str
    message: str = ""
    draft: Optional[SuggestionDraft] = None
    critique: Optional[CritiqueResult] = None
    activities: List[Activity] = Field(default_factory=list)
    analysis: Optional[PeiAnalysis] = None
    text: str = ""
    elapsed_seconds: float = 0.0


class SaveActivitiesRequest(BaseModel):
    """Activities to bank; empty means the last suggestion of the session."""

    activities: List[Activity] = Field(default_factory=list)


class ValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)
    first_error_field: Optional[str] = None


class SessionState(BaseModel):
    session_id: str
    record_id: Optional[str] = None
    current_view: str
    editing_pei_id: Optional[str] = None
    selected_activity_id: Optional[str] = None
    thinking_mode_enabled: bool = False
    data: Dict[str, str] = Field(default_factory=dict)
    ai_generated_fields: List[str] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)
    smart_analyses: Dict[str, CritiqueResult] = Field(default_factory=dict)
    goal_activities: Dict[str, List[Activity]] = Field(default_factory=dict)
    pending_draft: Optional[SuggestionDraft] = None
    progress: Dict[str, int] = Field(default_factory=dict)
