"""
PEI Assistant - Domain Models
=============================

Defines the Pydantic v2 models shared by the form, the parser, the record
stores and the API:

  Form     : PeiRecordData, PeiRecord, SuggestionDraft
  Goals    : SmartCriterion, CritiqueResult
  Bank     : Activity
  Analysis : PeiAnalysis
  Support  : RagFile

Convention
----------
- AI output uses camelCase keys (``goalTags``, ``isDUA``, ``isSpecific``).
  Every such field declares ``AliasChoices`` so both spellings validate;
  ``model_dump()`` always emits the snake_case attribute names.
- Field values of the form are plain strings keyed by field id.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _split_csv(value):
    """Accept ``"a, b"`` as well as ``["a", "b"]``."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


# ============================================================
# Goals: SMART critique
# ============================================================


class SmartCriterion(BaseModel):
    """Critique and rewrite hint for one SMART criterion."""

    critique: str = ""
    suggestion: str = ""


class CritiqueResult(BaseModel):
    """SMART analysis of one goal field.

    Overwritten wholesale on every re-analysis of the same goal.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_specific: SmartCriterion = Field(
        validation_alias=AliasChoices("is_specific", "isSpecific"),
    )
    is_measurable: SmartCriterion = Field(
        validation_alias=AliasChoices("is_measurable", "isMeasurable"),
    )
    is_achievable: SmartCriterion = Field(
        validation_alias=AliasChoices("is_achievable", "isAchievable"),
    )
    is_relevant: SmartCriterion = Field(
        validation_alias=AliasChoices("is_relevant", "isRelevant"),
    )
    is_time_bound: SmartCriterion = Field(
        validation_alias=AliasChoices("is_time_bound", "isTimeBound"),
    )

    def criteria(self) -> Dict[str, SmartCriterion]:
        return {
            "Específica": self.is_specific,
            "Mensurável": self.is_measurable,
            "Atingível": self.is_achievable,
            "Relevante": self.is_relevant,
            "Temporal": self.is_time_bound,
        }


# ============================================================
# Activity bank
# ============================================================


class Activity(BaseModel):
    """A suggested or authored activity.

    ``skills`` / ``needs`` are lists; a comma-separated string is split.
    Only ``is_favorited`` and ``is_dua`` change after the activity is stored.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1)
    description: str = ""
    discipline: str = ""
    skills: List[str] = Field(default_factory=list)
    needs: List[str] = Field(default_factory=list)
    goal_tags: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("goal_tags", "goalTags"),
    )
    is_favorited: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_favorited", "isFavorited"),
    )
    is_dua: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_dua", "isDUA"),
    )
    source_pei_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("source_pei_id", "sourcePeiId"),
    )
    created_at: str = Field(
        default_factory=utc_now_iso,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )

    @field_validator("skills", "needs", "goal_tags", mode="before")
    @classmethod
    def _coerce_list(cls, v):
        return _split_csv(v)

    @field_validator("discipline", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v


# ============================================================
# Whole-plan analysis
# ============================================================


class PeiAnalysis(BaseModel):
    """Result of the "intelligent analysis" of a complete PEI."""

    model_config = ConfigDict(populate_by_name=True)

    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    goal_analysis: str = Field(
        default="",
        validation_alias=AliasChoices("goal_analysis", "goalAnalysis"),
    )
    pedagogical_analysis: str = Field(
        default="",
        validation_alias=AliasChoices("pedagogical_analysis", "pedagogicalAnalysis"),
    )
    psychopedagogical_analysis: str = Field(
        default="",
        validation_alias=AliasChoices("psychopedagogical_analysis", "psychopedagogicalAnalysis"),
    )
    suggestions: List[str] = Field(default_factory=list)


# ============================================================
# Support files
# ============================================================


class RagFile(BaseModel):
    """A support attachment fed to prompts as extra context.

    ``content`` holds plain text for ``text`` files and base64 data for
    ``image`` files.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    name: str
    type: Literal["text", "image"] = "text"
    mime_type: str = Field(
        default="text/plain",
        validation_alias=AliasChoices("mime_type", "mimeType"),
    )
    content: str = ""
    selected: bool = False


# ============================================================
# Form snapshot & persisted record
# ============================================================


class PeiRecordData(BaseModel):
    """Snapshot of one edit session: everything autosave persists."""

    model_config = ConfigDict(populate_by_name=True)

    data: Dict[str, str] = Field(default_factory=dict)
    ai_generated_fields: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ai_generated_fields", "aiGeneratedFields"),
    )
    smart_analyses: Dict[str, CritiqueResult] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("smart_analyses", "smartAnalyses"),
    )
    goal_activities: Dict[str, List[Activity]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("goal_activities", "goalActivities"),
    )


RECORD_DATA_FIELDS = {"data", "ai_generated_fields", "smart_analyses", "goal_activities"}


class PeiRecord(PeiRecordData):
    """A stored PEI; ``id`` is stable across every save of the record."""

    id: str
    student_name: str = Field(
        default="",
        validation_alias=AliasChoices("student_name", "alunoNome"),
    )
    timestamp: str = Field(default_factory=utc_now_iso)


# ============================================================
# Approval
# ============================================================


class SuggestionDraft(BaseModel):
    """Pending AI output awaiting human approval.  Never persisted."""

    field_id: str
    field_label: str = ""
    content: str
    is_appending: bool = False
