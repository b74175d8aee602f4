"""Form State Store: field values, AI tags, critiques and validation errors."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from pei.config.fields import FIELD_ORDER, FORM_SECTIONS, REQUIRED_FIELDS
from pei.config.models import Activity, CritiqueResult, PeiRecord, PeiRecordData

logger = logging.getLogger(__name__)

REQUIRED_FIELD_MESSAGE = "Este campo é obrigatório."
REQUIRED_FIELDS_MESSAGE = "Por favor, preencha todos os campos obrigatórios para usar a IA."


class FormValidationError(Exception):
    """Required fields are blank; the requested action was not started."""

    def __init__(self, field_ids: List[str], message: Optional[str] = None):
        self.field_ids = list(field_ids)
        super().__init__(message or REQUIRED_FIELDS_MESSAGE)

    @property
    def first_field(self) -> Optional[str]:
        return self.field_ids[0] if self.field_ids else None


def _is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


class FormState:
    """In-memory state of one PEI edit session.

    ``set`` is the only user-facing mutator of field values; it always drops
    the AI-originated tag and the validation error of that field.
    """

    def __init__(self, record: Optional[PeiRecord] = None):
        self.data: Dict[str, str] = {}
        self.ai_generated: set = set()
        self.smart_analyses: Dict[str, CritiqueResult] = {}
        self.goal_activities: Dict[str, List[Activity]] = {}
        self.errors: Dict[str, str] = {}
        self.record_id: Optional[str] = None
        # Bumped by load() and clear(); see adopt_record_id().
        self.generation = 0
        self.save_lock = asyncio.Lock()
        if record is not None:
            self.load(record)

    # -- field access ---------------------------------------------------------

    def get(self, field_id: str) -> str:
        return self.data.get(field_id, "")

    def set(self, field_id: str, value: str) -> None:
        self.data[field_id] = value if value is not None else ""
        self.ai_generated.discard(field_id)
        self.errors.pop(field_id, None)

    def update(self, values: Dict[str, str]) -> None:
        for field_id, value in values.items():
            self.set(field_id, value)

    def mark_ai_generated(self, field_id: str) -> None:
        self.ai_generated.add(field_id)

    def is_ai_generated(self, field_id: str) -> bool:
        return field_id in self.ai_generated

    def set_critique(self, field_id: str, critique: CritiqueResult) -> None:
        self.smart_analyses[field_id] = critique

    def set_goal_activities(self, field_id: str, activities: List[Activity]) -> None:
        self.goal_activities[field_id] = list(activities)

    # -- validation -----------------------------------------------------------

    def validate(self, required_field_ids: Iterable[str] = REQUIRED_FIELDS) -> List[str]:
        """Return the blank required fields and record them as the form errors.

        Previous errors are replaced, not merged.
        """
        blank = [f for f in required_field_ids if _is_blank(self.data.get(f))]
        self.errors = {f: REQUIRED_FIELD_MESSAGE for f in blank}
        return blank

    def require(self, required_field_ids: Iterable[str] = REQUIRED_FIELDS) -> None:
        blank = self.validate(required_field_ids)
        if blank:
            logger.info("Validation failed: %d required field(s) blank", len(blank))
            raise FormValidationError(blank)

    def first_error_field(self) -> Optional[str]:
        """First errored field in declared order, for focusing."""
        for field_id in FIELD_ORDER:
            if field_id in self.errors:
                return field_id
        return next(iter(self.errors), None)

    def required_fields_filled(self) -> bool:
        return all(not _is_blank(self.data.get(f)) for f in REQUIRED_FIELDS)

    # -- progress -------------------------------------------------------------

    def completion_ratio(self, section_field_ids: Iterable[str]) -> float:
        ids = list(section_field_ids)
        if not ids:
            return 0.0
        filled = sum(1 for f in ids if not _is_blank(self.data.get(f)))
        return filled / len(ids)

    def section_progress(self) -> Dict[str, int]:
        """Percentage of filled fields per declared section."""
        return {
            section.title: round(self.completion_ratio(section.field_ids) * 100)
            for section in FORM_SECTIONS
        }

    # -- snapshot / lifecycle -------------------------------------------------

    def snapshot(self) -> PeiRecordData:
        return PeiRecordData(
            data=dict(self.data),
            ai_generated_fields=sorted(self.ai_generated),
            smart_analyses=dict(self.smart_analyses),
            goal_activities={k: list(v) for k, v in self.goal_activities.items()},
        )

    def load(self, record: PeiRecordData) -> None:
        self.data = dict(record.data)
        self.ai_generated = set(record.ai_generated_fields)
        self.smart_analyses = dict(record.smart_analyses)
        self.goal_activities = {k: list(v) for k, v in record.goal_activities.items()}
        self.errors = {}
        self.record_id = getattr(record, "id", None)
        self.generation += 1

    def clear(self) -> None:
        self.data = {}
        self.ai_generated = set()
        self.smart_analyses = {}
        self.goal_activities = {}
        self.errors = {}
        self.record_id = None
        self.generation += 1

    def adopt_record_id(self, record_id: str, generation: int) -> bool:
        """Take the store-assigned id of a save started at *generation*.

        Returns False when the form was cleared or reloaded meanwhile.
        """
        if generation != self.generation:
            logger.info("Form changed during save; not adopting record %s", record_id)
            return False
        if self.record_id is None:
            self.record_id = record_id
        return True
