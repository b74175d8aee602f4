"""Approval Gate: at most one AI draft waits for a human decision.

The gate is a two-state machine::

    Idle --stage--> PendingApproval --approve/reject--> Idle
                    PendingApproval --stage/edit--> PendingApproval

Only ``approve`` writes to the form, and it touches exactly one field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from pei.config.models import SuggestionDraft
from pei.form.state import FormState

logger = logging.getLogger(__name__)

APPROVED_SUGGESTIONS_HEADER = "--- Sugestões Aprovadas ---"


class ApprovalError(Exception):
    """approve/edit called while no draft is pending."""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PendingApproval:
    draft: SuggestionDraft


GateState = Union[Idle, PendingApproval]


def merge_content(existing: str, content: str, is_appending: bool) -> str:
    if not is_appending:
        return content
    return f"{existing}\n\n{APPROVED_SUGGESTIONS_HEADER}\n{content}".strip()


class ApprovalGate:
    """Holds the single pending ``SuggestionDraft``."""

    def __init__(self) -> None:
        self.state: GateState = Idle()

    @property
    def pending(self) -> Optional[SuggestionDraft]:
        if isinstance(self.state, PendingApproval):
            return self.state.draft
        return None

    @property
    def is_pending(self) -> bool:
        return isinstance(self.state, PendingApproval)

    def stage(self, draft: SuggestionDraft) -> None:
        if isinstance(self.state, PendingApproval):
            logger.info(
                "Discarding pending draft for %s in favour of %s",
                self.state.draft.field_id, draft.field_id,
            )
        self.state = PendingApproval(draft)

    def edit(self, content: str) -> SuggestionDraft:
        draft = self._require_pending()
        edited = draft.model_copy(update={"content": content})
        self.state = PendingApproval(edited)
        return edited

    def approve(self, form: FormState) -> SuggestionDraft:
        draft = self._require_pending()
        value = merge_content(form.get(draft.field_id), draft.content, draft.is_appending)
        form.set(draft.field_id, value)
        form.mark_ai_generated(draft.field_id)
        self.state = Idle()
        logger.info(
            "Approved suggestion for %s (%s)",
            draft.field_id, "append" if draft.is_appending else "replace",
        )
        return draft

    def reject(self) -> Optional[SuggestionDraft]:
        draft = self.pending
        self.state = Idle()
        return draft

    def _require_pending(self) -> SuggestionDraft:
        if not isinstance(self.state, PendingApproval):
            raise ApprovalError("Nenhuma sugestão pendente de aprovação.")
        return self.state.draft
