"""Application context: current view, edited PEI and thinking mode.

One instance per session, passed explicitly to whoever needs it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

PEI_FORM_VIEW = "pei-form-view"
ACTIVITY_BANK_VIEW = "activity-bank-view"
PEI_LIST_VIEW = "pei-list-view"
FILES_VIEW = "files-view"
PRIVACY_POLICY_VIEW = "privacy-policy-view"
ACTIVITY_DETAIL_VIEW = "activity-detail-view"

VALID_VIEWS = (
    PEI_FORM_VIEW,
    ACTIVITY_BANK_VIEW,
    PEI_LIST_VIEW,
    FILES_VIEW,
    PRIVACY_POLICY_VIEW,
    ACTIVITY_DETAIL_VIEW,
)

DEFAULT_VIEW = PEI_FORM_VIEW


def resolve_initial_view(value: Optional[str]) -> str:
    """Map a requested view name to a known view; unknown -> the form."""
    if value in VALID_VIEWS:
        return value
    if value:
        logger.debug("Unknown initial view %r, using %s", value, DEFAULT_VIEW)
    return DEFAULT_VIEW


@dataclass
class AppContext:
    current_view: str = DEFAULT_VIEW
    editing_pei_id: Optional[str] = None
    selected_activity_id: Optional[str] = None
    thinking_mode_enabled: bool = False

    @classmethod
    def for_view(cls, view: Optional[str]) -> "AppContext":
        return cls(current_view=resolve_initial_view(view))

    def toggle_thinking_mode(self) -> bool:
        self.thinking_mode_enabled = not self.thinking_mode_enabled
        return self.thinking_mode_enabled

    def navigate_to_view(self, view: str) -> None:
        self.current_view = resolve_initial_view(view)
        self.editing_pei_id = None
        self.selected_activity_id = None

    def navigate_to_edit_pei(self, pei_id: str) -> None:
        self.editing_pei_id = pei_id
        self.selected_activity_id = None
        self.current_view = PEI_FORM_VIEW

    def navigate_to_new_pei(self) -> None:
        self.editing_pei_id = None
        self.selected_activity_id = None
        self.current_view = PEI_FORM_VIEW

    def navigate_to_activity_detail(self, activity_id: str) -> None:
        self.selected_activity_id = activity_id
        self.current_view = ACTIVITY_DETAIL_VIEW
