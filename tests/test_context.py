"""Tests for the application context (views, edited PEI, thinking mode)."""
from __future__ import annotations

import pytest

from pei.app.context import (
    ACTIVITY_BANK_VIEW,
    ACTIVITY_DETAIL_VIEW,
    DEFAULT_VIEW,
    FILES_VIEW,
    PEI_FORM_VIEW,
    AppContext,
    resolve_initial_view,
)


@pytest.mark.parametrize("value, expected", [
    (None, DEFAULT_VIEW),
    ("", DEFAULT_VIEW),
    ("nao-existe", DEFAULT_VIEW),
    (FILES_VIEW, FILES_VIEW),
    (ACTIVITY_BANK_VIEW, ACTIVITY_BANK_VIEW),
])
def test_resolve_initial_view(value, expected):
    assert resolve_initial_view(value) == expected


def test_defaults():
    ctx = AppContext()
    assert ctx.current_view == PEI_FORM_VIEW
    assert ctx.editing_pei_id is None
    assert not ctx.thinking_mode_enabled


def test_toggle_thinking_mode():
    ctx = AppContext()
    assert ctx.toggle_thinking_mode() is True
    assert ctx.toggle_thinking_mode() is False


def test_navigate_to_view_clears_selection():
    ctx = AppContext(editing_pei_id="p1", selected_activity_id="a1")
    ctx.navigate_to_view(ACTIVITY_BANK_VIEW)
    assert ctx.current_view == ACTIVITY_BANK_VIEW
    assert ctx.editing_pei_id is None
    assert ctx.selected_activity_id is None


def test_edit_then_new_pei():
    ctx = AppContext.for_view(FILES_VIEW)
    ctx.navigate_to_edit_pei("p1")
    assert (ctx.current_view, ctx.editing_pei_id) == (PEI_FORM_VIEW, "p1")
    ctx.navigate_to_new_pei()
    assert ctx.editing_pei_id is None
    assert ctx.current_view == PEI_FORM_VIEW


def test_activity_detail():
    ctx = AppContext()
    ctx.navigate_to_activity_detail("a1")
    assert ctx.current_view == ACTIVITY_DETAIL_VIEW
    assert ctx.selected_activity_id == "a1"


def test_thinking_mode_survives_navigation():
    ctx = AppContext()
    ctx.toggle_thinking_mode()
    ctx.navigate_to_view(FILES_VIEW)
    ctx.navigate_to_edit_pei("p1")
    assert ctx.thinking_mode_enabled
