"""Tests for the form state store: edits, AI tags, validation, progress."""
from __future__ import annotations

import pytest

from pei.config.fields import FIELD_ORDER, FORM_SECTIONS, REQUIRED_FIELDS
from pei.config.models import CritiqueResult, SmartCriterion
from pei.form.state import (
    REQUIRED_FIELD_MESSAGE,
    FormState,
    FormValidationError,
)


def _critique() -> CritiqueResult:
    c = SmartCriterion(critique="ok", suggestion="manter")
    return CritiqueResult(
        is_specific=c, is_measurable=c, is_achievable=c, is_relevant=c, is_time_bound=c,
    )


class TestFieldEdits:

    def test_get_missing_field_is_empty(self):
        assert FormState().get("metas-curto") == ""

    def test_user_edit_clears_ai_tag(self):
        form = FormState()
        form.set("est-adaptacoes", "texto da IA")
        form.mark_ai_generated("est-adaptacoes")
        assert form.is_ai_generated("est-adaptacoes")

        form.set("est-adaptacoes", "texto revisado")
        assert not form.is_ai_generated("est-adaptacoes")

    def test_user_edit_clears_field_error(self):
        form = FormState()
        form.validate()
        assert "aluno-nome" in form.errors
        form.set("aluno-nome", "Ana")
        assert "aluno-nome" not in form.errors

    def test_none_value_stored_as_empty(self):
        form = FormState()
        form.set("revisao", None)
        assert form.get("revisao") == ""


class TestValidation:

    def test_empty_form_reports_every_required_field(self):
        form = FormState()
        blank = form.validate()
        assert blank == list(REQUIRED_FIELDS)
        assert all(msg == REQUIRED_FIELD_MESSAGE for msg in form.errors.values())

    def test_whitespace_counts_as_blank(self, filled_form):
        filled_form.set("aval-social", "   ")
        assert filled_form.validate() == ["aval-social"]

    def test_validate_replaces_previous_errors(self, required_values):
        form = FormState()
        form.validate()
        form.data.update(required_values)
        assert form.validate() == []
        assert form.errors == {}

    def test_require_raises_with_fields(self):
        form = FormState()
        with pytest.raises(FormValidationError) as exc_info:
            form.require()
        assert exc_info.value.field_ids == list(REQUIRED_FIELDS)
        assert exc_info.value.first_field == REQUIRED_FIELDS[0]

    def test_require_passes_when_filled(self, filled_form):
        filled_form.require()
        assert filled_form.required_fields_filled()

    def test_first_error_field_follows_declared_order(self, filled_form):
        filled_form.set("aval-coord", "")
        filled_form.set("aluno-ano", "")
        filled_form.validate()
        assert filled_form.first_error_field() == "aluno-ano"


class TestProgress:

    def test_completion_ratio_of_empty_set_is_zero(self):
        assert FormState().completion_ratio([]) == 0.0

    def test_completion_ratio(self):
        form = FormState()
        form.set("metas-curto", "ler 20 palavras")
        assert form.completion_ratio(["metas-curto", "metas-medio"]) == 0.5

    def test_section_progress(self, filled_form):
        progress = filled_form.section_progress()
        assert progress[FORM_SECTIONS[0].title] == 100
        assert progress[FORM_SECTIONS[1].title] == 100
        assert progress[FORM_SECTIONS[2].title] == 0
        assert len(progress) == len(FORM_SECTIONS)


class TestSnapshot:

    def test_snapshot_and_load(self, filled_form):
        filled_form.mark_ai_generated("id-contexto")
        filled_form.set_critique("metas-curto", _critique())
        snapshot = filled_form.snapshot()

        other = FormState()
        other.load(snapshot)
        assert other.data == filled_form.data
        assert other.is_ai_generated("id-contexto")
        assert "metas-curto" in other.smart_analyses
        assert other.record_id is None

    def test_snapshot_is_a_copy(self, filled_form):
        snapshot = filled_form.snapshot()
        filled_form.set("aluno-nome", "Outro")
        assert snapshot.data["aluno-nome"] == "Ana Souza"

    def test_clear_resets_everything(self, filled_form):
        filled_form.record_id = "abc"
        filled_form.mark_ai_generated("aluno-nome")
        filled_form.clear()
        assert filled_form.data == {}
        assert filled_form.ai_generated == set()
        assert filled_form.record_id is None

    def test_field_order_covers_every_section(self):
        assert len(FIELD_ORDER) == sum(len(s.fields) for s in FORM_SECTIONS)

    def test_adopt_record_id_when_form_unchanged(self, filled_form):
        generation = filled_form.generation
        assert filled_form.adopt_record_id("abc", generation) is True
        assert filled_form.record_id == "abc"

    def test_adopt_record_id_refused_after_clear_or_load(self, filled_form):
        generation = filled_form.generation
        filled_form.clear()
        assert filled_form.adopt_record_id("abc", generation) is False
        assert filled_form.record_id is None

        generation = filled_form.generation
        filled_form.load(FormState().snapshot())
        assert filled_form.adopt_record_id("abc", generation) is False
        assert filled_form.record_id is None
