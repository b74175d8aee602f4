"""Tests for output guards and response parsing."""
from __future__ import annotations

import json

import pytest

from core.providers.base import MalformedResponseError
from core.providers.guards import JSON_ARRAY, JSON_OBJECT, JSONOutputGuard
from pei.extract.parser import (
    normalize_activities,
    parse_activities,
    parse_analysis,
    parse_critique,
    parse_free_text,
)


class TestJSONOutputGuard:

    def test_object_inside_prose_and_fences(self):
        raw = 'Claro! Aqui está:\n```json\n{"a": 1}\n```\nEspero ter ajudado.'
        assert JSONOutputGuard.extract(raw, JSON_OBJECT) == {"a": 1}

    def test_array_extraction(self):
        assert JSONOutputGuard.extract('lista: [1, 2] fim', JSON_ARRAY) == [1, 2]

    def test_no_delimiters(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            JSONOutputGuard.extract("sem json aqui", JSON_OBJECT)
        assert exc_info.value.expected_shape == JSON_OBJECT

    def test_invalid_json_not_repaired(self):
        with pytest.raises(MalformedResponseError):
            JSONOutputGuard.extract("{'a': 1,}", JSON_OBJECT)

    def test_closing_before_opening(self):
        with pytest.raises(MalformedResponseError):
            JSONOutputGuard.extract("} nada {", JSON_OBJECT)

    def test_unknown_shape(self):
        with pytest.raises(ValueError):
            JSONOutputGuard.extract("{}", "yaml")


class TestParsers:

    def test_free_text_is_trimmed(self):
        assert parse_free_text("  texto \n") == "texto"

    def test_critique_accepts_camel_case(self, smart_json):
        critique = parse_critique(f"Resultado: {smart_json}")
        assert critique.is_specific.critique == "Crítica específica"
        assert list(critique.criteria()) == [
            "Específica", "Mensurável", "Atingível", "Relevante", "Temporal",
        ]

    def test_critique_missing_criterion(self, smart_json):
        payload = json.loads(smart_json)
        del payload["isTimeBound"]
        with pytest.raises(MalformedResponseError):
            parse_critique(json.dumps(payload))

    def test_analysis(self, analysis_json):
        analysis = parse_analysis(analysis_json)
        assert analysis.strengths == ["Diagnóstico detalhado"]
        assert analysis.goal_analysis == "As metas são coerentes."

    def test_analysis_wrong_shape(self):
        with pytest.raises(MalformedResponseError):
            parse_analysis("[1, 2, 3]")

    def test_activities_for_goal_field(self, activities_json):
        activities = parse_activities(activities_json, "metas-curto")
        assert len(activities) == 2
        assert activities[0].goal_tags == ["Curto Prazo"]
        assert activities[0].needs == ["TEA", "apoio visual"]
        assert activities[1].skills == ["consciência fonológica"]
        assert not activities[0].is_dua

    def test_activities_for_dua_field(self, activities_json):
        activities = parse_activities(activities_json, "dua-content")
        assert all(a.is_dua for a in activities)
        assert all(a.goal_tags == ["DUA"] for a in activities)

    def test_activities_without_title_rejected(self):
        with pytest.raises(MalformedResponseError):
            parse_activities('[{"description": "sem título"}]', "metas-curto")

    def test_activities_non_object_item(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_activities('["apenas texto"]', "metas-curto")
        assert exc_info.value.raw_text == '["apenas texto"]'


class TestNormalizeActivities:

    def test_union_keeps_existing_tags_first(self):
        items = [{"title": "A", "goalTags": ["Leitura", "Curto Prazo"]}]
        out = normalize_activities(items, "metas-curto")
        assert out[0]["goalTags"] == ["Leitura", "Curto Prazo"]

    def test_idempotent(self, activities_json):
        items = json.loads(activities_json)
        once = normalize_activities(items, "metas-medio")
        twice = normalize_activities(once, "metas-medio")
        assert once == twice

    def test_snake_case_input_is_normalized(self):
        out = normalize_activities([{"title": "A", "goal_tags": ["X"], "is_dua": True}], "")
        assert out[0]["goalTags"] == ["X"]
        assert out[0]["isDUA"] is True
        assert "goal_tags" not in out[0]

    def test_other_fields_add_no_tag(self):
        out = normalize_activities([{"title": "A"}], "atividades-content")
        assert out[0]["goalTags"] == []
        assert out[0]["isDUA"] is False
