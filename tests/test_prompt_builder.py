"""Tests for prompt assembly from form data and support files."""
from __future__ import annotations

from pei.config.models import RagFile
from pei.prompts import builder
from pei.prompts import templates as t


def _rag(name="laudo.txt", type_="text", content="conteúdo do laudo", selected=True):
    mime = "image/png" if type_ == "image" else "text/plain"
    return RagFile(name=name, type=type_, mime_type=mime, content=content, selected=selected)


class TestFormContext:

    def test_labels_in_declared_order(self):
        data = {"metas-curto": "ler", "aluno-nome": "Ana"}
        context = builder.build_form_context(data)
        assert context == "Nome do Aluno: Ana\nMeta de Curto Prazo (3 meses): ler"

    def test_excludes_target_and_blank_fields(self):
        data = {"aluno-nome": "Ana", "metas-curto": "ler", "metas-medio": ""}
        context = builder.build_form_context(data, exclude_field="metas-curto")
        assert "Meta de Curto Prazo" not in context
        assert "Meta de Médio Prazo" not in context

    def test_whitespace_only_fields_skipped(self):
        data = {"aluno-nome": "Ana", "metas-curto": "   \n\t"}
        assert builder.build_form_context(data) == "Nome do Aluno: Ana"

    def test_unknown_fields_ignored(self):
        assert builder.build_form_context({"campo-x": "valor"}) == ""


class TestRagParts:

    def test_unselected_files_skipped(self):
        assert builder.build_rag_parts([_rag(selected=False)]) == []

    def test_text_file_wrapped_with_markers(self):
        parts = builder.build_rag_parts([_rag()])
        assert len(parts) == 1
        assert "INÍCIO DO FICHEIRO DE APOIO: laudo.txt" in parts[0].text
        assert "conteúdo do laudo" in parts[0].text

    def test_image_file_is_caption_plus_image(self):
        parts = builder.build_rag_parts([_rag("foto.png", "image", "aGVsbG8=")])
        assert len(parts) == 2
        assert '"foto.png"' in parts[0].text
        assert parts[1].is_image
        assert parts[1].mime_type == "image/png"
        assert parts[1].data == "aGVsbG8="


class TestActionPrompts:

    def test_field_fill_names_target_and_skips_its_value(self, required_values):
        data = dict(required_values, **{"est-adaptacoes": "valor atual"})
        parts = builder.field_fill_prompt(data, "est-adaptacoes", [_rag()])
        text = parts[0].text
        assert '"Adaptações Curriculares"' in text
        assert "valor atual" not in text
        assert "Nome do Aluno: Ana Souza" in text
        assert len(parts) == 2

    def test_needs_prompt_uses_diagnosis_and_placeholder(self):
        parts = builder.needs_prompt({"id-diagnostico": "TEA"})
        text = parts[0].text
        assert "TEA" in text
        assert f"Habilidades Acadêmicas Atuais: {t.NOT_INFORMED}" in text

    def test_adaptations_prompt_placeholder(self):
        text = builder.adaptations_prompt({})[0].text
        assert f"Diagnóstico e Necessidades Específicas: {t.NOT_INFORMED}" in text

    def test_smart_prompt_is_plain_string(self):
        prompt = builder.smart_prompt("Ler 20 palavras até junho")
        assert isinstance(prompt, str)
        assert '"Ler 20 palavras até junho"' in prompt

    def test_goal_activities_scoped_to_goal(self, required_values):
        data = dict(required_values, **{"metas-curto": "Reconhecer sílabas"})
        text = builder.activities_prompt(data, "metas-curto")[0].text
        assert 'Meta: "Reconhecer sílabas"' in text
        assert "Ana Souza" not in text

    def test_activities_for_pei_use_form_context(self, required_values):
        text = builder.activities_prompt(required_values, "atividades-content")[0].text
        assert "Ana Souza" in text
        assert t.ACTIVITIES_SUBJECT_PEI in text

    def test_dua_activities_use_dua_shape(self, required_values):
        text = builder.activities_prompt(required_values, "dua-content")[0].text
        assert text.startswith(t.ACTIVITIES_LEAD_DUA)

    def test_analysis_prompt_instruction_then_context(self, required_values):
        parts = builder.analysis_prompt(required_values, [_rag()])
        assert parts[0].text == t.ANALYSIS_TEMPLATE
        assert "Ana Souza" in parts[1].text
        assert len(parts) == 3

    def test_full_pei_prompt_includes_every_filled_field(self, required_values):
        text = builder.prompt_text(builder.full_pei_prompt(required_values))
        for value in required_values.values():
            assert value in text

    def test_refine_default_instruction(self):
        text = builder.refine_prompt({}, "revisao", "texto base", "   ")[0].text
        assert t.DEFAULT_REFINE_INSTRUCTION in text
        assert "texto base" in text

    def test_refine_custom_instruction(self):
        text = builder.refine_prompt({}, "revisao", "texto base", "Deixe mais curto")[0].text
        assert '"Deixe mais curto"' in text

    def test_prompt_text_skips_images(self):
        parts = builder.build_rag_parts([_rag("foto.png", "image", "aGVsbG8=")])
        assert "aGVsbG8=" not in builder.prompt_text(parts)
