"""Declared PEI form layout.

The order of sections and fields below is the canonical iteration order
for prompts, previews and progress bars.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class FieldDefinition(BaseModel):
    """One form field."""

    id: str
    label: str
    kind: Literal["text", "date", "select", "textarea"] = "textarea"
    help_text: str = ""


class FormSection(BaseModel):
    """A numbered accordion section of the form."""

    title: str
    fields: List[FieldDefinition] = Field(default_factory=list)

    @property
    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields]


HELP_TEXTS: Dict[str, str] = {
    "id-diagnostico": "Descreva o diagnóstico do aluno (se houver) e as necessidades educacionais específicas decorrentes dele. Ex: TDAH, Dislexia, TEA.",
    "id-contexto": "Apresente um breve resumo do contexto familiar e da trajetória escolar do aluno. Fatores relevantes podem incluir apoio familiar, mudanças de escola, etc.",
    "aval-habilidades": "Detalhe as competências e dificuldades do aluno em áreas acadêmicas como leitura, escrita e matemática. Use exemplos concretos.",
    "aval-social": "Descreva como o aluno interage com colegas e professores, seu comportamento em sala e habilidades de comunicação.",
    "aval-coord": "Aborde aspectos da coordenação motora fina e grossa, bem como a autonomia do aluno em atividades diárias e escolares.",
    "metas-curto": "Defina um objetivo específico e alcançável para os próximos 3 meses. Ex: 'Ler e interpretar frases simples com 80% de precisão'.",
    "metas-medio": "Estabeleça uma meta para os próximos 6 meses, que represente um avanço em relação à meta de curto prazo.",
    "metas-longo": "Descreva o objetivo principal a ser alcançado ao final do ano letivo. Deve ser uma meta ampla e significativa.",
    "est-adaptacoes": "Liste as adaptações necessárias em materiais, avaliações e no ambiente para facilitar o aprendizado. Ex: Provas com fonte ampliada, tempo extra.",
    "est-metodologias": "Descreva as abordagens pedagógicas que serão utilizadas. Ex: Aulas expositivas com apoio visual, aprendizado baseado em projetos, gamificação.",
    "est-parcerias": "Indique como será a colaboração com a família, terapeutas e outros profissionais que acompanham o aluno.",
    "resp-regente": "Descreva as responsabilidades do professor regente na implementação e acompanhamento do PEI.",
    "resp-coord": "Detalhe o papel do coordenador pedagógico, como supervisão, apoio ao professor e articulação com a família.",
    "resp-familia": "Especifique como a família participará do processo, apoiando as atividades em casa e mantendo a comunicação com a escola.",
    "resp-apoio": "Liste outros profissionais (psicólogos, fonoaudiólogos, etc.) e suas respectivas atribuições no plano.",
    "revisao": "Defina a periodicidade (ex: bimestral, trimestral) e os critérios que serão usados para avaliar o progresso do aluno e a necessidade de ajustes no plano.",
    "revisao-ajustes": 'Resuma as principais modificações feitas no PEI desde a última revisão. Ex: "A meta de curto prazo foi ajustada para focar na interpretação de textos", "Novas estratégias visuais foram incorporadas".',
    "atividades-content": "Use a IA para sugerir atividades com base nas metas ou descreva suas próprias propostas de atividades adaptadas.",
    "dua-content": "Descreva como os princípios do Desenho Universal para a Aprendizagem (DUA) serão aplicados para remover barreiras e promover a inclusão.",
}


def _f(field_id: str, label: str, kind: str = "textarea") -> FieldDefinition:
    return FieldDefinition(id=field_id, label=label, kind=kind, help_text=HELP_TEXTS.get(field_id, ""))


FORM_SECTIONS: List[FormSection] = [
    FormSection(title="1. Identificação do Aluno", fields=[
        _f("aluno-nome", "Nome do Aluno", "text"),
        _f("aluno-nasc", "Data de Nascimento", "date"),
        _f("aluno-ano", "Ano Escolar", "text"),
        _f("aluno-data-elab", "Data de Elaboração do PEI", "date"),
        _f("id-diagnostico", "Diagnóstico e Necessidades Específicas"),
        _f("id-contexto", "Contexto Familiar e Escolar"),
    ]),
    FormSection(title="2. Avaliação Inicial", fields=[
        _f("aval-habilidades", "Habilidades Acadêmicas"),
        _f("aval-social", "Desenvolvimento Social e Comunicação"),
        _f("aval-coord", "Coordenação Motora e Autonomia"),
    ]),
    FormSection(title="3. Metas", fields=[
        _f("metas-curto", "Meta de Curto Prazo (3 meses)"),
        _f("metas-medio", "Meta de Médio Prazo (6 meses)"),
        _f("metas-longo", "Meta de Longo Prazo (1 ano)"),
    ]),
    FormSection(title="4. Estratégias", fields=[
        _f("est-adaptacoes", "Adaptações Curriculares"),
        _f("est-metodologias", "Metodologias e Abordagens"),
        _f("est-parcerias", "Parcerias e Colaboração"),
    ]),
    FormSection(title="5. Responsáveis", fields=[
        _f("resp-regente", "Professor Regente"),
        _f("resp-coord", "Coordenação Pedagógica"),
        _f("resp-familia", "Família"),
        _f("resp-apoio", "Profissionais de Apoio"),
    ]),
    FormSection(title="6. Revisão e Monitoramento", fields=[
        _f("revisao", "Periodicidade e Critérios de Revisão"),
        _f("revisao-ajustes", "Ajustes Realizados"),
    ]),
    FormSection(title="7. Atividades", fields=[
        _f("disciplina", "Disciplina", "select"),
        _f("conteudos-bimestre", "Conteúdos do Bimestre"),
        _f("restricoes-evitar", "Restrições (o que evitar)"),
        _f("atividades-content", "Atividades Propostas"),
    ]),
    FormSection(title="8. Desenho Universal para a Aprendizagem (DUA)", fields=[
        _f("dua-content", "Aplicação dos Princípios do DUA"),
    ]),
]

DISCIPLINE_OPTIONS: List[str] = [
    "Língua Portuguesa",
    "Matemática",
    "Ciências",
    "História",
    "Geografia",
    "Arte",
    "Educação Física",
    "Língua Inglesa",
    "Ensino Religioso",
    "Interdisciplinar",
]

ALL_FIELDS: List[FieldDefinition] = [f for section in FORM_SECTIONS for f in section.fields]
FIELD_ORDER: List[str] = [f.id for f in ALL_FIELDS]

# Sections 1 and 2 must be complete before any AI action runs.
REQUIRED_FIELDS: List[str] = FORM_SECTIONS[0].field_ids + FORM_SECTIONS[1].field_ids

GOAL_PHASE_TAGS: Dict[str, str] = {
    "metas-curto": "Curto Prazo",
    "metas-medio": "Médio Prazo",
    "metas-longo": "Longo Prazo",
}
GOAL_FIELDS: List[str] = list(GOAL_PHASE_TAGS)

DUA_FIELD = "dua-content"
DUA_TAG = "DUA"
ACTIVITY_SUGGESTION_FIELDS: List[str] = GOAL_FIELDS + ["atividades-content", DUA_FIELD]

OWNER_NAME_FIELD = "aluno-nome"
DIAGNOSIS_FIELD = "id-diagnostico"
SKILLS_FIELD = "aval-habilidades"
ADAPTATIONS_FIELD = "est-adaptacoes"

_BY_ID: Dict[str, FieldDefinition] = {f.id: f for f in ALL_FIELDS}


def get_field(field_id: str) -> Optional[FieldDefinition]:
    return _BY_ID.get(field_id)


def field_label(field_id: str) -> str:
    """Human label of a field; unknown ids yield an empty string."""
    definition = _BY_ID.get(field_id)
    return definition.label if definition else ""


def is_goal_field(field_id: str) -> bool:
    return field_id in GOAL_PHASE_TAGS
