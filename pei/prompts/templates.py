"""Prompt templates for every AI action of the PEI form.

All templates are plain module constants with ``{placeholders}`` filled by
:mod:`pei.prompts.builder`.  Texts are in Brazilian Portuguese, the language
educators fill the form in.
"""

# ------------------------------------------------------------------
# System instruction
# ------------------------------------------------------------------

SYSTEM_INSTRUCTION = (
    "Você é um assistente especializado em educação, focado na criação de "
    "Planos Educacionais Individualizados (PEI). Suas respostas devem ser "
    "profissionais, bem estruturadas e direcionadas para auxiliar educadores. "
    "Sempre que apropriado, considere e sugira estratégias baseadas nos "
    "princípios do Desenho Universal para a Aprendizagem (DUA)."
)

# ------------------------------------------------------------------
# Context wrappers
# ------------------------------------------------------------------

FORM_CONTEXT_BLOCK = """\
--- INÍCIO DO CONTEXTO DO PEI ATUAL ---
{form_context}
--- FIM DO CONTEXTO DO PEI ATUAL ---"""

RAG_TEXT_SEGMENT = (
    "\n\n--- INÍCIO DO FICHEIRO DE APOIO: {name} ---\n\n"
    "{content}"
    "\n\n--- FIM DO FICHEIRO DE APOIO: {name} ---\n\n"
)

RAG_IMAGE_CAPTION = 'A imagem a seguir, intitulada "{name}", serve como contexto visual:'

NOT_INFORMED = "Não informado"

# ------------------------------------------------------------------
# Field fill ("ai")
# ------------------------------------------------------------------

FIELD_FILL_TEMPLATE = """\
Aja como um especialista em educação inclusiva. Sua tarefa é preencher o campo "{field_label}" de um PEI.

Para garantir coesão e coerência, analise com cuidado os campos já preenchidos do PEI (e os ficheiros de apoio, se houver) antes de responder.

{form_block}

Com base nesse contexto, gere o conteúdo do campo "{field_label}".
Responda apenas com o texto do campo, sem introduções nem títulos."""

# ------------------------------------------------------------------
# Needs list ("suggest-needs")
# ------------------------------------------------------------------

NEEDS_TEMPLATE = """\
Aja como um psicopedagogo especialista.
Com base no diagnóstico, nas habilidades do aluno e nos ficheiros de apoio, sugira uma lista de necessidades educacionais específicas a serem trabalhadas no PEI.

Contexto do Aluno:
---
Diagnóstico e/ou Descrição Atual: {diagnosis}
Habilidades Acadêmicas Atuais: {skills}
---
Contexto do PEI:
---
{form_context}
---

Liste as necessidades específicas, uma por linha, cada linha começando com um hífen (-).
Exemplo:
- Apoio visual para instruções
- Tempo extra para avaliações
- Mediação em interações sociais

Gere apenas a lista, sem introdução nem conclusão."""

# ------------------------------------------------------------------
# Curricular adaptations ("suggest-adaptations")
# ------------------------------------------------------------------

ADAPTATIONS_TEMPLATE = """\
Aja como um especialista em educação inclusiva e psicopedagogia.
Com base no diagnóstico, nas necessidades, nas metas do aluno e nos ficheiros de apoio, sugira uma lista detalhada de adaptações curriculares.

Contexto do Aluno:
---
Diagnóstico e Necessidades Específicas: {diagnosis}
---
Contexto do PEI:
---
{form_context}
---

Dê sugestões práticas de adaptações em:
1. **Materiais:** (ex: textos com fonte ampliada, audiolivros)
2. **Atividades:** (ex: instruções segmentadas, tempo extra)
3. **Avaliações:** (ex: provas orais, questões de múltipla escolha)
4. **Ambiente:** (ex: sentar próximo ao professor, reduzir estímulos visuais)

Gere uma lista bem estruturada e clara, sem introdução nem conclusão."""

# ------------------------------------------------------------------
# SMART critique ("smart")
# ------------------------------------------------------------------

SMART_TEMPLATE = """\
Analise a seguinte meta de um PEI segundo os critérios SMART (Específica, Mensurável, Atingível, Relevante, Temporal). Para cada critério, forneça uma crítica construtiva e uma sugestão de melhoria.

Meta para Análise: "{goal_text}"

Sua resposta DEVE ser um objeto JSON válido, sem nenhum texto antes ou depois, com a seguinte estrutura:
{{
  "isSpecific": {{ "critique": "...", "suggestion": "..." }},
  "isMeasurable": {{ "critique": "...", "suggestion": "..." }},
  "isAchievable": {{ "critique": "...", "suggestion": "..." }},
  "isRelevant": {{ "critique": "...", "suggestion": "..." }},
  "isTimeBound": {{ "critique": "...", "suggestion": "..." }}
}}"""

# ------------------------------------------------------------------
# Activity suggestions ("suggest")
# ------------------------------------------------------------------

ACTIVITIES_LEAD = "Com base"
ACTIVITIES_LEAD_DUA = (
    "Com base nos princípios do Desenho Universal para a Aprendizagem (DUA) e"
)
ACTIVITIES_SUBJECT_GOAL = "na seguinte meta de um PEI"
ACTIVITIES_SUBJECT_PEI = "no contexto completo do PEI fornecido"
ACTIVITIES_GOAL_CONTEXT = 'Meta: "{goal_text}"'

ACTIVITIES_SHAPE = """\
[
  {
    "title": "...",
    "description": "...",
    "discipline": "...",
    "skills": ["...", "..."],
    "needs": ["...", "..."],
    "goalTags": ["..."]
  }
]"""

ACTIVITIES_SHAPE_DUA = """\
[
  {
    "title": "...",
    "description": "...",
    "discipline": "...",
    "skills": ["...", "..."],
    "needs": ["...", "..."],
    "goalTags": ["DUA"],
    "isDUA": true
  }
]"""

ACTIVITIES_TEMPLATE = """\
{lead} {subject}, sugira 3 a 5 atividades educacionais adaptadas.

Contexto Adicional:
{context}

Sua resposta DEVE ser um array de objetos JSON válido, sem nenhum texto antes ou depois, com a seguinte estrutura:
{shape}"""

# ------------------------------------------------------------------
# Whole-plan actions
# ------------------------------------------------------------------

FULL_PEI_TEMPLATE = """\
Aja como um especialista em educação especial e psicopedagogia.
Com base nos ficheiros de apoio e nos dados do formulário, elabore um Plano Educacional Individualizado (PEI) completo, coeso e profissional.
O documento deve ser bem estruturado, com parágrafos claros e linguagem técnica, porém compreensível.
Conecte as seções de forma lógica: as metas devem refletir o diagnóstico e a avaliação, e as atividades devem estar alinhadas às metas.
Se houver campos não preenchidos, faça inferências razoáveis.
Use um tom formal e respeitoso.

Contexto do PEI:
---
{form_context}
---

Elabore o PEI completo a seguir."""

ANALYSIS_TEMPLATE = """\
Aja como uma equipe multidisciplinar de especialistas em educação, composta por um pedagogo e um psicopedagogo.
Sua tarefa é fazer uma análise completa e aprofundada do Plano Educacional Individualizado (PEI) a seguir.

Retorne um objeto JSON válido, sem nenhum texto ou formatação antes ou depois, com a seguinte estrutura:

{
  "strengths": ["Pontos fortes do PEI, como clareza das metas e adequação das estratégias."],
  "weaknesses": ["Pontos fracos ou áreas que precisam de mais detalhes, como metas vagas ou falta de estratégias específicas."],
  "goalAnalysis": "Análise detalhada das metas de curto, médio e longo prazo: são SMART e estão alinhadas ao perfil do aluno?",
  "pedagogicalAnalysis": "Análise pedagógica das estratégias, adaptações curriculares e metodologias frente às necessidades do aluno e às boas práticas de educação inclusiva.",
  "psychopedagogicalAnalysis": "Análise psicopedagógica da coerência entre diagnóstico, avaliação inicial e intervenções, considerando aspectos cognitivos, sociais e emocionais.",
  "suggestions": ["Sugestões práticas e acionáveis para melhorar o PEI, abordando os pontos fracos identificados."]
}

A análise deve ser construtiva, profissional e baseada em evidências do próprio PEI."""

ANALYSIS_CONTEXT_TEMPLATE = """\
Contexto do PEI:
---
{form_context}
---"""

# ------------------------------------------------------------------
# Refinement of an edited text
# ------------------------------------------------------------------

DEFAULT_REFINE_INSTRUCTION = "Por favor, refine e aprimore este texto."

REFINE_TEMPLATE = """\
Aja como um especialista em educação. O usuário está editando o campo "{field_label}" de um PEI.

Texto Atual:
---
{text}
---

O usuário forneceu a seguinte instrução para refinar o texto: "{instruction}".

Considere também os documentos de apoio e o restante do PEI para manter a coerência.

Contexto do PEI:
---
{form_context}
---

Refine o texto atual com base na instrução e no contexto. Mantenha o propósito original, melhore a clareza e a estrutura e devolva apenas o texto aprimorado."""
