"""Prompt Builder: turn form data and support files into prompt segments.

Every builder returns ``[instruction, *context]``: one instructional text
segment followed by the selected support files, in the order they were
given.  Form fields are always walked in the declared field order so the
same inputs produce the same prompt.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence

from core.providers.base import PromptPart
from pei.config.fields import (
    ADAPTATIONS_FIELD,
    ALL_FIELDS,
    DIAGNOSIS_FIELD,
    DUA_FIELD,
    SKILLS_FIELD,
    field_label,
    is_goal_field,
)
from pei.config.models import RagFile
from pei.prompts import templates as t


# ------------------------------------------------------------------
# Context helpers
# ------------------------------------------------------------------

def build_form_context(data: Mapping[str, str], exclude_field: str = "") -> str:
    """``"<label>: <value>"`` per filled field, skipping *exclude_field*."""
    lines = []
    for field in ALL_FIELDS:
        value = data.get(field.id)
        if value and value.strip() and field.id != exclude_field:
            lines.append(f"{field.label}: {value}")
    return "\n".join(lines)


def build_rag_parts(rag_files: Iterable[RagFile]) -> List[PromptPart]:
    """Context segments for the selected support files."""
    parts: List[PromptPart] = []
    for rag_file in rag_files:
        if not rag_file.selected:
            continue
        if rag_file.type == "text":
            parts.append(PromptPart.from_text(
                t.RAG_TEXT_SEGMENT.format(name=rag_file.name, content=rag_file.content)
            ))
        elif rag_file.type == "image":
            parts.append(PromptPart.from_text(t.RAG_IMAGE_CAPTION.format(name=rag_file.name)))
            parts.append(PromptPart.from_image(rag_file.mime_type, rag_file.content))
    return parts


def build_prompt(
    data: Mapping[str, str],
    exclude_field: str,
    rag_files: Iterable[RagFile] = (),
    template: str = t.FIELD_FILL_TEMPLATE,
) -> List[PromptPart]:
    """Generic builder: *template* filled with the form context, then support files.

    *template* may use ``{form_context}``, ``{form_block}`` and ``{field_label}``.
    """
    form_context = build_form_context(data, exclude_field)
    instruction = template.format(
        form_context=form_context,
        form_block=t.FORM_CONTEXT_BLOCK.format(form_context=form_context),
        field_label=field_label(exclude_field),
    )
    return [PromptPart.from_text(instruction), *build_rag_parts(rag_files)]


# ------------------------------------------------------------------
# Per-action builders
# ------------------------------------------------------------------

def field_fill_prompt(
    data: Mapping[str, str], field_id: str, rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    return build_prompt(data, field_id, rag_files, t.FIELD_FILL_TEMPLATE)


def needs_prompt(
    data: Mapping[str, str], field_id: str = DIAGNOSIS_FIELD, rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    instruction = t.NEEDS_TEMPLATE.format(
        diagnosis=data.get(DIAGNOSIS_FIELD, ""),
        skills=data.get(SKILLS_FIELD) or t.NOT_INFORMED,
        form_context=build_form_context(data, field_id),
    )
    return [PromptPart.from_text(instruction), *build_rag_parts(rag_files)]


def adaptations_prompt(
    data: Mapping[str, str], field_id: str = ADAPTATIONS_FIELD, rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    instruction = t.ADAPTATIONS_TEMPLATE.format(
        diagnosis=data.get(DIAGNOSIS_FIELD) or t.NOT_INFORMED,
        form_context=build_form_context(data, field_id),
    )
    return [PromptPart.from_text(instruction), *build_rag_parts(rag_files)]


def smart_prompt(goal_text: str) -> str:
    """SMART critique is a single instruction string; no support files."""
    return t.SMART_TEMPLATE.format(goal_text=goal_text)


def activities_prompt(
    data: Mapping[str, str], field_id: str, rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    """Goal fields are scoped to the goal text; other fields to the whole PEI."""
    if is_goal_field(field_id):
        context = t.ACTIVITIES_GOAL_CONTEXT.format(goal_text=data.get(field_id, ""))
        subject = t.ACTIVITIES_SUBJECT_GOAL
    else:
        context = t.FORM_CONTEXT_BLOCK.format(
            form_context="\n" + build_form_context(data, field_id)
        )
        subject = t.ACTIVITIES_SUBJECT_PEI

    is_dua = field_id == DUA_FIELD
    instruction = t.ACTIVITIES_TEMPLATE.format(
        lead=t.ACTIVITIES_LEAD_DUA if is_dua else t.ACTIVITIES_LEAD,
        subject=subject,
        context=context,
        shape=t.ACTIVITIES_SHAPE_DUA if is_dua else t.ACTIVITIES_SHAPE,
    )
    return [PromptPart.from_text(instruction), *build_rag_parts(rag_files)]


def full_pei_prompt(
    data: Mapping[str, str], rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    return build_prompt(data, "", rag_files, t.FULL_PEI_TEMPLATE)


def analysis_prompt(
    data: Mapping[str, str], rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    context = t.ANALYSIS_CONTEXT_TEMPLATE.format(form_context=build_form_context(data))
    return [
        PromptPart.from_text(t.ANALYSIS_TEMPLATE),
        PromptPart.from_text(context),
        *build_rag_parts(rag_files),
    ]


def refine_prompt(
    data: Mapping[str, str],
    field_id: str,
    text: str,
    instruction: Optional[str] = None,
    rag_files: Iterable[RagFile] = (),
) -> List[PromptPart]:
    body = t.REFINE_TEMPLATE.format(
        field_label=field_label(field_id),
        text=text,
        instruction=(instruction or "").strip() or t.DEFAULT_REFINE_INSTRUCTION,
        form_context=build_form_context(data, field_id),
    )
    return [PromptPart.from_text(body), *build_rag_parts(rag_files)]


def prompt_text(parts: Sequence[PromptPart]) -> str:
    """Concatenated text of all text segments (previews and logging)."""
    return "\n".join(p.text for p in parts if p.text is not None)
