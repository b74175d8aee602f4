"""PEI Orchestrator -- runs the AI actions of one form session.

Flow of a field action::

    gating (required fields / goal text)
        -> Prompt Builder -> AI Invoker -> Response Parser
        -> Approval Gate (text)  |  form critique / goal activities (JSON)

Text output never reaches the form directly: it is staged as a
``SuggestionDraft`` and only :meth:`PeiOrchestrator.approve` commits it.
:meth:`PeiOrchestrator.run_action` is the error boundary used by the API and
the CLI; the individual action methods raise.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from core.providers.base import MalformedResponseError, ServiceError
from pei.agents.invoker import AIInvoker
from pei.app.context import AppContext
from pei.config.fields import (
    ACTIVITY_SUGGESTION_FIELDS,
    ADAPTATIONS_FIELD,
    DIAGNOSIS_FIELD,
    DUA_FIELD,
    OWNER_NAME_FIELD,
    field_label,
    is_goal_field,
)
from pei.config.models import (
    Activity,
    CritiqueResult,
    PeiAnalysis,
    PeiRecord,
    RagFile,
    SuggestionDraft,
)
from pei.extract.parser import (
    parse_activities,
    parse_analysis,
    parse_critique,
    parse_free_text,
)
from pei.form.approval import ApprovalGate
from pei.form.state import FormState, FormValidationError
from pei.prompts import builder
from pei.storage.base import RecordNotFoundError, RecordStore

logger = logging.getLogger(__name__)

# Action identifiers
ACTION_FILL = "ai"
ACTION_NEEDS = "suggest-needs"
ACTION_ADAPTATIONS = "suggest-adaptations"
ACTION_SMART = "smart"
ACTION_ACTIVITIES = "suggest"
ACTION_FULL_PEI = "full-pei"
ACTION_ANALYZE = "analyze"
ACTION_REFINE = "refine"

ACTIONS = (
    ACTION_FILL,
    ACTION_NEEDS,
    ACTION_ADAPTATIONS,
    ACTION_SMART,
    ACTION_ACTIVITIES,
    ACTION_FULL_PEI,
    ACTION_ANALYZE,
    ACTION_REFINE,
)

# Result statuses
STAGED = "staged"
DONE = "done"
SKIPPED = "skipped"
ERROR = "error"

UNTITLED_PEI = "PEI sem nome"

GOAL_TEXT_SMART_MESSAGE = "Por favor, preencha o campo da meta antes de solicitar a análise SMART."
GOAL_TEXT_ACTIVITIES_MESSAGE = (
    "Por favor, preencha o campo da meta antes de solicitar sugestões de atividades."
)
MALFORMED_MESSAGE = (
    "A IA retornou uma resposta em um formato inesperado. Por favor, tente novamente."
)
DUPLICATE_MESSAGE = "Esta ação já está em andamento para este campo."


@dataclass
class ActionResult:
    """Outcome of one action, as shown to the user."""
    action: str
    field_id: str = ""
    status: str = DONE  # staged / done / skipped / error
    message: str = ""
    error_code: str = ""
    error_fields: List[str] = field(default_factory=list)
    draft: Optional[SuggestionDraft] = None
    critique: Optional[CritiqueResult] = None
    activities: List[Activity] = field(default_factory=list)
    analysis: Optional[PeiAnalysis] = None
    text: str = ""
    started_at: float = 0.0
    finished_at: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status in (STAGED, DONE)

    @property
    def elapsed_seconds(self) -> float:
        if self.finished_at and self.started_at:
            return self.finished_at - self.started_at
        return 0.0

    @property
    def focus_field(self) -> Optional[str]:
        return self.error_fields[0] if self.error_fields else None


class PeiOrchestrator:
    """Coordinates form state, approval, AI calls and persistence.

    Usage::

        orch = PeiOrchestrator(AIInvoker(get_provider()), LocalRecordStore())
        orch.form.update({...})
        result = await orch.run_action("metas-curto", "smart")
        result = await orch.run_action("id-diagnostico", "suggest-needs")
        orch.approve()
        await orch.save()
    """

    def __init__(
        self,
        invoker: AIInvoker,
        store: RecordStore,
        *,
        form: Optional[FormState] = None,
        context: Optional[AppContext] = None,
    ) -> None:
        self.invoker = invoker
        self.store = store
        self.form = form or FormState()
        self.context = context or AppContext()
        self.gate = ApprovalGate()
        self.last_activities: List[Activity] = []
        self._loading: Set[Tuple[str, str]] = set()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def thinking(self) -> bool:
        return self.context.thinking_mode_enabled

    def is_loading(self, field_id: str, action: str) -> bool:
        return (field_id, action) in self._loading

    async def _selected_rag_files(self) -> List[RagFile]:
        files = await asyncio.to_thread(self.store.list_rag_files)
        return [f for f in files if f.selected]

    async def _invoke(self, prompt, action: str, field_id: str) -> str:
        return await self.invoker.invoke(
            prompt, thinking=self.thinking, action=action, field_id=field_id,
        )

    def _require_goal_text(self, field_id: str, message: str) -> str:
        goal_text = self.form.get(field_id).strip()
        if not goal_text:
            raise FormValidationError([field_id], message)
        return goal_text

    def _stage(self, field_id: str, content: str, is_appending: bool) -> SuggestionDraft:
        draft = SuggestionDraft(
            field_id=field_id,
            field_label=field_label(field_id),
            content=content,
            is_appending=is_appending,
        )
        self.gate.stage(draft)
        return draft

    # ------------------------------------------------------------------
    # Field actions
    # ------------------------------------------------------------------

    async def suggest_field(self, field_id: str) -> SuggestionDraft:
        """``ai``: draft a full replacement for one field."""
        self.form.require()
        parts = builder.field_fill_prompt(
            self.form.data, field_id, await self._selected_rag_files(),
        )
        text = await self._invoke(parts, ACTION_FILL, field_id)
        return self._stage(field_id, parse_free_text(text), is_appending=False)

    async def suggest_needs(self, field_id: str = DIAGNOSIS_FIELD) -> SuggestionDraft:
        """``suggest-needs``: bulleted needs appended to the field on approval."""
        self.form.require()
        parts = builder.needs_prompt(
            self.form.data, field_id, await self._selected_rag_files(),
        )
        text = await self._invoke(parts, ACTION_NEEDS, field_id)
        return self._stage(field_id, parse_free_text(text), is_appending=True)

    async def suggest_adaptations(self, field_id: str = ADAPTATIONS_FIELD) -> SuggestionDraft:
        """``suggest-adaptations``: curricular adaptations appended on approval."""
        self.form.require()
        parts = builder.adaptations_prompt(
            self.form.data, field_id, await self._selected_rag_files(),
        )
        text = await self._invoke(parts, ACTION_ADAPTATIONS, field_id)
        return self._stage(field_id, parse_free_text(text), is_appending=True)

    async def analyze_goal(self, field_id: str) -> CritiqueResult:
        """``smart``: SMART critique stored on the form for *field_id*."""
        goal_text = self._require_goal_text(field_id, GOAL_TEXT_SMART_MESSAGE)
        text = await self._invoke(builder.smart_prompt(goal_text), ACTION_SMART, field_id)
        critique = parse_critique(text)
        self.form.set_critique(field_id, critique)
        return critique

    async def suggest_activities(self, field_id: str) -> List[Activity]:
        """``suggest``: 3-5 activities, kept on the form for goal/DUA fields.

        Activities bypass the Approval Gate; they reach the bank only
        through :meth:`save_activities`.
        """
        if is_goal_field(field_id):
            self._require_goal_text(field_id, GOAL_TEXT_ACTIVITIES_MESSAGE)
        else:
            self.form.require()
        parts = builder.activities_prompt(
            self.form.data, field_id, await self._selected_rag_files(),
        )
        text = await self._invoke(parts, ACTION_ACTIVITIES, field_id)
        activities = parse_activities(text, field_id)
        if is_goal_field(field_id) or field_id == DUA_FIELD:
            self.form.set_goal_activities(field_id, activities)
        self.last_activities = activities
        logger.info("%d activities suggested for %s", len(activities), field_id)
        return activities

    async def refine_field(
        self, field_id: str, text: str, instruction: Optional[str] = None,
    ) -> SuggestionDraft:
        """Rewrite *text* following *instruction*; staged as a replacement."""
        parts = builder.refine_prompt(
            self.form.data, field_id, text, instruction, await self._selected_rag_files(),
        )
        refined = await self._invoke(parts, ACTION_REFINE, field_id)
        return self._stage(field_id, parse_free_text(refined), is_appending=False)

    # ------------------------------------------------------------------
    # Whole-plan actions
    # ------------------------------------------------------------------

    async def generate_full_pei(self) -> str:
        self.form.require()
        parts = builder.full_pei_prompt(self.form.data, await self._selected_rag_files())
        return parse_free_text(await self._invoke(parts, ACTION_FULL_PEI, ""))

    async def analyze_pei(self) -> PeiAnalysis:
        self.form.require()
        parts = builder.analysis_prompt(self.form.data, await self._selected_rag_files())
        return parse_analysis(await self._invoke(parts, ACTION_ANALYZE, ""))

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    def approve(self) -> SuggestionDraft:
        return self.gate.approve(self.form)

    def reject(self) -> Optional[SuggestionDraft]:
        return self.gate.reject()

    def edit_draft(self, content: str) -> SuggestionDraft:
        return self.gate.edit(content)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save_activities(self, activities: Optional[List[Activity]] = None) -> List[Activity]:
        """Append *activities* (default: the last suggestion) to the bank."""
        to_save = self.last_activities if activities is None else activities
        if not to_save:
            return []
        saved = await asyncio.to_thread(
            self.store.add_activities, list(to_save), self.form.record_id,
        )
        logger.info("%d activities saved to the bank", len(saved))
        return saved

    async def save(self) -> PeiRecord:
        """Explicit save: requires a valid form; adopts the stored id."""
        async with self.form.save_lock:
            self.form.require()
            name = self.form.get(OWNER_NAME_FIELD).strip() or UNTITLED_PEI
            generation = self.form.generation
            record = await asyncio.to_thread(
                self.store.save_pei, self.form.snapshot(), self.form.record_id, name,
            )
            if self.form.adopt_record_id(record.id, generation):
                self.context.editing_pei_id = record.id
        logger.info("Saved PEI %s (%s)", record.id, name)
        return record

    async def load(self, pei_id: str) -> PeiRecord:
        record = await asyncio.to_thread(self.store.get_pei, pei_id)
        if record is None:
            raise RecordNotFoundError(pei_id)
        self.form.load(record)
        self.gate.reject()
        self.context.navigate_to_edit_pei(pei_id)
        return record

    def new_pei(self) -> None:
        self.form.clear()
        self.gate.reject()
        self.last_activities = []
        self.context.navigate_to_new_pei()

    # ------------------------------------------------------------------
    # Error boundary
    # ------------------------------------------------------------------

    async def run_action(self, field_id: str, action: str, **kwargs: Any) -> ActionResult:
        """Run *action* for *field_id* and report the outcome.

        Validation, service and parse failures become an ``error`` result
        with a user-facing message; form state is left untouched.  A second
        request for the same (field, action) while one is in flight is
        ``skipped``.
        """
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action!r}")

        key = (field_id, action)
        if key in self._loading:
            logger.info("Skipping duplicate %s on %s", action, field_id)
            return ActionResult(action=action, field_id=field_id, status=SKIPPED,
                                message=DUPLICATE_MESSAGE)

        result = ActionResult(action=action, field_id=field_id, started_at=time.time())
        self._loading.add(key)
        try:
            await self._dispatch(result, **kwargs)
        except FormValidationError as e:
            result.status = ERROR
            result.error_code = "validation"
            result.message = str(e)
            result.error_fields = list(e.field_ids)
        except ServiceError as e:
            result.status = ERROR
            result.error_code = e.category
            result.message = e.user_message
        except MalformedResponseError as e:
            result.status = ERROR
            result.error_code = "malformed"
            result.message = MALFORMED_MESSAGE
            logger.warning("Action %s on %s: %s", action, field_id, e)
        finally:
            self._loading.discard(key)
            result.finished_at = time.time()

        logger.info(
            "Action %s on %s -> %s (%.2fs)",
            action, field_id or "-", result.status, result.elapsed_seconds,
        )
        return result

    async def _dispatch(self, result: ActionResult, **kwargs: Any) -> None:
        action, field_id = result.action, result.field_id
        if action == ACTION_FILL:
            result.draft = await self.suggest_field(field_id)
            result.status = STAGED
        elif action == ACTION_NEEDS:
            result.draft = await self.suggest_needs(field_id)
            result.status = STAGED
        elif action == ACTION_ADAPTATIONS:
            result.draft = await self.suggest_adaptations(field_id)
            result.status = STAGED
        elif action == ACTION_REFINE:
            text = kwargs.get("text")
            if text is None:
                text = self.form.get(field_id)
            result.draft = await self.refine_field(field_id, text, kwargs.get("instruction"))
            result.status = STAGED
        elif action == ACTION_SMART:
            result.critique = await self.analyze_goal(field_id)
        elif action == ACTION_ACTIVITIES:
            result.activities = await self.suggest_activities(field_id)
            result.message = f"{len(result.activities)} atividades sugeridas."
        elif action == ACTION_FULL_PEI:
            result.text = await self.generate_full_pei()
        elif action == ACTION_ANALYZE:
            result.analysis = await self.analyze_pei()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def available_actions(self, field_id: str) -> List[str]:
        """Field-level actions offered for *field_id* in the form."""
        actions = [ACTION_FILL]
        if field_id == DIAGNOSIS_FIELD:
            actions.append(ACTION_NEEDS)
        if field_id == ADAPTATIONS_FIELD:
            actions.append(ACTION_ADAPTATIONS)
        if is_goal_field(field_id):
            actions.append(ACTION_SMART)
        if field_id in ACTIVITY_SUGGESTION_FIELDS:
            actions.append(ACTION_ACTIVITIES)
        return actions

    def summary(self) -> Dict[str, Any]:
        return {
            "record_id": self.form.record_id,
            "view": self.context.current_view,
            "thinking_mode": self.thinking,
            "pending_draft": self.gate.pending.field_id if self.gate.pending else None,
            "progress": self.form.section_progress(),
            "ai_calls": self.invoker.audit.summary()["total_calls"],
        }
