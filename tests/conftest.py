"""Shared fixtures for the PEI Assistant test suite.

Provides a scripted LLM provider, a filled-in form and an in-memory
record store so the orchestration tests never touch the network.
"""

import json
from typing import List, Optional, Sequence

import pytest

from core.providers.base import LLMConfig, LLMProvider, LLMResponse, PromptPart
from pei.agents.invoker import AIInvoker
from pei.agents.orchestrator import PeiOrchestrator
from pei.config.fields import REQUIRED_FIELDS
from pei.form.state import FormState
from pei.storage.local import LocalRecordStore


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------

class FakeProvider(LLMProvider):
    """Returns queued responses in order; an Exception in the queue is raised."""

    provider_name = "fake"
    default_model = "fake-model"

    def __init__(self, responses: Optional[list] = None):
        self.responses = list(responses or [])
        self.calls: List[dict] = []

    def queue(self, *responses) -> "FakeProvider":
        self.responses.extend(responses)
        return self

    def generate_text(
        self,
        system_prompt: str,
        parts: Sequence[PromptPart],
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        self.calls.append({"system": system_prompt, "parts": list(parts), "config": config})
        if not self.responses:
            raise AssertionError("FakeProvider called with no queued response")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(
            raw_text=item,
            model=self._model_for(config or LLMConfig()),
            provider=self.provider_name,
            input_tokens=10,
            output_tokens=5,
        )

    @property
    def last_text(self) -> str:
        parts = self.calls[-1]["parts"]
        return "\n".join(p.text for p in parts if p.text is not None)


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

def _criterion(name: str) -> dict:
    return {"critique": f"Crítica {name}", "suggestion": f"Sugestão {name}"}


SMART_JSON = json.dumps({
    "isSpecific": _criterion("específica"),
    "isMeasurable": _criterion("mensurável"),
    "isAchievable": _criterion("atingível"),
    "isRelevant": _criterion("relevante"),
    "isTimeBound": _criterion("temporal"),
}, ensure_ascii=False)

ACTIVITIES_JSON = json.dumps([
    {
        "title": "Caça-palavras ilustrado",
        "description": "Encontrar palavras com apoio de imagens.",
        "discipline": "Língua Portuguesa",
        "skills": ["leitura", "atenção"],
        "needs": "TEA, apoio visual",
        "goalTags": [],
    },
    {
        "title": "Bingo de sílabas",
        "description": "Jogo coletivo de reconhecimento silábico.",
        "discipline": "Língua Portuguesa",
        "skills": "consciência fonológica",
        "needs": [],
    },
], ensure_ascii=False)

ANALYSIS_JSON = json.dumps({
    "strengths": ["Diagnóstico detalhado"],
    "weaknesses": ["Metas pouco mensuráveis"],
    "goalAnalysis": "As metas são coerentes.",
    "pedagogicalAnalysis": "Estratégias adequadas.",
    "psychopedagogicalAnalysis": "Considera o perfil do aluno.",
    "suggestions": ["Definir indicadores"],
}, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Form / store / orchestrator fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def required_values() -> dict:
    """Every required field filled in."""
    values = {field_id: f"valor de {field_id}" for field_id in REQUIRED_FIELDS}
    values["aluno-nome"] = "Ana Souza"
    values["id-diagnostico"] = "TEA nível 1"
    return values


@pytest.fixture
def filled_form(required_values) -> FormState:
    form = FormState()
    form.update(required_values)
    return form


@pytest.fixture
def store() -> LocalRecordStore:
    return LocalRecordStore()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def invoker(provider) -> AIInvoker:
    return AIInvoker(provider, thinking_budget=8192)


@pytest.fixture
def orchestrator(invoker, store, filled_form) -> PeiOrchestrator:
    return PeiOrchestrator(invoker, store, form=filled_form)


@pytest.fixture
def smart_json() -> str:
    return SMART_JSON


@pytest.fixture
def activities_json() -> str:
    return ACTIVITIES_JSON


@pytest.fixture
def analysis_json() -> str:
    return ANALYSIS_JSON
