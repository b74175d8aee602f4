"""Shared fixtures for API integration tests.

Uses FastAPI TestClient (in-memory, no network) so tests run
without a live server, a database or LLM credentials.
"""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence

import pytest

# Ensure project root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Force in-memory DB and no background autosave
os.environ.pop("DATABASE_URL", None)
os.environ["PEI_AUTOSAVE_INTERVAL"] = "0"

from core.providers.base import LLMConfig, LLMProvider, LLMResponse, PromptPart  # noqa: E402
from pei.agents.invoker import AIInvoker  # noqa: E402

REQUIRED_VALUES = {
    "aluno-nome": "Ana Souza",
    "aluno-nasc": "2015-03-10",
    "aluno-ano": "3º ano",
    "aluno-data-elab": "2025-02-01",
    "id-diagnostico": "TEA nível 1",
    "id-contexto": "Mora com os pais.",
    "aval-habilidades": "Lê palavras simples.",
    "aval-social": "Interage em pequenos grupos.",
    "aval-coord": "Autonomia na rotina.",
}


class ScriptedProvider(LLMProvider):
    provider_name = "fake"
    default_model = "fake-model"

    def __init__(self):
        self.responses = []
        self.calls = 0

    def generate_text(
        self,
        system_prompt: str,
        parts: Sequence[PromptPart],
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        self.calls += 1
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(raw_text=item, provider=self.provider_name)


@pytest.fixture(autouse=True)
def _reset_in_memory_db():
    """Clear in-memory stores and sessions before each test for isolation."""
    from services.api.app import db, sessions

    db.reset_memory()
    # Reset pool flag so each test starts fresh
    db._pool = None
    db._pool_init_done = False
    sessions._sessions.clear()
    sessions.get_settings.cache_clear()
    yield
    sessions._sessions.clear()


@pytest.fixture()
def provider():
    return ScriptedProvider()


@pytest.fixture()
def client(provider):
    """FastAPI TestClient with the AI invoker replaced by a scripted one."""
    from fastapi.testclient import TestClient

    from services.api.app.main import app
    from services.api.app.sessions import get_invoker

    invoker = AIInvoker(provider)
    app.dependency_overrides[get_invoker] = lambda: invoker
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def session_id(client):
    resp = client.post("/v1/sessions")
    assert resp.status_code == 201
    return resp.json()["session_id"]


@pytest.fixture()
def filled_session(client, session_id):
    for field_id, value in REQUIRED_VALUES.items():
        resp = client.put(f"/v1/sessions/{session_id}/fields/{field_id}", json={"value": value})
        assert resp.status_code == 200
    return session_id
