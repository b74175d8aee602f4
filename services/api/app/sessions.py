"""Form sessions held by the API process.

A session is one open PEI form: an orchestrator (form state, approval
gate, app context) plus its autosave timer.  Sessions live in memory only;
the PEI itself is persisted through ``db``.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional

from fastapi import HTTPException

from core.providers.audit import AuditLogger
from pei.agents.invoker import AIInvoker
from pei.agents.orchestrator import PeiOrchestrator
from pei.app.context import AppContext
from pei.config.settings import AppSettings
from pei.form.autosave import Autosave

from . import db

logger = logging.getLogger(__name__)


@dataclass
class Session:
    id: str
    orchestrator: PeiOrchestrator
    autosave: Autosave
    last_seen: float = field(default_factory=time.monotonic)


_sessions: Dict[str, Session] = {}


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings.from_env()


def _persist_audit(record) -> None:
    db.save_llm_audit(record.to_dict())


@lru_cache(maxsize=1)
def _shared_invoker() -> AIInvoker:
    return AIInvoker.from_settings(get_settings(), audit=AuditLogger(persist_fn=_persist_audit))


def get_invoker() -> AIInvoker:
    """FastAPI dependency; tests override it with a fake provider."""
    return _shared_invoker()


async def create_session(invoker: AIInvoker, view: Optional[str] = None) -> Session:
    await prune_idle_sessions()
    orchestrator = PeiOrchestrator(invoker, db.DbRecordStore(), context=AppContext.for_view(view))
    autosave = Autosave(
        orchestrator.form, orchestrator.store, interval=get_settings().autosave_interval,
    )
    session = Session(id=uuid.uuid4().hex, orchestrator=orchestrator, autosave=autosave)
    _sessions[session.id] = session
    autosave.start()
    logger.info("Session %s opened (view=%s)", session.id, orchestrator.context.current_view)
    return session


def get_session(session_id: str) -> Session:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail={"code": "SESSION_NOT_FOUND", "message": "Sessão não encontrada."})
    session.last_seen = time.monotonic()
    return session


async def close_session(session_id: str) -> None:
    session = get_session(session_id)
    await session.autosave.stop()
    del _sessions[session_id]
    logger.info("Session %s closed", session_id)


async def prune_idle_sessions(now: Optional[float] = None) -> int:
    """Close sessions idle for longer than ``session_ttl``.  Returns how many."""
    ttl = get_settings().session_ttl
    if ttl <= 0:
        return 0
    cutoff = (time.monotonic() if now is None else now) - ttl
    stale = [s.id for s in _sessions.values() if s.last_seen < cutoff]
    for session_id in stale:
        logger.info("Session %s idle for more than %.0fs", session_id, ttl)
        await close_session(session_id)
    return len(stale)


async def close_all() -> None:
    for session_id in list(_sessions):
        await close_session(session_id)
