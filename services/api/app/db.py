"""Database connection layer.

Supports two modes:
- PostgreSQL when DATABASE_URL is set
- In-memory fallback for local development without DB

Records are stored as JSONB documents keyed by id.  ``DbRecordStore``
exposes these functions through the :class:`pei.storage.base.RecordStore`
protocol used by the form sessions.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pei.config.models import RECORD_DATA_FIELDS, Activity, PeiRecord, PeiRecordData, RagFile
from pei.storage.base import RecordNotFoundError, check_activity_flags

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "")

# ---------------------------------------------------------------------------
# Connection pool (lazy init)
# ---------------------------------------------------------------------------

_pool = None
_pool_init_done = False  # True once we've attempted to connect (success or failure)

_TABLES = {
    "peis": (
        "CREATE TABLE IF NOT EXISTS peis ("
        "  id TEXT PRIMARY KEY,"
        "  student_name TEXT NOT NULL DEFAULT '',"
        "  doc JSONB NOT NULL,"
        "  updated_at TIMESTAMPTZ NOT NULL DEFAULT now()"
        ")"
    ),
    "activities": (
        "CREATE TABLE IF NOT EXISTS activities ("
        "  id TEXT PRIMARY KEY,"
        "  source_pei_id TEXT,"
        "  doc JSONB NOT NULL,"
        "  created_at TIMESTAMPTZ NOT NULL DEFAULT now()"
        ")"
    ),
    "rag_files": (
        "CREATE TABLE IF NOT EXISTS rag_files ("
        "  id TEXT PRIMARY KEY,"
        "  doc JSONB NOT NULL,"
        "  created_at TIMESTAMPTZ NOT NULL DEFAULT now()"
        ")"
    ),
    "llm_audits": (
        "CREATE TABLE IF NOT EXISTS llm_audits ("
        "  id TEXT PRIMARY KEY,"
        "  doc JSONB NOT NULL,"
        "  created_at TIMESTAMPTZ NOT NULL DEFAULT now()"
        ")"
    ),
}


def _get_pool():
    global _pool, _pool_init_done
    if _pool is not None:
        return _pool
    if _pool_init_done:
        return None  # already tried and failed
    _pool_init_done = True
    if not DATABASE_URL:
        logger.info("No DATABASE_URL set, using in-memory fallback")
        return None
    try:
        from psycopg2 import pool as pg_pool

        _pool = pg_pool.ThreadedConnectionPool(
            minconn=1,
            maxconn=3,
            dsn=DATABASE_URL,
            connect_timeout=5,
        )
        logger.info("PostgreSQL connection pool created")
        _run_migrations(_pool)
        return _pool
    except Exception as e:
        logger.warning("Failed to create PostgreSQL pool (%s), using in-memory fallback", e)
        return None


def _run_migrations(pool):
    """Create missing tables."""
    try:
        conn = pool.getconn()
        try:
            cur = conn.cursor()
            for name, ddl in _TABLES.items():
                cur.execute(ddl)
                logger.debug("Migration: ensured table %s", name)
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.warning("Migration failed (non-fatal): %s", e)
        finally:
            pool.putconn(conn)
    except Exception as e:
        logger.warning("Could not run migrations: %s", e)


@contextmanager
def get_conn():
    """Yield a PostgreSQL connection from the pool."""
    pool = _get_pool()
    if pool is None:
        yield None
        return
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


# ---------------------------------------------------------------------------
# In-memory fallback stores
# ---------------------------------------------------------------------------

_mem_peis: Dict[str, dict] = {}
_mem_activities: Dict[str, dict] = {}
_mem_rag_files: Dict[str, dict] = {}
_mem_llm_audits: List[dict] = []


def reset_memory() -> None:
    """Clear the in-memory stores (tests)."""
    _mem_peis.clear()
    _mem_activities.clear()
    _mem_rag_files.clear()
    _mem_llm_audits.clear()


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uuid() -> str:
    return str(uuid.uuid4())


def _use_pg() -> bool:
    return _get_pool() is not None


def _doc(value) -> dict:
    return value if isinstance(value, dict) else json.loads(value or "{}")


# ===================================================================
# PEIs
# ===================================================================

def save_pei(record: dict, existing_id: Optional[str], display_name: str) -> dict:
    """Insert (no ``existing_id``) or overwrite a PEI document."""
    pei_id = existing_id or _uuid()
    doc = {k: v for k, v in record.items() if k in RECORD_DATA_FIELDS}
    doc.update({"id": pei_id, "student_name": display_name, "timestamp": _now_iso()})
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """INSERT INTO peis (id, student_name, doc)
                   VALUES (%s, %s, %s)
                   ON CONFLICT (id) DO UPDATE SET student_name = EXCLUDED.student_name,
                       doc = EXCLUDED.doc, updated_at = now()""",
                (pei_id, display_name, json.dumps(doc)),
            )
    else:
        _mem_peis[pei_id] = doc
    return doc


def get_pei(pei_id: str) -> Optional[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT doc FROM peis WHERE id = %s", (pei_id,))
            row = cur.fetchone()
            return _doc(row[0]) if row else None
    else:
        return _mem_peis.get(pei_id)


def list_peis() -> List[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT doc FROM peis ORDER BY updated_at DESC")
            return [_doc(r[0]) for r in cur.fetchall()]
    else:
        return sorted(_mem_peis.values(), key=lambda d: d["timestamp"], reverse=True)


def delete_pei(pei_id: str) -> bool:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM peis WHERE id = %s", (pei_id,))
            return cur.rowcount > 0
    else:
        return _mem_peis.pop(pei_id, None) is not None


# ===================================================================
# Activity bank
# ===================================================================

def add_activities(activities: List[dict], source_pei_id: Optional[str] = None) -> List[dict]:
    added = []
    for activity in activities:
        doc = dict(activity)
        doc.update({"id": _uuid(), "source_pei_id": source_pei_id, "created_at": _now_iso()})
        added.append(doc)
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            for doc in added:
                cur.execute(
                    "INSERT INTO activities (id, source_pei_id, doc) VALUES (%s, %s, %s)",
                    (doc["id"], source_pei_id, json.dumps(doc)),
                )
    else:
        for doc in added:
            _mem_activities[doc["id"]] = doc
    return added


def get_activity(activity_id: str) -> Optional[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT doc FROM activities WHERE id = %s", (activity_id,))
            row = cur.fetchone()
            return _doc(row[0]) if row else None
    else:
        return _mem_activities.get(activity_id)


def list_activities() -> List[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT doc FROM activities ORDER BY created_at DESC")
            return [_doc(r[0]) for r in cur.fetchall()]
    else:
        return list(_mem_activities.values())


def update_activity(activity_id: str, **flags) -> Optional[dict]:
    """Set the favourite / DUA flags; other attributes are immutable."""
    check_activity_flags(flags)
    doc = get_activity(activity_id)
    if doc is None:
        return None
    doc = {**doc, **flags}
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE activities SET doc = %s WHERE id = %s",
                (json.dumps(doc), activity_id),
            )
    else:
        _mem_activities[activity_id] = doc
    return doc


def delete_activity(activity_id: str) -> bool:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM activities WHERE id = %s", (activity_id,))
            return cur.rowcount > 0
    else:
        return _mem_activities.pop(activity_id, None) is not None


# ===================================================================
# Support files
# ===================================================================

def add_rag_file(rag_file: dict) -> dict:
    doc = dict(rag_file)
    doc.setdefault("id", _uuid())
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO rag_files (id, doc) VALUES (%s, %s)",
                (doc["id"], json.dumps(doc)),
            )
    else:
        _mem_rag_files[doc["id"]] = doc
    return doc


def list_rag_files() -> List[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT doc FROM rag_files ORDER BY created_at")
            return [_doc(r[0]) for r in cur.fetchall()]
    else:
        return list(_mem_rag_files.values())


def set_rag_file_selected(file_id: str, selected: bool) -> Optional[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """UPDATE rag_files SET doc = jsonb_set(doc, '{selected}', %s::jsonb)
                   WHERE id = %s RETURNING doc""",
                (json.dumps(selected), file_id),
            )
            row = cur.fetchone()
            return _doc(row[0]) if row else None
    else:
        doc = _mem_rag_files.get(file_id)
        if doc is None:
            return None
        doc = {**doc, "selected": selected}
        _mem_rag_files[file_id] = doc
        return doc


def delete_rag_file(file_id: str) -> bool:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM rag_files WHERE id = %s", (file_id,))
            return cur.rowcount > 0
    else:
        return _mem_rag_files.pop(file_id, None) is not None


# ===================================================================
# LLM Audits
# ===================================================================

def save_llm_audit(record: Dict[str, Any]) -> dict:
    doc = dict(record)
    doc["id"] = _uuid()
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO llm_audits (id, doc) VALUES (%s, %s)",
                (doc["id"], json.dumps(doc)),
            )
    else:
        _mem_llm_audits.append(doc)
    return doc


def list_llm_audits() -> List[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT doc FROM llm_audits ORDER BY created_at")
            return [_doc(r[0]) for r in cur.fetchall()]
    else:
        return list(_mem_llm_audits)


# ===================================================================
# RecordStore adapter
# ===================================================================

class DbRecordStore:
    """:class:`~pei.storage.base.RecordStore` over this module's functions."""

    def save_pei(
        self, record: PeiRecordData, existing_id: Optional[str], display_name: str,
    ) -> PeiRecord:
        doc = save_pei(record.model_dump(mode="json"), existing_id, display_name)
        return PeiRecord.model_validate(doc)

    def get_pei(self, pei_id: str) -> Optional[PeiRecord]:
        doc = get_pei(pei_id)
        return PeiRecord.model_validate(doc) if doc else None

    def list_peis(self) -> List[PeiRecord]:
        return [PeiRecord.model_validate(d) for d in list_peis()]

    def delete_pei(self, pei_id: str) -> bool:
        return delete_pei(pei_id)

    def add_activities(
        self, activities: List[Activity], source_pei_id: Optional[str] = None,
    ) -> List[Activity]:
        docs = add_activities([a.model_dump(mode="json") for a in activities], source_pei_id)
        return [Activity.model_validate(d) for d in docs]

    def list_activities(self) -> List[Activity]:
        return [Activity.model_validate(d) for d in list_activities()]

    def update_activity(self, activity_id: str, **flags: bool) -> Activity:
        doc = update_activity(activity_id, **flags)
        if doc is None:
            raise RecordNotFoundError(activity_id)
        return Activity.model_validate(doc)

    def delete_activity(self, activity_id: str) -> bool:
        return delete_activity(activity_id)

    def add_rag_file(self, rag_file: RagFile) -> RagFile:
        return RagFile.model_validate(add_rag_file(rag_file.model_dump(mode="json")))

    def list_rag_files(self) -> List[RagFile]:
        return [RagFile.model_validate(d) for d in list_rag_files()]

    def set_rag_file_selected(self, file_id: str, selected: bool) -> RagFile:
        doc = set_rag_file_selected(file_id, selected)
        if doc is None:
            raise RecordNotFoundError(file_id)
        return RagFile.model_validate(doc)

    def delete_rag_file(self, file_id: str) -> bool:
        return delete_rag_file(file_id)
