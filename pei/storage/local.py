"""In-process record store, optionally mirrored to a JSON file.

Used by the CLI and the tests.  Without a path everything lives in memory;
with a path the whole store is rewritten after each mutation.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pei.config.models import (
    RECORD_DATA_FIELDS,
    Activity,
    PeiRecord,
    PeiRecordData,
    RagFile,
    new_id,
    utc_now_iso,
)
from pei.storage.base import RecordNotFoundError, check_activity_flags

logger = logging.getLogger(__name__)


class LocalRecordStore:
    """Dict-backed :class:`~pei.storage.base.RecordStore`."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._peis: Dict[str, PeiRecord] = {}
        self._activities: Dict[str, Activity] = {}
        self._rag_files: Dict[str, RagFile] = {}
        if self.path and self.path.exists():
            self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        self._peis = {p["id"]: PeiRecord.model_validate(p) for p in payload.get("peis", [])}
        self._activities = {
            a["id"]: Activity.model_validate(a) for a in payload.get("activities", [])
        }
        self._rag_files = {
            f["id"]: RagFile.model_validate(f) for f in payload.get("rag_files", [])
        }
        logger.info(
            "Loaded store %s: %d PEI(s), %d activity(ies), %d file(s)",
            self.path, len(self._peis), len(self._activities), len(self._rag_files),
        )

    def _flush(self) -> None:
        if not self.path:
            return
        payload = {
            "peis": [p.model_dump() for p in self._peis.values()],
            "activities": [a.model_dump() for a in self._activities.values()],
            "rag_files": [f.model_dump() for f in self._rag_files.values()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # PEIs
    # ------------------------------------------------------------------

    def save_pei(
        self,
        record: PeiRecordData,
        existing_id: Optional[str],
        display_name: str,
    ) -> PeiRecord:
        pei_id = existing_id or new_id()
        saved = PeiRecord(
            id=pei_id,
            student_name=display_name,
            timestamp=utc_now_iso(),
            **record.model_dump(include=RECORD_DATA_FIELDS),
        )
        self._peis[pei_id] = saved
        self._flush()
        return saved

    def get_pei(self, pei_id: str) -> Optional[PeiRecord]:
        return self._peis.get(pei_id)

    def list_peis(self) -> List[PeiRecord]:
        return sorted(self._peis.values(), key=lambda p: p.timestamp, reverse=True)

    def delete_pei(self, pei_id: str) -> bool:
        removed = self._peis.pop(pei_id, None) is not None
        if removed:
            self._flush()
        return removed

    # ------------------------------------------------------------------
    # Activity bank
    # ------------------------------------------------------------------

    def add_activities(
        self, activities: List[Activity], source_pei_id: Optional[str] = None,
    ) -> List[Activity]:
        added = []
        for activity in activities:
            stored = activity.model_copy(update={
                "id": new_id(),
                "source_pei_id": source_pei_id,
                "created_at": utc_now_iso(),
            })
            self._activities[stored.id] = stored
            added.append(stored)
        self._flush()
        return added

    def list_activities(self) -> List[Activity]:
        return list(self._activities.values())

    def update_activity(self, activity_id: str, **flags: bool) -> Activity:
        check_activity_flags(flags)
        current = self._activities.get(activity_id)
        if current is None:
            raise RecordNotFoundError(activity_id)
        updated = current.model_copy(update=flags)
        self._activities[activity_id] = updated
        self._flush()
        return updated

    def delete_activity(self, activity_id: str) -> bool:
        removed = self._activities.pop(activity_id, None) is not None
        if removed:
            self._flush()
        return removed

    # ------------------------------------------------------------------
    # Support files
    # ------------------------------------------------------------------

    def add_rag_file(self, rag_file: RagFile) -> RagFile:
        self._rag_files[rag_file.id] = rag_file
        self._flush()
        return rag_file

    def list_rag_files(self) -> List[RagFile]:
        return list(self._rag_files.values())

    def set_rag_file_selected(self, file_id: str, selected: bool) -> RagFile:
        current = self._rag_files.get(file_id)
        if current is None:
            raise RecordNotFoundError(file_id)
        updated = current.model_copy(update={"selected": selected})
        self._rag_files[file_id] = updated
        self._flush()
        return updated

    def delete_rag_file(self, file_id: str) -> bool:
        removed = self._rag_files.pop(file_id, None) is not None
        if removed:
            self._flush()
        return removed
