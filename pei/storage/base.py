"""Persistence adapter interface.

The record store is an opaque key-value medium for PEIs, the activity bank
and support files.  Implementations: :class:`pei.storage.local.LocalRecordStore`
and the API's ``db`` module (via ``DbRecordStore``).
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from pei.config.models import Activity, PeiRecord, PeiRecordData, RagFile


class RecordNotFoundError(KeyError):
    """No record with the given identifier."""


@runtime_checkable
class RecordStore(Protocol):

    # -- PEIs -------------------------------------------------------------
    def save_pei(
        self,
        record: PeiRecordData,
        existing_id: Optional[str],
        display_name: str,
    ) -> PeiRecord:
        """Create (``existing_id`` is None) or overwrite a PEI; return it with its id."""
        ...

    def get_pei(self, pei_id: str) -> Optional[PeiRecord]: ...

    def list_peis(self) -> List[PeiRecord]: ...

    def delete_pei(self, pei_id: str) -> bool: ...

    # -- Activity bank ----------------------------------------------------
    def add_activities(
        self, activities: List[Activity], source_pei_id: Optional[str] = None,
    ) -> List[Activity]: ...

    def list_activities(self) -> List[Activity]: ...

    def update_activity(self, activity_id: str, **flags: bool) -> Activity: ...

    def delete_activity(self, activity_id: str) -> bool: ...

    # -- Support files ----------------------------------------------------
    def add_rag_file(self, rag_file: RagFile) -> RagFile: ...

    def list_rag_files(self) -> List[RagFile]: ...

    def set_rag_file_selected(self, file_id: str, selected: bool) -> RagFile: ...

    def delete_rag_file(self, file_id: str) -> bool: ...


ACTIVITY_FLAGS = ("is_favorited", "is_dua")


def check_activity_flags(flags: dict) -> None:
    """Only the favourite and DUA flags of a stored activity are mutable."""
    unknown = set(flags) - set(ACTIVITY_FLAGS)
    if unknown:
        raise ValueError(f"Immutable activity attributes: {sorted(unknown)}")
