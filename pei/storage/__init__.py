"""Record stores for PEIs, the activity bank and support files."""

from .base import RecordNotFoundError, RecordStore
from .local import LocalRecordStore

__all__ = ["RecordStore", "RecordNotFoundError", "LocalRecordStore"]
