"""PEI record schemas for API contracts."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from pei.config.models import PeiRecordData

__all__ = ["PeiSaveRequest", "PeiSummary"]


class PeiSaveRequest(PeiRecordData):
    """Create (no ``id``) or overwrite a PEI."""

    id: Optional[str] = None
    student_name: str = ""


class PeiSummary(BaseModel):
    """Row of the saved-PEI list."""

    id: str
    student_name: str
    timestamp: str
    progress: int = Field(default=0, ge=0, le=100)
