"""Activity bank schemas for API contracts."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from pei.config.models import Activity

__all__ = ["ActivityCreate", "ActivityFlagsUpdate"]


class ActivityCreate(BaseModel):
    """Activities authored or accepted by the user."""

    activities: List[Activity] = Field(..., min_length=1)
    source_pei_id: Optional[str] = None


class ActivityFlagsUpdate(BaseModel):
    """Only these two flags change once an activity is stored."""

    is_favorited: Optional[bool] = None
    is_dua: Optional[bool] = None

    def flags(self) -> dict:
        return self.model_dump(exclude_none=True)
