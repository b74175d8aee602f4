"""Support-file schemas for API contracts."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

__all__ = ["RagFileCreate", "RagFileSelect", "RagFileSummary"]


class RagFileCreate(BaseModel):
    """Support file sent as JSON (text content or base64 image)."""

    name: str = Field(..., min_length=1, max_length=255)
    type: Literal["text", "image"] = "text"
    mime_type: str = "text/plain"
    content: str = ""
    selected: bool = False


class RagFileSelect(BaseModel):
    selected: bool


class RagFileSummary(BaseModel):
    """File listing without the (possibly large) content."""

    id: str
    name: str
    type: Literal["text", "image"]
    mime_type: str
    selected: bool
    size: int = 0
