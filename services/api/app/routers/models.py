"""LLM model catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from core.providers.registry import get_model_catalog, get_providers

from .. import db
from ..sessions import get_settings

router = APIRouter()


@router.get("/models")
async def list_models():
    """Available providers/models and the configured selection."""
    settings = get_settings()
    return {
        "providers": get_providers(),
        "models": get_model_catalog(),
        "current": {
            "provider": settings.llm_provider,
            "model": settings.resolved_model,
            "thinking_budget": settings.thinking_budget,
        },
    }


@router.get("/audits")
async def list_audits():
    """Recorded AI calls."""
    return db.list_llm_audits()
