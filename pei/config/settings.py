"""Runtime configuration read from environment variables."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from core.providers.registry import DEFAULT_PROVIDER, get_default_model_for_provider

logger = logging.getLogger(__name__)

DEFAULT_THINKING_BUDGET = 8192
DEFAULT_AUTOSAVE_INTERVAL = 5.0
DEFAULT_STORE_PATH = "pei_store.json"
DEFAULT_SESSION_TTL = 3600.0


class AppSettings(BaseModel):
    """Provider selection, reasoning budget and autosave cadence.

    Attributes:
        llm_provider:      ``google`` / ``anthropic`` / ``openai``.
        llm_model:         Model id; empty means the provider's standard model.
        thinking_budget:   Reasoning tokens granted when thinking mode is on.
        autosave_interval: Seconds between autosaves; ``0`` disables autosave.
        store_path:        JSON file backing the local record store.
        session_ttl:       Idle seconds before an API form session is closed;
                           ``0`` keeps sessions until deleted.
    """

    llm_provider: str = DEFAULT_PROVIDER
    llm_model: str = ""
    thinking_budget: int = Field(default=DEFAULT_THINKING_BUDGET, ge=0)
    autosave_interval: float = Field(default=DEFAULT_AUTOSAVE_INTERVAL, ge=0)
    store_path: str = DEFAULT_STORE_PATH
    session_ttl: float = Field(default=DEFAULT_SESSION_TTL, ge=0)

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _normalise_provider(cls, v):
        return (v or DEFAULT_PROVIDER).strip().lower()

    @property
    def resolved_model(self) -> str:
        return self.llm_model or get_default_model_for_provider(self.llm_provider) or ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        env = os.environ if environ is None else environ
        values = {
            "llm_provider": env.get("PEI_LLM_PROVIDER", DEFAULT_PROVIDER),
            "llm_model": env.get("PEI_LLM_MODEL", ""),
            "thinking_budget": env.get("PEI_THINKING_BUDGET", DEFAULT_THINKING_BUDGET),
            "autosave_interval": env.get("PEI_AUTOSAVE_INTERVAL", DEFAULT_AUTOSAVE_INTERVAL),
            "store_path": env.get("PEI_STORE_PATH", DEFAULT_STORE_PATH),
            "session_ttl": env.get("PEI_SESSION_TTL", DEFAULT_SESSION_TTL),
        }
        settings = cls.model_validate(values)
        logger.debug(
            "Settings: provider=%s model=%s thinking_budget=%d autosave=%.1fs",
            settings.llm_provider, settings.resolved_model,
            settings.thinking_budget, settings.autosave_interval,
        )
        return settings
