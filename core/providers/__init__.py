"""LLM Provider abstraction layer.

Supports multiple LLM backends (Google Gemini, Anthropic Claude, OpenAI)
with a unified interface, audit logging, and output guards.
"""

from .base import (
    LLMConfig,
    LLMError,
    LLMProvider,
    LLMResponse,
    MalformedResponseError,
    PromptPart,
    ServiceError,
)
from .guards import JSONOutputGuard
from .audit import AuditLogger, AuditRecord
from .registry import get_provider, get_model_catalog

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "LLMError",
    "PromptPart",
    "ServiceError",
    "MalformedResponseError",
    "JSONOutputGuard",
    "AuditLogger",
    "AuditRecord",
    "get_provider",
    "get_model_catalog",
]
