"""OpenAI provider implementation.

Implements the same LLMProvider interface as GoogleProvider.  Reasoning
models receive the thinking budget as a ``reasoning_effort`` level.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from typing import Any, Dict, List, Optional, Sequence

from .base import (
    AUTHENTICATION,
    OTHER,
    UNAVAILABLE,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    PromptPart,
    ServiceError,
)

logger = logging.getLogger(__name__)

_REASONING_PREFIXES = ("o1", "o3", "o4", "gpt-5")


def reasoning_effort_for(budget: int) -> str:
    """Translate a token budget into an OpenAI reasoning effort level."""
    if budget <= 0:
        return "minimal"
    if budget < 2048:
        return "low"
    if budget < 16384:
        return "medium"
    return "high"


class OpenAIProvider(LLMProvider):
    """LLM Provider backed by OpenAI API (GPT-4o, GPT-5, o-series)."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gpt-5",
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        self.default_model = default_model
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ServiceError(
                    AUTHENTICATION, "OPENAI_API_KEY is not set", provider=self.provider_name,
                )
            try:
                from openai import OpenAI
            except ImportError:
                raise ServiceError(
                    OTHER,
                    "openai package required: pip install openai",
                    provider=self.provider_name,
                )
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    @staticmethod
    def _to_content(parts: Sequence[PromptPart]) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for part in parts:
            if part.is_image:
                mime = part.mime_type or "image/png"
                content.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime};base64,{part.data}"},
                })
            elif part.text:
                content.append({"type": "text", "text": part.text})
        return content

    def generate_text(
        self,
        system_prompt: str,
        parts: Sequence[PromptPart],
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        cfg = self._default_config(config)
        model = self._model_for(cfg)
        client = self.client

        prompt_hash = hashlib.sha256(
            (system_prompt + "".join(p.text or p.mime_type or "" for p in parts)).encode()
        ).hexdigest()[:16]

        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": self._to_content(parts)},
            ],
        }
        if model.startswith(_REASONING_PREFIXES):
            kwargs["reasoning_effort"] = reasoning_effort_for(cfg.thinking_budget)
            kwargs["max_completion_tokens"] = cfg.max_tokens + cfg.thinking_budget
        else:
            kwargs["temperature"] = cfg.temperature
            kwargs["max_tokens"] = cfg.max_tokens

        t0 = time.time()
        try:
            response = client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error("OpenAI API error: %s", e)
            if type(e).__name__ in ("APIConnectionError", "APITimeoutError"):
                raise ServiceError(UNAVAILABLE, str(e), provider=self.provider_name) from e
            raise ServiceError.from_exception(e, provider=self.provider_name) from e

        latency_ms = int((time.time() - t0) * 1000)
        choice = response.choices[0] if response.choices else None

        return LLMResponse(
            raw_text=(choice.message.content or "") if choice else "",
            model=model,
            provider=self.provider_name,
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
            latency_ms=latency_ms,
            stop_reason=(choice.finish_reason or "") if choice else "",
            prompt_hash=prompt_hash,
        )
