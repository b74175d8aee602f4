"""Anthropic Claude provider implementation.

Maps the thinking budget onto Claude's extended thinking and inline
images onto base64 image content blocks.
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

# Claude rejects thinking budgets below this value.
MIN_THINKING_BUDGET = 1024


class AnthropicProvider(LLMProvider):
    """LLM Provider backed by Anthropic Claude API."""

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "claude-sonnet-4-5-20250929",
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self.default_model = default_model
        self.base_url = base_url
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ServiceError(
                    AUTHENTICATION, "ANTHROPIC_API_KEY is not set", provider=self.provider_name,
                )
            try:
                from anthropic import Anthropic
            except ImportError:
                raise ServiceError(
                    OTHER,
                    "anthropic package required: pip install anthropic",
                    provider=self.provider_name,
                )
            kwargs: Dict[str, Any] = {"api_key": self.api_key}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = Anthropic(**kwargs)
        return self._client

    @staticmethod
    def _to_content(parts: Sequence[PromptPart]) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        for part in parts:
            if part.is_image:
                blocks.append({
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": part.mime_type or "image/png",
                        "data": part.data,
                    },
                })
            elif part.text:
                blocks.append({"type": "text", "text": part.text})
        return blocks

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
            "max_tokens": cfg.max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": self._to_content(parts)}],
        }
        if cfg.thinking_budget > 0:
            budget = max(cfg.thinking_budget, MIN_THINKING_BUDGET)
            kwargs["thinking"] = {"type": "enabled", "budget_tokens": budget}
            kwargs["max_tokens"] = cfg.max_tokens + budget
        else:
            kwargs["temperature"] = cfg.temperature

        t0 = time.time()
        try:
            with client.messages.stream(**kwargs) as stream:
                response = stream.get_final_message()
        except Exception as e:
            logger.error("Anthropic API error: %s", e)
            if type(e).__name__ in ("APIConnectionError", "APITimeoutError"):
                raise ServiceError(UNAVAILABLE, str(e), provider=self.provider_name) from e
            raise ServiceError.from_exception(e, provider=self.provider_name) from e

        latency_ms = int((time.time() - t0) * 1000)
        raw_text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        usage = getattr(response, "usage", None)

        return LLMResponse(
            raw_text=raw_text,
            model=model,
            provider=self.provider_name,
            input_tokens=getattr(usage, "input_tokens", 0) if usage else 0,
            output_tokens=getattr(usage, "output_tokens", 0) if usage else 0,
            latency_ms=latency_ms,
            stop_reason=getattr(response, "stop_reason", "") or "",
            prompt_hash=prompt_hash,
        )
