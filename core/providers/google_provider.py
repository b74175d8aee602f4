"""Google Gemini provider: default backend for the PEI assistant.

Uses the ``google-genai`` SDK, which exposes the thinking budget knob
(``ThinkingConfig``) that switches between fast and extended reasoning.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
import time
from typing import List, Optional, Sequence

from .base import (
    AUTHENTICATION,
    OTHER,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    PromptPart,
    ServiceError,
)
from .registry import thinking_budget_for

logger = logging.getLogger(__name__)


def _env_api_key() -> str:
    for var in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY"):
        value = os.environ.get(var, "")
        if value:
            return value
    return ""


class GoogleProvider(LLMProvider):
    """LLM Provider backed by the Google Gemini API."""

    provider_name = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gemini-2.5-flash",
    ):
        self.api_key = api_key or _env_api_key()
        self.default_model = default_model
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ServiceError(
                    AUTHENTICATION, "GOOGLE_API_KEY is not set", provider=self.provider_name,
                )
            try:
                from google import genai
            except ImportError:
                raise ServiceError(
                    OTHER,
                    "google-genai package required: pip install google-genai",
                    provider=self.provider_name,
                )
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @staticmethod
    def _to_contents(parts: Sequence[PromptPart]) -> List:
        from google.genai import types

        contents = []
        for part in parts:
            if part.is_image:
                contents.append(
                    types.Part.from_bytes(
                        data=base64.b64decode(part.data),
                        mime_type=part.mime_type or "image/png",
                    )
                )
            elif part.text:
                contents.append(types.Part.from_text(text=part.text))
        return contents

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

        from google.genai import types

        prompt_hash = hashlib.sha256(
            (system_prompt + "".join(p.text or p.mime_type or "" for p in parts)).encode()
        ).hexdigest()[:16]

        budget = thinking_budget_for(model, cfg.thinking_budget)
        thinking_config = None
        if budget is not None:
            thinking_config = types.ThinkingConfig(thinking_budget=budget)

        gen_config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=cfg.temperature,
            max_output_tokens=cfg.max_tokens + (budget or 0),
            thinking_config=thinking_config,
        )

        t0 = time.time()
        try:
            response = client.models.generate_content(
                model=model,
                contents=self._to_contents(parts),
                config=gen_config,
            )
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            raise ServiceError.from_exception(e, provider=self.provider_name) from e

        latency_ms = int((time.time() - t0) * 1000)
        usage = getattr(response, "usage_metadata", None)

        return LLMResponse(
            raw_text=response.text or "",
            model=model,
            provider=self.provider_name,
            input_tokens=(getattr(usage, "prompt_token_count", 0) or 0) if usage else 0,
            output_tokens=(getattr(usage, "candidates_token_count", 0) or 0) if usage else 0,
            latency_ms=latency_ms,
            stop_reason="stop",
            prompt_hash=prompt_hash,
        )
