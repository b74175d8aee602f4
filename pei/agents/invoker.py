"""AI Invoker: one prompt in, one trimmed completion out.

Wraps an :class:`~core.providers.base.LLMProvider` for the async action
layer.  The provider SDKs are blocking, so the call runs in a worker thread
and the event loop keeps serving other actions and the autosave timer.

There is no retry: every failure is raised as a categorized
:class:`~core.providers.base.ServiceError` and recorded in the audit log.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Union

from core.providers.audit import AuditLogger
from core.providers.base import (
    EMPTY_RESPONSE,
    LLMConfig,
    LLMProvider,
    PromptPart,
    ServiceError,
)
from core.providers.registry import get_provider
from pei.config.settings import DEFAULT_THINKING_BUDGET, AppSettings
from pei.prompts.templates import SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

Prompt = Union[str, Sequence[PromptPart]]


def to_parts(prompt: Prompt) -> List[PromptPart]:
    if isinstance(prompt, str):
        return [PromptPart.from_text(prompt)]
    return list(prompt)


class AIInvoker:
    """Send prompts to the configured provider.

    Parameters
    ----------
    provider : LLMProvider
        Backend doing the actual completion.
    thinking_budget : int
        Reasoning tokens granted when ``thinking=True``; ``0`` is always sent
        when thinking is off.
    audit : AuditLogger, optional
        Receives one record per call, failed calls included.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        thinking_budget: int = DEFAULT_THINKING_BUDGET,
        model: str = "",
        system_instruction: str = SYSTEM_INSTRUCTION,
        audit: Optional[AuditLogger] = None,
    ):
        self.provider = provider
        self.thinking_budget = thinking_budget
        self.model = model
        self.system_instruction = system_instruction
        self.audit = audit or AuditLogger()

    @classmethod
    def from_settings(
        cls, settings: AppSettings, audit: Optional[AuditLogger] = None,
    ) -> "AIInvoker":
        provider = get_provider(settings.llm_provider, model=settings.llm_model or None)
        logger.info(
            "AI invoker: provider=%s model=%s", settings.llm_provider, settings.resolved_model,
        )
        return cls(
            provider,
            thinking_budget=settings.thinking_budget,
            model=settings.llm_model,
            audit=audit,
        )

    def config_for(self, thinking: bool) -> LLMConfig:
        return LLMConfig(
            model=self.model,
            thinking_budget=self.thinking_budget if thinking else 0,
        )

    async def invoke(
        self,
        prompt: Prompt,
        *,
        thinking: bool = False,
        action: str = "",
        field_id: str = "",
    ) -> str:
        """Return the whitespace-trimmed completion for *prompt*.

        Raises
        ------
        ServiceError
            On any provider failure, or ``empty_response`` when the model
            answered with blank text.
        """
        parts = to_parts(prompt)
        config = self.config_for(thinking)
        provider_name = getattr(self.provider, "provider_name", "")

        try:
            response = await asyncio.to_thread(
                self.provider.generate_text,
                self.system_instruction,
                parts,
                config=config,
            )
        except Exception as e:
            error = ServiceError.from_exception(e, provider=provider_name)
            logger.error(
                "AI call failed: action=%s field=%s category=%s detail=%s",
                action, field_id, error.category, error.detail or e,
            )
            self.audit.log(
                None, action=action, field_id=field_id,
                thinking_budget=config.thinking_budget,
                provider=provider_name, error=error.category,
            )
            if error is e:
                raise
            raise error from e

        text = (response.raw_text or "").strip()
        self.audit.log(
            response, action=action, field_id=field_id,
            thinking_budget=config.thinking_budget,
            error=None if text else EMPTY_RESPONSE,
        )
        if not text:
            raise ServiceError(EMPTY_RESPONSE, provider=provider_name)
        return text
