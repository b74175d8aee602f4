"""LLM Provider interface: abstract base for all LLM backends.

Every provider must implement ``generate_text``.  The orchestrator calls
providers through :class:`~pei.agents.invoker.AIInvoker`, making it trivial
to swap Gemini ↔ Claude ↔ OpenAI.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class LLMConfig:
    """Immutable configuration for a single LLM call.

    ``thinking_budget`` is a pass-through hint: ``0`` asks for the fastest
    completion, a positive value allows that many reasoning tokens.
    """

    model: str = ""
    temperature: float = 0.7
    max_tokens: int = 8192
    thinking_budget: int = 0


@dataclass(frozen=True)
class PromptPart:
    """One prompt segment: plain text or an inline base64 image."""

    text: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "PromptPart":
        return cls(text=text)

    @classmethod
    def from_image(cls, mime_type: str, data: str) -> "PromptPart":
        return cls(mime_type=mime_type, data=data)

    @property
    def is_image(self) -> bool:
        return self.data is not None


@dataclass
class LLMResponse:
    """Standardised response from any LLM provider."""

    raw_text: str
    model: str = ""
    provider: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    stop_reason: str = ""
    prompt_hash: str = ""


class LLMProvider(abc.ABC):
    """Abstract base class for LLM providers.

    Subclasses must implement ``generate_text``: send an ordered list of
    prompt parts plus a system instruction and return the completion text.
    """

    provider_name: str = "base"
    default_model: str = ""

    @abc.abstractmethod
    def generate_text(
        self,
        system_prompt: str,
        parts: Sequence[PromptPart],
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        """Send a prompt and return the completion.

        Parameters
        ----------
        system_prompt : str
            System-level instruction (persona, rules).
        parts : sequence of PromptPart
            Instruction text followed by context segments (text or images).
        config : LLMConfig, optional
            Override default config for this call.

        Returns
        -------
        LLMResponse
            Contains ``raw_text`` and usage metadata.

        Raises
        ------
        ServiceError
            On authentication, quota, availability or any other API failure.
        """
        ...

    def _default_config(self, config: Optional[LLMConfig]) -> LLMConfig:
        return config or LLMConfig()

    def _model_for(self, cfg: LLMConfig) -> str:
        return cfg.model or self.default_model


# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------

class LLMError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(self, message: str, provider: str = "", retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


# Categories surfaced to the user.  Messages are shown verbatim in the UI.
AUTHENTICATION = "authentication"
RATE_LIMITED = "rate_limited"
UNAVAILABLE = "unavailable"
EMPTY_RESPONSE = "empty_response"
OTHER = "other"

SERVICE_ERROR_MESSAGES = {
    AUTHENTICATION: "Chave de API inválida ou não configurada.",
    RATE_LIMITED: "Limite de requisições excedido. Tente novamente em alguns instantes.",
    UNAVAILABLE: "O serviço de IA está temporariamente indisponível.",
    EMPTY_RESPONSE: "A IA retornou uma resposta vazia.",
    OTHER: "Ocorreu um erro na comunicação com a IA.",
}


class ServiceError(LLMError):
    """The AI provider failed (auth, quota, availability, empty reply...)."""

    def __init__(self, category: str, detail: str = "", provider: str = ""):
        if category not in SERVICE_ERROR_MESSAGES:
            category = OTHER
        message = SERVICE_ERROR_MESSAGES[category]
        if category == OTHER and detail:
            message = f"Erro: {detail}"
        super().__init__(
            message,
            provider=provider,
            retryable=category in (RATE_LIMITED, UNAVAILABLE),
        )
        self.category = category
        self.detail = detail

    @property
    def user_message(self) -> str:
        return str(self)

    @classmethod
    def from_exception(cls, exc: BaseException, provider: str = "") -> "ServiceError":
        """Classify an SDK exception by HTTP status code, then by message."""
        if isinstance(exc, ServiceError):
            return exc

        status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
        text = str(exc)

        if status in (401, 403) or "API key" in text or "api_key" in text:
            category = AUTHENTICATION
        elif status == 429 or "429" in text:
            category = RATE_LIMITED
        elif status in (500, 502, 503, 504, 529) or "503" in text:
            category = UNAVAILABLE
        else:
            category = OTHER
        return cls(category, detail=text, provider=provider)


class MalformedResponseError(LLMError):
    """LLM returned text that does not contain the expected JSON shape."""

    def __init__(self, message: str, raw_text: str = "", expected_shape: str = ""):
        super().__init__(message, retryable=True)
        self.raw_text = raw_text
        self.expected_shape = expected_shape
