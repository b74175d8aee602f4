"""LLM provider factory and model catalog.

Central registry of available LLM providers, models, and a factory
function to instantiate the correct provider for a given selection.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import LLMProvider

DEFAULT_PROVIDER = "google"

# ---------------------------------------------------------------------------
# Model catalog: authoritative list of supported provider/model combos
# ---------------------------------------------------------------------------

MODEL_CATALOG: List[Dict[str, Any]] = [
    # --- Google Gemini ---
    {
        "provider": "google",
        "provider_label": "Gemini",
        "model_id": "gemini-2.5-flash",
        "label": "Gemini 2.5 Flash",
        "tier": "standard",
        "supports_thinking": True,
        "description": "Rápido, com modo de raciocínio avançado opcional",
    },
    {
        "provider": "google",
        "provider_label": "Gemini",
        "model_id": "gemini-2.5-pro",
        "label": "Gemini 2.5 Pro",
        "tier": "premium",
        "supports_thinking": True,
        # Pro cannot turn thinking off; budgets below this are rejected.
        "min_thinking_budget": 128,
        "description": "Maior precisão para análises completas do PEI",
    },
    # --- Anthropic Claude ---
    {
        "provider": "anthropic",
        "provider_label": "Claude",
        "model_id": "claude-sonnet-4-5-20250929",
        "label": "Claude Sonnet 4.5",
        "tier": "standard",
        "supports_thinking": True,
        "description": "Equilíbrio entre velocidade e qualidade",
    },
    {
        "provider": "anthropic",
        "provider_label": "Claude",
        "model_id": "claude-haiku-4-5-20251001",
        "label": "Claude Haiku 4.5",
        "tier": "fast",
        "supports_thinking": True,
        "description": "Rápido e de baixo custo",
    },
    # --- OpenAI GPT ---
    {
        "provider": "openai",
        "provider_label": "ChatGPT",
        "model_id": "gpt-5",
        "label": "GPT-5",
        "tier": "standard",
        "supports_thinking": True,
        "description": "Modelo de raciocínio de uso geral",
    },
    {
        "provider": "openai",
        "provider_label": "ChatGPT",
        "model_id": "gpt-4o-mini",
        "label": "GPT-4o mini",
        "tier": "fast",
        "supports_thinking": False,
        "description": "Rápido e de baixo custo, sem modo de raciocínio",
    },
]


def get_model_catalog() -> List[Dict[str, Any]]:
    """Return the full model catalog for API/CLI consumption."""
    return MODEL_CATALOG


def get_providers() -> List[Dict[str, str]]:
    """Return unique provider list with labels."""
    seen = {}
    for m in MODEL_CATALOG:
        if m["provider"] not in seen:
            seen[m["provider"]] = m["provider_label"]
    return [{"id": k, "label": v} for k, v in seen.items()]


def get_models_for_provider(provider: str) -> List[Dict[str, Any]]:
    """Return models available for a given provider."""
    return [m for m in MODEL_CATALOG if m["provider"] == provider]


def get_default_model_for_provider(provider: str) -> Optional[str]:
    """Return the default (standard tier) model_id for a provider."""
    for m in MODEL_CATALOG:
        if m["provider"] == provider and m["tier"] == "standard":
            return m["model_id"]
    for m in MODEL_CATALOG:
        if m["provider"] == provider:
            return m["model_id"]
    return None


def validate_provider_model(provider: str, model_id: str) -> bool:
    """Check if a provider/model combination is valid."""
    return any(
        m["provider"] == provider and m["model_id"] == model_id
        for m in MODEL_CATALOG
    )


def get_model_info(model_id: str) -> Optional[Dict[str, Any]]:
    """Return the catalog entry for a model, or None when it is not listed."""
    for m in MODEL_CATALOG:
        if m["model_id"] == model_id:
            return m
    return None


def thinking_budget_for(model_id: str, budget: int) -> Optional[int]:
    """Thinking budget to send for *model_id*, or None to leave it unset.

    Models without thinking get None.  Models with a minimum budget cannot
    disable thinking, so a zero budget becomes None (provider default) and
    a positive one is raised to the minimum.  Unlisted models pass through.
    """
    info = get_model_info(model_id)
    if info is None:
        return budget
    if not info.get("supports_thinking", False):
        return None
    minimum = info.get("min_thinking_budget", 0)
    if minimum and budget <= 0:
        return None
    return max(budget, minimum)


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------

def get_provider(provider_name: str = DEFAULT_PROVIDER, model: Optional[str] = None) -> LLMProvider:
    """Create and return an LLMProvider instance for the given provider/model.

    Parameters
    ----------
    provider_name :
        One of "google", "anthropic", "openai".
    model :
        Optional model ID override. Passed as default_model to the provider.

    Raises
    ------
    ValueError
        If the provider_name is not recognized.
    """
    kwargs: Dict[str, Any] = {}
    if model:
        kwargs["default_model"] = model

    if provider_name == "google":
        from .google_provider import GoogleProvider
        return GoogleProvider(**kwargs)
    elif provider_name == "anthropic":
        from .anthropic_provider import AnthropicProvider
        return AnthropicProvider(**kwargs)
    elif provider_name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(**kwargs)
    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name!r}. "
            f"Supported: google, anthropic, openai"
        )
