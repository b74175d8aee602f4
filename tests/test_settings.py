"""Tests for settings, the model catalog and the provider factory."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.providers.base import LLMConfig, PromptPart
from core.providers.google_provider import GoogleProvider
from core.providers.registry import (
    DEFAULT_PROVIDER,
    get_default_model_for_provider,
    get_model_catalog,
    get_provider,
    get_providers,
    thinking_budget_for,
    validate_provider_model,
)
from pei.config.settings import (
    DEFAULT_AUTOSAVE_INTERVAL,
    DEFAULT_SESSION_TTL,
    DEFAULT_THINKING_BUDGET,
    AppSettings,
)


class TestSettings:

    def test_defaults_from_empty_env(self):
        settings = AppSettings.from_env({})
        assert settings.llm_provider == DEFAULT_PROVIDER
        assert settings.thinking_budget == DEFAULT_THINKING_BUDGET == 8192
        assert settings.autosave_interval == DEFAULT_AUTOSAVE_INTERVAL
        assert settings.session_ttl == DEFAULT_SESSION_TTL

    def test_env_overrides(self):
        settings = AppSettings.from_env({
            "PEI_LLM_PROVIDER": " Anthropic ",
            "PEI_THINKING_BUDGET": "1024",
            "PEI_AUTOSAVE_INTERVAL": "0",
            "PEI_STORE_PATH": "/tmp/x.json",
            "PEI_SESSION_TTL": "600",
        })
        assert settings.llm_provider == "anthropic"
        assert settings.thinking_budget == 1024
        assert settings.autosave_interval == 0
        assert settings.store_path == "/tmp/x.json"
        assert settings.session_ttl == 600

    def test_resolved_model(self):
        assert AppSettings().resolved_model == get_default_model_for_provider(DEFAULT_PROVIDER)
        assert AppSettings(llm_model="gemini-2.5-pro").resolved_model == "gemini-2.5-pro"

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings.from_env({"PEI_THINKING_BUDGET": "-1"})


class TestRegistry:

    def test_catalog_entries_have_required_keys(self):
        for model in get_model_catalog():
            assert {"provider", "model_id", "label", "tier"} <= set(model)

    def test_providers(self):
        assert [p["id"] for p in get_providers()] == ["google", "anthropic", "openai"]

    def test_validate_provider_model(self):
        assert validate_provider_model("google", "gemini-2.5-flash")
        assert not validate_provider_model("openai", "gemini-2.5-flash")

    def test_unknown_provider_default_model(self):
        assert get_default_model_for_provider("nao-existe") is None

    @pytest.mark.parametrize("name", ["google", "anthropic", "openai"])
    def test_factory_builds_without_network(self, name):
        provider = get_provider(name, model="m")
        assert provider.provider_name == name
        assert provider.default_model == "m"

    def test_factory_rejects_unknown(self):
        with pytest.raises(ValueError):
            get_provider("cohere")

    def test_thinking_budget_passes_through_for_flash(self):
        assert thinking_budget_for("gemini-2.5-flash", 0) == 0
        assert thinking_budget_for("gemini-2.5-flash", 8192) == 8192

    def test_pro_cannot_disable_thinking(self):
        assert thinking_budget_for("gemini-2.5-pro", 0) is None
        assert thinking_budget_for("gemini-2.5-pro", 64) == 128
        assert thinking_budget_for("gemini-2.5-pro", 8192) == 8192

    def test_model_without_thinking_gets_no_budget(self):
        assert thinking_budget_for("gpt-4o-mini", 8192) is None

    def test_unlisted_model_passes_through(self):
        assert thinking_budget_for("gemini-custom", 0) == 0


class _FakeModels:
    def __init__(self):
        self.config = None

    def generate_content(self, model, contents, config):
        self.config = config

        class _Response:
            text = "ok"
            usage_metadata = None

        return _Response()


class _FakeClient:
    def __init__(self):
        self.models = _FakeModels()


class TestGoogleThinkingConfig:

    def _call(self, model, budget):
        provider = GoogleProvider(api_key="k", default_model=model)
        provider._client = _FakeClient()
        provider.generate_text(
            "sys", [PromptPart(text="oi")],
            config=LLMConfig(max_tokens=1000, thinking_budget=budget),
        )
        return provider._client.models.config

    def test_pro_fast_mode_omits_thinking_config(self):
        config = self._call("gemini-2.5-pro", 0)
        assert config.thinking_config is None
        assert config.max_output_tokens == 1000

    def test_flash_fast_mode_sends_zero_budget(self):
        config = self._call("gemini-2.5-flash", 0)
        assert config.thinking_config.thinking_budget == 0

    def test_pro_extended_mode_sends_budget(self):
        config = self._call("gemini-2.5-pro", 8192)
        assert config.thinking_config.thinking_budget == 8192
        assert config.max_output_tokens == 9192
