"""Tests for model routing and scope overrides."""

import pytest

from teamAgent.agents.schema import AgentScope
from teamAgent.models import ModelRegistry, ModelResolver, ModelSpec, build_default_registry
from teamAgent.models.resolver import PROVIDER_BASE_URLS, ModelConfig, build_chat_model
from teamAgent.utils.error_handler import ConfigurationError


def test_registry_prefers_hint_and_falls_back(settings):
    registry = build_default_registry(settings.inference)

    assert registry.prefer("fast").model_id == "gpt-4o-mini"
    assert registry.prefer("powerful").model_id == "gpt-4.1"
    assert registry.prefer("unknown").model_id == "gpt-4o"
    assert registry.prefer(None).hint == "balanced"


def test_registry_get_unknown_raises():
    registry = ModelRegistry([ModelSpec(hint="balanced", model_id="m", speed="normal", quality="med")])
    with pytest.raises(KeyError):
        registry.get("fast")


def test_base_config_from_settings(settings):
    config = ModelResolver(settings).base_config("fast")

    assert config.provider == "openai"
    assert config.model == "gpt-4o-mini"
    assert config.api_key == "test-key"
    assert config.temperature == 0.2


def test_missing_provider_raises(settings):
    settings.inference.provider = None
    with pytest.raises(ConfigurationError, match="No AI provider configured"):
        ModelResolver(settings).base_config()


def test_missing_api_key_raises(settings):
    settings.inference.api_key = None
    with pytest.raises(ConfigurationError):
        ModelResolver(settings).base_config()


def test_keyless_local_provider(settings):
    settings.inference.provider = "ollama"
    settings.inference.api_key = None

    config = ModelResolver(settings).base_config()

    assert config.base_url == PROVIDER_BASE_URLS["ollama"]


def test_scope_overrides(settings):
    resolver = ModelResolver(settings)
    scope = AgentScope(provider="deepseek", model="deepseek-chat", temperature=0.9, max_tokens=256)

    config = resolver.resolve(scope, "balanced", temperature=0.5)

    assert config.provider == "deepseek"
    assert config.model == "deepseek-chat"
    assert config.temperature == 0.9
    assert config.max_tokens == 256
    assert config.base_url == PROVIDER_BASE_URLS["deepseek"]


def test_agent_temperature_is_default_when_scope_silent(settings):
    config = ModelResolver(settings).resolve(AgentScope(model="gpt-4o-mini"), temperature=0.7)

    assert config.temperature == 0.7
    assert config.model == "gpt-4o-mini"
    assert config.provider == "openai"


def test_get_model_uses_factory(settings, fake_model):
    built = []
    resolver = ModelResolver(settings, factory=lambda config: built.append(config) or fake_model)

    model = resolver.get_model(hint="powerful", phase="synthesis")

    assert model is fake_model
    assert built[0].model == "gpt-4.1"


def test_build_chat_model_returns_openai_client():
    model = build_chat_model(
        ModelConfig(provider="openai", model="gpt-4o", api_key="sk-test", base_url=None, temperature=0.1, max_tokens=100)
    )

    assert model.model_name == "gpt-4o"
    assert model.temperature == 0.1
