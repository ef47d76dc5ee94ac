"""Model configuration resolution and chat-model construction.

``ModelResolver`` turns settings plus an optional ``AgentScope`` into a
``ModelConfig`` and builds an OpenAI-compatible LangChain chat model from it.
The model factory is injectable so tests can supply scripted models.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI

from teamAgent.agents.schema import AgentScope
from teamAgent.config.settings import Settings
from teamAgent.utils.error_handler import ConfigurationError
from teamAgent.utils.logging_utils import log_model_selection

from .registry import ModelRegistry, build_default_registry

LOGGER = logging.getLogger(__name__)

# OpenAI-compatible endpoints for providers that are not OpenAI itself.
PROVIDER_BASE_URLS: Dict[str, str] = {
    "deepseek": "https://api.deepseek.com",
    "mistral": "https://api.mistral.ai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "groq": "https://api.groq.com/openai/v1",
    "ollama": "http://localhost:11434/v1",
}
KEYLESS_PROVIDERS = frozenset({"ollama"})


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Fully resolved inference configuration for one call site."""

    provider: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.2
    max_tokens: Optional[int] = None
    timeout: Optional[float] = None


ModelFactory = Callable[[ModelConfig], BaseChatModel]


def build_chat_model(config: ModelConfig) -> BaseChatModel:
    """Construct a ChatOpenAI client for an OpenAI-compatible endpoint."""

    kwargs: Dict[str, Any] = {
        "model": config.model,
        "api_key": config.api_key or "not-needed",
        "temperature": config.temperature,
    }
    if config.base_url:
        kwargs["base_url"] = config.base_url
    if config.max_tokens:
        kwargs["max_tokens"] = config.max_tokens
    if config.timeout:
        kwargs["timeout"] = config.timeout
    return ChatOpenAI(**kwargs)


class ModelResolver:
    """Resolves scope overrides against the configured base provider."""

    def __init__(
        self,
        settings: Settings,
        registry: Optional[ModelRegistry] = None,
        factory: Optional[ModelFactory] = None,
    ) -> None:
        self._settings = settings
        self.registry = registry or build_default_registry(settings.inference)
        self._factory = factory or build_chat_model

    def base_config(self, hint: Optional[str] = None) -> ModelConfig:
        """Return the base configuration for a cost hint.

        Raises:
            ConfigurationError: no provider configured or its API key is missing
        """
        inference = self._settings.inference
        provider = (inference.provider or "").strip().lower()
        if not provider:
            raise ConfigurationError(
                "No AI provider configured",
                "No AI provider configured. Set MODEL_PROVIDER and MODEL_API_KEY in .env.",
            )
        if not inference.api_key and provider not in KEYLESS_PROVIDERS:
            raise ConfigurationError(
                f"Missing API key for provider '{provider}'",
                "No API key configured. Set MODEL_API_KEY (or OPENAI_API_KEY) in .env.",
            )

        spec = self.registry.prefer(hint)
        return ModelConfig(
            provider=provider,
            model=spec.model_id,
            api_key=inference.api_key,
            base_url=inference.base_url or PROVIDER_BASE_URLS.get(provider),
            temperature=inference.temperature,
            max_tokens=inference.max_tokens,
            timeout=inference.timeout,
        )

    def resolve(
        self,
        scope: Optional[AgentScope] = None,
        hint: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ModelConfig:
        """Apply scope overrides to the base configuration.

        ``temperature`` is a caller default (e.g. the agent's own preference)
        that a scope temperature still overrides.
        """
        config = self.base_config(hint)
        if temperature is not None:
            config = replace(config, temperature=temperature)
        if scope is None:
            return config

        if scope.provider and scope.provider.lower() != config.provider:
            provider = scope.provider.lower()
            config = replace(config, provider=provider, base_url=PROVIDER_BASE_URLS.get(provider))
        if scope.model:
            config = replace(config, model=scope.model)
        if scope.temperature is not None:
            config = replace(config, temperature=scope.temperature)
        if scope.max_tokens:
            config = replace(config, max_tokens=scope.max_tokens)
        return config

    def build(self, config: ModelConfig, phase: str = "task") -> BaseChatModel:
        log_model_selection(LOGGER, phase, f"{config.provider}/{config.model}")
        return self._factory(config)

    def get_model(
        self,
        scope: Optional[AgentScope] = None,
        hint: Optional[str] = None,
        phase: str = "task",
        temperature: Optional[float] = None,
    ) -> BaseChatModel:
        """Resolve and build in one step."""

        return self.build(self.resolve(scope, hint, temperature), phase=phase)
