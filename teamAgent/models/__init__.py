"""Model routing and chat-model construction."""

from .registry import ModelRegistry, ModelSpec, build_default_registry
from .resolver import ModelConfig, ModelResolver

__all__ = ["ModelConfig", "ModelRegistry", "ModelResolver", "ModelSpec", "build_default_registry"]
