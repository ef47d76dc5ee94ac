"""Cost-hint model routing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from teamAgent.config.settings import InferenceSettings

MODEL_HINTS = ("fast", "balanced", "powerful")
DEFAULT_HINT = "balanced"


@dataclass(frozen=True, slots=True)
class ModelSpec:
    """Normalized description of a model slot."""

    hint: str  # fast | balanced | powerful
    model_id: str
    speed: str  # fast | normal | slow
    quality: str  # low | med | high


class ModelRegistry:
    """Maps planner cost hints to model specs."""

    def __init__(self, specs: Optional[Iterable[ModelSpec]] = None) -> None:
        self._specs: Dict[str, ModelSpec] = {}
        if specs:
            for spec in specs:
                self.register(spec)

    def register(self, spec: ModelSpec) -> None:
        self._specs[spec.hint] = spec

    def get(self, hint: str) -> ModelSpec:
        if hint not in self._specs:
            raise KeyError(f"Unknown model hint: {hint}")
        return self._specs[hint]

    def prefer(self, hint: Optional[str] = None) -> ModelSpec:
        """Return the spec for ``hint``, falling back to the balanced slot."""

        if hint and hint in self._specs:
            return self._specs[hint]
        return self.get(DEFAULT_HINT)


def build_default_registry(settings: InferenceSettings) -> ModelRegistry:
    """Instantiate the registry from inference settings."""

    return ModelRegistry(
        [
            ModelSpec(hint="fast", model_id=settings.fast_model, speed="fast", quality="low"),
            ModelSpec(hint="balanced", model_id=settings.balanced_model, speed="normal", quality="med"),
            ModelSpec(hint="powerful", model_id=settings.powerful_model, speed="slow", quality="high"),
        ]
    )
