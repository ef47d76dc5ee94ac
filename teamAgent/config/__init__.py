"""Configuration package."""

from .settings import (
    GovernanceSettings,
    InferenceSettings,
    ObservabilitySettings,
    Settings,
    get_settings,
)

__all__ = [
    "GovernanceSettings",
    "InferenceSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
