"""Environment-bound configuration objects.

Settings are loaded from environment variables and the project's .env file.
Each field accepts a few alias names so existing provider variables
(e.g. OPENAI_API_KEY) work without renaming.

Example:
    from teamAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    max_turns = settings.governance.max_turns
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class InferenceSettings(BaseSettings):
    """Provider credentials and the model ids behind each cost hint.

    The three model slots map the planner's cost hints onto concrete models:
    - fast: cheap, single-shot work (gathering, formatting)
    - balanced: default for most tasks
    - powerful: analysis, synthesis and long reasoning
    """

    provider: Optional[str] = Field(
        default="openai",
        validation_alias=AliasChoices("MODEL_PROVIDER", "TEAM_PROVIDER"),
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_API_KEY", "OPENAI_API_KEY"),
    )
    base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_BASE_URL", "OPENAI_BASE_URL"),
    )
    fast_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("MODEL_FAST", "MODEL_FAST_ID"),
    )
    balanced_model: str = Field(
        default="gpt-4o",
        validation_alias=AliasChoices("MODEL_BALANCED", "MODEL_BALANCED_ID", "MODEL_DEFAULT"),
    )
    powerful_model: str = Field(
        default="gpt-4.1",
        validation_alias=AliasChoices("MODEL_POWERFUL", "MODEL_POWERFUL_ID"),
    )
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, validation_alias="MODEL_TEMPERATURE")
    max_tokens: Optional[int] = Field(default=None, ge=1, validation_alias="MODEL_MAX_TOKENS")
    timeout: float = Field(default=120.0, gt=0, validation_alias="MODEL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class GovernanceSettings(BaseSettings):
    """Runtime limits for agent runs and the scheduler.

    - max_turns: default turn budget of one agent run (1-100, default: 15)
    - max_concurrent_agents: in-flight runs for parallel strategies (default: 4)
    - broadcast_summary_chars: length of completion summaries sent to teammates
    """

    max_turns: int = Field(default=15, ge=1, le=100, validation_alias="TEAM_MAX_TURNS")
    max_concurrent_agents: int = Field(default=4, ge=1, le=32, validation_alias="TEAM_MAX_CONCURRENT_AGENTS")
    broadcast_summary_chars: int = Field(default=500, ge=50, validation_alias="TEAM_BROADCAST_SUMMARY_CHARS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_dir: Path = Field(default=Path("logs"), validation_alias="TEAM_LOG_DIR")
    log_level: str = Field(default="WARNING", validation_alias="TEAM_LOG_LEVEL")
    log_prompt_max_length: int = Field(default=1000, ge=100, validation_alias="LOG_PROMPT_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Top-level application settings container."""

    inference: InferenceSettings = Field(default_factory=InferenceSettings)
    governance: GovernanceSettings = Field(default_factory=GovernanceSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
