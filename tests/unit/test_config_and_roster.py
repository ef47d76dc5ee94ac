"""Tests for settings, roster loading, prompt templates and logging setup."""

import logging

import pytest

from teamAgent.agents import load_agent_roster, parse_agent_profile
from teamAgent.config.settings import GovernanceSettings, InferenceSettings, Settings
from teamAgent.utils.logging_utils import ROOT_LOGGER_NAME, setup_logging
from teamAgent.utils.prompt_builder import PromptBuilder


class TestSettings:
    def test_defaults(self, settings):
        assert settings.governance.max_turns == 15
        assert settings.governance.max_concurrent_agents == 4
        assert settings.inference.balanced_model == "gpt-4o"
        assert settings.observability.log_level == "WARNING"

    def test_alias_names(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-alias")
        monkeypatch.delenv("MODEL_API_KEY", raising=False)
        monkeypatch.setenv("MODEL_DEFAULT", "my-balanced")

        inference = InferenceSettings(_env_file=None)

        assert inference.api_key == "sk-alias"
        assert inference.balanced_model == "my-balanced"

    def test_governance_from_env(self, monkeypatch):
        monkeypatch.setenv("TEAM_MAX_TURNS", "7")
        monkeypatch.setenv("TEAM_MAX_CONCURRENT_AGENTS", "2")

        governance = GovernanceSettings(_env_file=None)

        assert governance.max_turns == 7
        assert governance.max_concurrent_agents == 2

    def test_governance_bounds(self, monkeypatch):
        monkeypatch.setenv("TEAM_MAX_TURNS", "0")
        with pytest.raises(ValueError):
            GovernanceSettings(_env_file=None)

    def test_settings_groups(self, settings):
        assert isinstance(settings, Settings)
        assert settings.inference.api_key == "test-key"


class TestRoster:
    def test_bundled_roster(self):
        roster = load_agent_roster()

        ids = [agent.id for agent in roster]
        assert ids[0] == "lead"
        assert {"researcher", "writer", "developer"} <= set(ids)
        assert all(agent.instructions for agent in roster)

    def test_custom_roster(self, tmp_path):
        path = tmp_path / "agents.yaml"
        path.write_text(
            "agents:\n"
            "  critic:\n"
            "    name: Critic\n"
            "    role: Reviewer\n"
            "    tags: [review]\n"
            "    temperature: 0.4\n"
            "  retired:\n"
            "    name: Retired\n"
            "    enabled: false\n"
            "  broken:\n"
            "    role: Nameless\n",
            encoding="utf-8",
        )

        roster = load_agent_roster(path)

        assert [agent.id for agent in roster] == ["critic"]
        assert roster[0].tags == ["review"]
        assert roster[0].temperature == 0.4

    def test_missing_roster_file(self, tmp_path):
        assert load_agent_roster(tmp_path / "none.yaml") == []

    def test_parse_profile_requires_name(self):
        with pytest.raises(KeyError):
            parse_agent_profile("x", {"role": "y"})


def test_decomposition_prompt_renders_strategies():
    text = PromptBuilder().decomposition_prompt(
        prompt="Compare databases",
        analysis_json='{"complexity": "moderate"}',
        strategies=["single_agent", "parallel_agents"],
    )

    assert "subTasks" in text
    assert '{"complexity": "moderate"}' in text
    assert "parallel_agents" in text


def test_setup_logging_creates_log_file(tmp_path):
    log_dir = tmp_path / "logs"

    logger = setup_logging(log_dir, console_level="ERROR")
    logging.getLogger(f"{ROOT_LOGGER_NAME}.tests").info("hello from tests")
    for handler in logger.handlers:
        handler.flush()

    files = list(log_dir.glob("*.log"))
    assert len(files) == 1
    assert "hello from tests" in files[0].read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
