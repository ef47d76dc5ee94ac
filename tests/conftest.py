"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import asyncio
import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from langchain_core.messages import AIMessage, AIMessageChunk, BaseMessage, SystemMessage

from teamAgent.agents.schema import AgentProfile
from teamAgent.config.settings import Settings
from teamAgent.models.resolver import ModelResolver

TITLE_RE = re.compile(r"\*\*Title:\*\* (.+)")


def tool_call_message(name: str, args: Optional[dict] = None, content: str = "", call_id: str = "call_1") -> AIMessage:
    """An assistant message requesting one tool call."""
    return AIMessage(content=content, tool_calls=[{"name": name, "args": args or {}, "id": call_id}])


def system_text(messages: List[BaseMessage]) -> str:
    for message in messages:
        if isinstance(message, SystemMessage):
            return str(message.content)
    return ""


def task_title(messages: List[BaseMessage]) -> Optional[str]:
    """Title of the task an agent prompt was built for."""
    match = TITLE_RE.search(system_text(messages))
    return match.group(1).strip() if match else None


class FakeChatModel:
    """Scripted stand-in for a LangChain chat model.

    Responses are consumed in order; once exhausted, ``responder(messages)``
    decides (or a plain "Done." is returned). A response may be a string, an
    ``AIMessage`` or an exception instance to raise.
    """

    def __init__(self, responses: Optional[List[Any]] = None, responder: Optional[Callable[[List[BaseMessage]], Any]] = None):
        self.responses = list(responses or [])
        self.responder = responder
        self.calls: List[List[BaseMessage]] = []
        self.configs: List[Any] = []
        self.bound_tools: Optional[list] = None
        self.delay = 0.0

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self

    def _next(self, messages: List[BaseMessage]) -> AIMessage:
        if self.responses:
            item = self.responses.pop(0)
        elif self.responder is not None:
            item = self.responder(messages)
        else:
            item = "Done."
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return AIMessage(content=item)
        return item

    async def ainvoke(self, messages, **kwargs) -> AIMessage:
        self.calls.append(list(messages))
        await asyncio.sleep(self.delay)
        return self._next(messages)

    async def astream(self, messages, **kwargs):
        self.calls.append(list(messages))
        message = self._next(messages)
        for piece in re.findall(r"\S+\s*", str(message.content)):
            await asyncio.sleep(0)
            yield AIMessageChunk(content=piece)


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings with a configured provider and no .env influence."""
    for key in list(os.environ):
        if key.startswith(("MODEL_", "TEAM_", "OPENAI_")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MODEL_PROVIDER", "openai")
    monkeypatch.setenv("MODEL_API_KEY", "test-key")
    return Settings(_env_file=None)


@pytest.fixture
def fake_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def resolver(settings, fake_model) -> ModelResolver:
    def factory(config):
        fake_model.configs.append(config)
        return fake_model

    return ModelResolver(settings, factory=factory)


@pytest.fixture
def researcher() -> AgentProfile:
    return AgentProfile(
        id="researcher",
        name="Researcher",
        role="Research Analyst",
        instructions="You gather facts and cite sources.",
        tags=["research", "analysis"],
    )


@pytest.fixture
def roster() -> List[AgentProfile]:
    return [
        AgentProfile(id="lead", name="Team Lead", role="Project Coordinator", tags=["planning", "coordination"]),
        AgentProfile(id="researcher", name="Researcher", role="Research Analyst", tags=["research", "analysis"]),
        AgentProfile(id="writer", name="Writer", role="Content Creator", tags=["writing", "editing"]),
        AgentProfile(id="developer", name="Developer", role="Software Developer", tags=["coding", "testing"]),
    ]
