"""Agent persona schema.

An ``AgentProfile`` is a configured persona: instructions plus the tags and
knowledge references used for task matching and context building. An
``AgentScope`` carries per-run overrides that constrain one execution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(frozen=True, slots=True)
class AgentProfile:
    """A configured persona that can be recruited into a team.

    Attributes:
        id: Unique agent identifier
        name: Display name
        role: Short role label (e.g. "Research Analyst")
        instructions: Base system instructions
        tags: Skill tags used for exact-match scoring
        knowledge_item_ids: Knowledge references resolved by context providers
        temperature: Preferred sampling temperature, if any
    """

    id: str
    name: str
    role: str = ""
    instructions: str = ""
    tags: List[str] = field(default_factory=list)
    knowledge_item_ids: List[str] = field(default_factory=list)
    temperature: Optional[float] = None


class AgentScope(BaseModel):
    """Per-run overrides: model routing, tool visibility and turn budget."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    model: Optional[str] = None
    provider: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    max_turns: Optional[int] = None
    allowed_tools: List[str] = Field(default_factory=list)
    denied_tools: List[str] = Field(default_factory=list)
