"""Agent roster loading from YAML.

Roster format::

    agents:
      researcher:
        name: Researcher
        role: Research Analyst
        instructions: ...
        tags: [research, analysis]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .schema import AgentProfile

LOGGER = logging.getLogger(__name__)

DEFAULT_ROSTER_PATH = Path(__file__).resolve().parent.parent / "config" / "agents.yaml"


def parse_agent_profile(agent_id: str, config: Dict[str, Any]) -> AgentProfile:
    """Build an ``AgentProfile`` from one roster entry.

    Raises:
        KeyError: when ``name`` is missing
    """
    return AgentProfile(
        id=agent_id,
        name=config["name"],
        role=config.get("role", ""),
        instructions=(config.get("instructions") or "").strip(),
        tags=[str(tag) for tag in config.get("tags") or []],
        knowledge_item_ids=[str(item) for item in config.get("knowledge_item_ids") or []],
        temperature=config.get("temperature"),
    )


def load_agent_roster(path: Union[str, Path, None] = None) -> List[AgentProfile]:
    """Load every enabled agent from a roster file.

    Entries that fail to parse are skipped with a warning.
    """
    roster_path = Path(path) if path else DEFAULT_ROSTER_PATH
    if not roster_path.exists():
        LOGGER.warning(f"Agent roster not found: {roster_path}")
        return []

    with roster_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    profiles: List[AgentProfile] = []
    for agent_id, config in (data.get("agents") or {}).items():
        if not isinstance(config, dict) or not config.get("enabled", True):
            continue
        try:
            profiles.append(parse_agent_profile(agent_id, config))
        except KeyError as e:
            LOGGER.warning(f"Skipping agent '{agent_id}': missing field {e}")

    LOGGER.info(f"Loaded {len(profiles)} agent(s) from {roster_path}")
    return profiles
