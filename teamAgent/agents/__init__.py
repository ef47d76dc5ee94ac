"""Agent personas and per-run scope overrides."""

from .loader import load_agent_roster, parse_agent_profile
from .schema import AgentProfile, AgentScope

__all__ = ["AgentProfile", "AgentScope", "load_agent_roster", "parse_agent_profile"]
