"""Agent execution runtime."""

from .agent_runner import (
    CANCELLED_ERROR,
    DEFAULT_MAX_TURNS,
    AgentRunner,
    AgentRunnerResult,
    TaskBrief,
    ToolCallRecord,
    TurnProgress,
)
from .context import AgentContextProviders
from .sinks import SinkDispatcher

__all__ = [
    "CANCELLED_ERROR",
    "DEFAULT_MAX_TURNS",
    "AgentContextProviders",
    "AgentRunner",
    "AgentRunnerResult",
    "SinkDispatcher",
    "TaskBrief",
    "ToolCallRecord",
    "TurnProgress",
]
