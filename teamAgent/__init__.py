"""teamAgent - decompose a request into a task graph and run it with an agent team."""

from teamAgent.orchestration import OrchestrationResult, TeamOrchestrator

__all__ = ["OrchestrationResult", "TeamOrchestrator"]
