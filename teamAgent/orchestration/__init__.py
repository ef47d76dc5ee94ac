"""End-to-end team orchestration."""

from .engine import OrchestrationProgress, OrchestrationResult, TaskExecution, TeamOrchestrator

__all__ = ["OrchestrationProgress", "OrchestrationResult", "TaskExecution", "TeamOrchestrator"]
