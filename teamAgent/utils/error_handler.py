"""Error taxonomy for the orchestration core."""

from __future__ import annotations

import logging
from typing import Optional

LOGGER = logging.getLogger(__name__)


class TeamAgentError(Exception):
    """Base exception for teamAgent errors."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class ConfigurationError(TeamAgentError):
    """No usable inference provider or credentials. Fatal, never retried."""
    pass


class PlanValidationError(TeamAgentError):
    """A generated plan failed structural validation."""
    pass


class UnknownDependencyError(PlanValidationError):
    """A plan node depends on a temp id that is not in the plan."""

    def __init__(self, task_id: str, dependency_id: str):
        super().__init__(f'Task "{task_id}" depends on unknown task "{dependency_id}"')
        self.task_id = task_id
        self.dependency_id = dependency_id


class CircularDependencyError(PlanValidationError):
    """The plan's dependency edges contain a cycle."""

    def __init__(self, task_id: str):
        super().__init__(f'Circular dependency detected involving task "{task_id}"')
        self.task_id = task_id


class TeamLifecycleError(TeamAgentError):
    """Illegal team lifecycle call (e.g. second active team, removing the lead)."""
    pass


class ModelInvocationError(TeamAgentError):
    """Error during model invocation."""
    pass


class ToolExecutionError(TeamAgentError):
    """Error during tool execution."""
    pass


def handle_model_error(error: Exception) -> str:
    """Convert model invocation errors to user-friendly messages.

    Args:
        error: Exception raised during model invocation

    Returns:
        User-friendly error message
    """
    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return "Rate limit reached, please retry shortly"

    if "timeout" in error_str or "timed out" in error_str:
        return "The model did not respond in time"

    if "context_length" in error_str or "maximum context" in error_str:
        return "The conversation exceeds the model's context window"

    if "invalid_api_key" in error_str or "authentication" in error_str or "401" in error_str:
        return "The API key was rejected by the provider"

    if "quota" in error_str or "insufficient" in error_str:
        return "The provider quota is exhausted"

    return f"Model service unavailable: {error}"
