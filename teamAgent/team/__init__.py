"""Team primitives: shared task list, mailbox and coordinator."""

from .coordinator import TeamCoordinator, score_agent
from .detection import TeamDetectionResult, detect_team_from_prompt
from .events import EventEmitter
from .mailbox import TeamMailbox
from .models import (
    MessageKind,
    TaskOutput,
    TaskStatus,
    TeamConfig,
    TeamMessage,
    TeamState,
    TeamStatus,
    TeamTask,
    TeamTaskInput,
)
from .task_list import SharedTaskList

__all__ = [
    "EventEmitter",
    "MessageKind",
    "SharedTaskList",
    "TaskOutput",
    "TaskStatus",
    "TeamConfig",
    "TeamCoordinator",
    "TeamDetectionResult",
    "TeamMailbox",
    "TeamMessage",
    "TeamState",
    "TeamStatus",
    "TeamTask",
    "TeamTaskInput",
    "detect_team_from_prompt",
    "score_agent",
]
