"""Team data model: tasks, messages and team metadata."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Stored task states. A pending task with unmet dependencies is blocked implicitly."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class MessageKind(str, Enum):
    DIRECT = "direct"
    BROADCAST = "broadcast"


class TeamState(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DISBANDED = "disbanded"


@dataclass(frozen=True, slots=True)
class TeamTaskInput:
    """Creation payload for a task, including optional matching hints."""

    title: str
    description: str = ""
    dependencies: List[str] = field(default_factory=list)
    required_skills: List[str] = field(default_factory=list)
    role: Optional[str] = None
    specialization: Optional[str] = None
    task_id: Optional[str] = None  # generated when omitted


@dataclass(slots=True)
class TeamTask:
    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    dependencies: List[str] = field(default_factory=list)
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    output: Optional[str] = None
    error: Optional[str] = None
    required_skills: List[str] = field(default_factory=list)
    role: Optional[str] = None
    specialization: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def snapshot(self) -> "TeamTask":
        """Detached copy safe to hand to callers and listeners."""

        return copy.deepcopy(self)


@dataclass(slots=True)
class TeamMessage:
    id: str
    from_id: str
    to_id: str
    content: str
    kind: MessageKind = MessageKind.DIRECT
    timestamp: datetime = field(default_factory=utc_now)
    read: bool = False


@dataclass(slots=True)
class TeamConfig:
    name: str
    lead_id: str
    member_ids: List[str] = field(default_factory=list)
    goal: str = ""
    status: TeamState = TeamState.ACTIVE
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True, slots=True)
class TeamStatus:
    """Read-only snapshot of a team for progress reporting."""

    name: str
    status: TeamState
    lead_id: str
    member_count: int
    total_tasks: int
    pending_tasks: int
    ready_tasks: int
    in_progress_tasks: int
    completed_tasks: int
    failed_tasks: int
    message_count: int


@dataclass(frozen=True, slots=True)
class TaskOutput:
    """Output of a completed upstream task, injected as context downstream."""

    task_title: str
    content: str
