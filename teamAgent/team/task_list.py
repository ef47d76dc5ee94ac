"""Dependency-aware shared task pool with claim semantics.

``claim_task`` is the only concurrency-control primitive: a per-task claim
token held for the duration of the check-and-set guarantees at most one
successful claimant per task, whether callers are coroutines or threads.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List, Optional, Set

from .events import (
    TASK_ADDED,
    TASK_CLAIMED,
    TASK_COMPLETED,
    TASK_FAILED,
    TASKS_UNBLOCKED,
    EventEmitter,
)
from .models import TaskOutput, TaskStatus, TeamTask, TeamTaskInput, utc_now

LOGGER = logging.getLogger(__name__)


class SharedTaskList(EventEmitter):
    """Task pool shared by one team.

    Events:
        task-added, task-claimed, task-completed, task-failed: task snapshot
        tasks-unblocked: list of task ids that became ready
    """

    def __init__(self) -> None:
        super().__init__()
        self._tasks: Dict[str, TeamTask] = {}
        self._claiming: Set[str] = set()
        self._claim_guard = threading.Lock()

    def add_task(self, task_input: TeamTaskInput) -> TeamTask:
        """Create a pending task.

        Dependencies may reference tasks added later; call
        ``has_circular_dependency`` once the list is loaded.

        Raises:
            ValueError: ``task_input.task_id`` is already in use
        """
        task_id = task_input.task_id or str(uuid.uuid4())
        if task_id in self._tasks:
            raise ValueError(f"Duplicate task id: {task_id}")

        task = TeamTask(
            id=task_id,
            title=task_input.title,
            description=task_input.description,
            dependencies=list(dict.fromkeys(task_input.dependencies)),
            required_skills=list(task_input.required_skills),
            role=task_input.role,
            specialization=task_input.specialization,
        )
        self._tasks[task.id] = task
        LOGGER.debug(f"Task added: {task.id} '{task.title}' deps={task.dependencies}")
        self._emit(TASK_ADDED, task.snapshot())
        return task.snapshot()

    def claim_task(self, task_id: str, agent_id: str) -> bool:
        """Try to take ownership of a pending, unblocked task.

        Returns False without side effects when the task is missing, not
        pending, being claimed concurrently, or still blocked.
        """
        task = self._tasks.get(task_id)
        if task is None or task.status != TaskStatus.PENDING:
            return False

        with self._claim_guard:
            if task_id in self._claiming:
                return False
            self._claiming.add(task_id)

        try:
            if task.status != TaskStatus.PENDING or not self._dependencies_met(task):
                return False
            task.status = TaskStatus.IN_PROGRESS
            task.claimed_by = agent_id
            task.claimed_at = utc_now()
            claimed = task.snapshot()
        finally:
            with self._claim_guard:
                self._claiming.discard(task_id)

        LOGGER.info(f"Task claimed: '{task.title}' by {agent_id}")
        self._emit(TASK_CLAIMED, claimed)
        return True

    def complete_task(self, task_id: str, output: str) -> Optional[TeamTask]:
        task = self._tasks.get(task_id)
        if task is None:
            LOGGER.warning(f"complete_task: unknown task {task_id}")
            return None

        task.status = TaskStatus.COMPLETED
        task.output = output
        task.error = None
        task.completed_at = utc_now()
        LOGGER.info(f"Task completed: '{task.title}'")
        self._emit(TASK_COMPLETED, task.snapshot())

        unblocked = [
            other.id
            for other in self._tasks.values()
            if other.status == TaskStatus.PENDING
            and task_id in other.dependencies
            and self._dependencies_met(other)
        ]
        if unblocked:
            LOGGER.debug(f"Tasks unblocked by '{task.title}': {unblocked}")
            self._emit(TASKS_UNBLOCKED, unblocked)
        return task.snapshot()

    def fail_task(self, task_id: str, error: str) -> Optional[TeamTask]:
        task = self._tasks.get(task_id)
        if task is None:
            LOGGER.warning(f"fail_task: unknown task {task_id}")
            return None

        task.status = TaskStatus.FAILED
        task.error = error
        task.completed_at = utc_now()
        LOGGER.warning(f"Task failed: '{task.title}': {error}")
        self._emit(TASK_FAILED, task.snapshot())
        return task.snapshot()

    def get_task(self, task_id: str) -> Optional[TeamTask]:
        task = self._tasks.get(task_id)
        return task.snapshot() if task else None

    def get_all_tasks(self) -> List[TeamTask]:
        return [task.snapshot() for task in self._tasks.values()]

    def get_tasks_by_status(self, status: TaskStatus) -> List[TeamTask]:
        return [task.snapshot() for task in self._tasks.values() if task.status == status]

    def get_ready_tasks(self) -> List[TeamTask]:
        """Pending tasks whose dependencies are all completed."""

        return [
            task.snapshot()
            for task in self._tasks.values()
            if task.status == TaskStatus.PENDING and self._dependencies_met(task)
        ]

    def get_dependency_outputs(self, task_id: str) -> List[TaskOutput]:
        """Outputs of completed dependencies, in dependency order."""

        task = self._tasks.get(task_id)
        if task is None:
            return []
        outputs: List[TaskOutput] = []
        for dep_id in task.dependencies:
            dep = self._tasks.get(dep_id)
            if dep is not None and dep.status == TaskStatus.COMPLETED and dep.output:
                outputs.append(TaskOutput(task_title=dep.title, content=dep.output))
        return outputs

    def has_circular_dependency(self) -> bool:
        visited: Set[str] = set()
        visiting: Set[str] = set()

        def visit(task_id: str) -> bool:
            if task_id in visiting:
                return True
            if task_id in visited:
                return False
            visiting.add(task_id)
            task = self._tasks.get(task_id)
            if task is not None:
                for dep_id in task.dependencies:
                    if visit(dep_id):
                        return True
            visiting.discard(task_id)
            visited.add(task_id)
            return False

        return any(visit(task_id) for task_id in list(self._tasks))

    def is_complete(self) -> bool:
        return all(task.status.is_terminal for task in self._tasks.values())

    def clear(self) -> None:
        self._tasks.clear()
        with self._claim_guard:
            self._claiming.clear()

    def __len__(self) -> int:
        return len(self._tasks)

    def _dependencies_met(self, task: TeamTask) -> bool:
        for dep_id in task.dependencies:
            dep = self._tasks.get(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                return False
        return True
