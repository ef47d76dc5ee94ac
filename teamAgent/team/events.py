"""Minimal synchronous observer used by the task list and mailbox."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List

LOGGER = logging.getLogger(__name__)

Listener = Callable[[Any], None]

# Task list events
TASK_ADDED = "task-added"
TASK_CLAIMED = "task-claimed"
TASK_COMPLETED = "task-completed"
TASK_FAILED = "task-failed"
TASKS_UNBLOCKED = "tasks-unblocked"

# Mailbox events
MESSAGE_SENT = "message-sent"


class EventEmitter:
    """Named-event subscription.

    Listeners run synchronously in registration order; a listener exception
    propagates to the emitter's caller.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def _emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            listener(payload)
