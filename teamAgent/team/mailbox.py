"""In-process messaging between team members."""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, List

from .events import MESSAGE_SENT, EventEmitter
from .models import MessageKind, TeamMessage

LOGGER = logging.getLogger(__name__)


class TeamMailbox(EventEmitter):
    """Append-only message store. Only the ``read`` flag ever changes.

    Events:
        message-sent: the delivered ``TeamMessage``, once per recipient
    """

    def __init__(self) -> None:
        super().__init__()
        self._messages: List[TeamMessage] = []

    def send_message(self, from_id: str, to_id: str, content: str) -> TeamMessage:
        return self._deliver(from_id, to_id, content, MessageKind.DIRECT)

    def broadcast(self, from_id: str, recipients: Iterable[str], content: str) -> List[TeamMessage]:
        """Fan out one message per recipient, skipping the sender."""

        delivered: List[TeamMessage] = []
        for recipient in dict.fromkeys(recipients):
            if recipient == from_id:
                continue
            delivered.append(self._deliver(from_id, recipient, content, MessageKind.BROADCAST))
        return delivered

    def get_messages(self, agent_id: str) -> List[TeamMessage]:
        return [m for m in self._messages if m.to_id == agent_id]

    def get_unread_messages(self, agent_id: str) -> List[TeamMessage]:
        return [m for m in self._messages if m.to_id == agent_id and not m.read]

    def mark_read(self, agent_id: str, message_id: str) -> bool:
        """Mark one of ``agent_id``'s messages as read. Idempotent."""

        for message in self._messages:
            if message.id == message_id and message.to_id == agent_id:
                message.read = True
                return True
        return False

    def get_conversation(self, agent_a: str, agent_b: str) -> List[TeamMessage]:
        """Messages between two agents in either direction, oldest first."""

        thread = [
            m for m in self._messages
            if (m.from_id == agent_a and m.to_id == agent_b) or (m.from_id == agent_b and m.to_id == agent_a)
        ]
        return sorted(thread, key=lambda m: m.timestamp)

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)

    def _deliver(self, from_id: str, to_id: str, content: str, kind: MessageKind) -> TeamMessage:
        message = TeamMessage(id=str(uuid.uuid4()), from_id=from_id, to_id=to_id, content=content, kind=kind)
        self._messages.append(message)
        LOGGER.debug(f"Message {kind.value} {from_id} -> {to_id}: {content[:80]}")
        self._emit(MESSAGE_SENT, message)
        return message
