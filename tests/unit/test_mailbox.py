"""Tests for TeamMailbox messaging."""

from teamAgent.team import MessageKind, TeamMailbox
from teamAgent.team.events import MESSAGE_SENT


def test_send_message_appends_direct_message():
    mailbox = TeamMailbox()
    sent = []
    mailbox.on(MESSAGE_SENT, sent.append)

    message = mailbox.send_message("lead", "writer", "Draft the intro")

    assert message.kind == MessageKind.DIRECT
    assert message.read is False
    assert mailbox.get_messages("writer") == [message]
    assert sent == [message]


def test_broadcast_skips_sender_and_dedupes():
    mailbox = TeamMailbox()
    sent = []
    mailbox.on(MESSAGE_SENT, sent.append)

    delivered = mailbox.broadcast("lead", ["lead", "writer", "researcher", "writer"], "Kickoff")

    assert [m.to_id for m in delivered] == ["writer", "researcher"]
    assert all(m.kind == MessageKind.BROADCAST for m in delivered)
    assert len(sent) == 2
    assert mailbox.get_messages("lead") == []


def test_broadcast_with_only_sender_delivers_nothing():
    mailbox = TeamMailbox()
    assert mailbox.broadcast("lead", ["lead"], "hello") == []
    assert len(mailbox) == 0


def test_unread_and_mark_read_is_idempotent():
    mailbox = TeamMailbox()
    first = mailbox.send_message("lead", "writer", "one")
    mailbox.send_message("lead", "writer", "two")

    assert mailbox.mark_read("writer", first.id) is True
    assert mailbox.mark_read("writer", first.id) is True
    assert [m.content for m in mailbox.get_unread_messages("writer")] == ["two"]
    assert len(mailbox.get_messages("writer")) == 2


def test_mark_read_requires_recipient():
    mailbox = TeamMailbox()
    message = mailbox.send_message("lead", "writer", "one")

    assert mailbox.mark_read("researcher", message.id) is False
    assert mailbox.mark_read("writer", "unknown-id") is False
    assert mailbox.get_unread_messages("writer")[0].read is False


def test_get_conversation_covers_both_directions_in_order():
    mailbox = TeamMailbox()
    mailbox.send_message("a", "b", "1")
    mailbox.send_message("b", "a", "2")
    mailbox.send_message("a", "c", "not in thread")
    mailbox.send_message("a", "b", "3")

    thread = mailbox.get_conversation("b", "a")

    assert [m.content for m in thread] == ["1", "2", "3"]
    assert all(thread[i].timestamp <= thread[i + 1].timestamp for i in range(len(thread) - 1))


def test_clear_drops_messages():
    mailbox = TeamMailbox()
    mailbox.send_message("a", "b", "1")
    mailbox.clear()

    assert len(mailbox) == 0
    assert mailbox.get_messages("b") == []
