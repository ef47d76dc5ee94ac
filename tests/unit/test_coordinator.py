"""Tests for TeamCoordinator lifecycle, membership and skill matching."""

import pytest

from teamAgent.agents.schema import AgentProfile
from teamAgent.team import TeamCoordinator, TeamState, TeamTaskInput, score_agent
from teamAgent.team.coordinator import NO_ACTIVE_TEAM
from teamAgent.team.events import TASK_ADDED
from teamAgent.utils.error_handler import TeamLifecycleError


@pytest.fixture
def lead():
    return AgentProfile(id="lead", name="Team Lead", role="Project Coordinator", tags=["planning"])


@pytest.fixture
def writer():
    return AgentProfile(
        id="writer",
        name="Writer",
        role="Content Creator",
        tags=["writing"],
        instructions="You write clear prose.",
    )


@pytest.fixture
def coder():
    return AgentProfile(id="coder", name="Coder", role="Software Developer", tags=["coding"])


class TestLifecycle:
    def test_create_team_registers_agents(self, lead, writer, coder):
        coordinator = TeamCoordinator()
        team = coordinator.create_team("Docs", lead, [writer, coder], goal="Write docs")

        assert team.lead_id == "lead"
        assert team.member_ids == ["writer", "coder"]
        assert coordinator.is_active
        assert coordinator.task_list is not None
        assert coordinator.mailbox is not None
        assert coordinator.get_agent("lead") is lead

    def test_second_create_fails_while_active(self, lead, writer):
        coordinator = TeamCoordinator()
        coordinator.create_team("One", lead, [writer])

        with pytest.raises(TeamLifecycleError):
            coordinator.create_team("Two", lead, [writer])

    def test_create_allowed_after_completion(self, lead, writer):
        coordinator = TeamCoordinator()
        coordinator.create_team("One", lead, [writer])
        coordinator.complete_team()

        team = coordinator.create_team("Two", lead, [writer])
        assert team.name == "Two"

    def test_cleanup_is_idempotent_without_team(self):
        coordinator = TeamCoordinator()
        coordinator.cleanup()
        coordinator.cleanup()

        assert coordinator.is_active is False
        assert coordinator.get_team() is None

    def test_cleanup_detaches_listeners_and_clears_state(self, lead, writer):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer])
        task_list = coordinator.task_list
        seen = []
        task_list.on(TASK_ADDED, seen.append)

        coordinator.cleanup()
        task_list.add_task(TeamTaskInput(title="After cleanup"))

        assert seen == []
        assert coordinator.task_list is None
        assert coordinator.mailbox is None
        assert coordinator.get_agent("writer") is None
        coordinator.create_team("Again", lead, [writer])
        assert coordinator.is_active

    def test_operations_require_active_team(self):
        coordinator = TeamCoordinator()
        with pytest.raises(TeamLifecycleError, match="No active team"):
            coordinator.add_tasks([TeamTaskInput(title="x")])
        with pytest.raises(TeamLifecycleError):
            coordinator.broadcast("lead", "hello")
        assert NO_ACTIVE_TEAM.startswith("No active team")

    def test_team_copy_is_detached(self, lead, writer):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer])
        snapshot = coordinator.get_team()
        snapshot.member_ids.append("intruder")

        assert coordinator.get_team().member_ids == ["writer"]


class TestMembership:
    def test_add_and_remove_teammate(self, lead, writer, coder):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer])

        coordinator.add_teammate(coder)
        assert [a.id for a in coordinator.get_members()] == ["writer", "coder"]

        coordinator.remove_teammate("writer")
        assert [a.id for a in coordinator.get_members()] == ["coder"]

    def test_removing_lead_is_rejected(self, lead, writer):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer])

        with pytest.raises(TeamLifecycleError, match="lead"):
            coordinator.remove_teammate("lead")

    def test_lead_can_work_as_member(self, lead):
        coordinator = TeamCoordinator()
        coordinator.create_team("Solo", lead, [lead])

        assert [a.id for a in coordinator.get_members()] == ["lead"]


class TestMessaging:
    def test_broadcast_reaches_lead_and_members_except_sender(self, lead, writer, coder):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer, coder])

        delivered = coordinator.broadcast("writer", "Intro is done")

        assert sorted(m.to_id for m in delivered) == ["coder", "lead"]

    def test_send_message_delegates_to_mailbox(self, lead, writer):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer])

        coordinator.send_message("lead", "writer", "Please start")

        assert [m.content for m in coordinator.mailbox.get_unread_messages("writer")] == ["Please start"]


class TestMatching:
    def test_score_weights(self, writer):
        assert score_agent(writer, ["writing"]) == 3  # tag only
        assert score_agent(writer, ["content"]) == 2  # role substring
        assert score_agent(writer, ["writer"]) == 2  # name substring
        assert score_agent(writer, ["prose"]) == 1  # instructions
        assert score_agent(writer, ["quantum"]) == 0

    def test_best_teammate_by_skills(self, lead, writer, coder):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer, coder])

        best = coordinator.get_best_teammate_for_task(TeamTaskInput(title="Build", required_skills=["coding"]))

        assert best.id == "coder"

    def test_role_hint_counts(self, lead, writer, coder):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer, coder])

        best = coordinator.get_best_teammate_for_task(TeamTaskInput(title="Build", role="Software Developer"))

        assert best.id == "coder"

    def test_ties_go_to_first_registered(self, lead):
        first = AgentProfile(id="first", name="First", tags=["research"])
        second = AgentProfile(id="second", name="Second", tags=["research"])
        coordinator = TeamCoordinator()
        coordinator.create_team("Team", lead, [first, second])

        best = coordinator.get_best_teammate_for_task(TeamTaskInput(title="R", required_skills=["research"]))

        assert best.id == "first"

    def test_no_match_falls_back_to_first_member(self, lead, writer, coder):
        coordinator = TeamCoordinator()
        coordinator.create_team("Docs", lead, [writer, coder])

        best = coordinator.get_best_teammate_for_task(TeamTaskInput(title="X", required_skills=["astrophysics"]))

        assert best.id == "writer"

    def test_no_members_returns_none(self, lead):
        coordinator = TeamCoordinator()
        coordinator.create_team("Empty", lead, [])

        assert coordinator.get_best_teammate_for_task(TeamTaskInput(title="X")) is None


def test_team_status_counts(lead, writer):
    coordinator = TeamCoordinator()
    coordinator.create_team("Docs", lead, [writer])
    a, b, c = coordinator.add_tasks(
        [TeamTaskInput(title="A", task_id="a"), TeamTaskInput(title="B", task_id="b", dependencies=["a"]),
         TeamTaskInput(title="C", task_id="c")]
    )
    coordinator.task_list.claim_task(c.id, "writer")
    coordinator.broadcast("lead", "go")

    status = coordinator.get_team_status()

    assert status.status == TeamState.ACTIVE
    assert status.member_count == 1
    assert status.total_tasks == 3
    assert status.pending_tasks == 2
    assert status.ready_tasks == 1
    assert status.in_progress_tasks == 1
    assert status.message_count == 1
