"""Team lifecycle, membership and skill-based task matching."""

from __future__ import annotations

import copy
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Union

from teamAgent.agents.schema import AgentProfile
from teamAgent.utils.error_handler import TeamLifecycleError

from .mailbox import TeamMailbox
from .models import TaskStatus, TeamConfig, TeamMessage, TeamState, TeamStatus, TeamTask, TeamTaskInput
from .task_list import SharedTaskList

LOGGER = logging.getLogger(__name__)

NO_ACTIVE_TEAM = "No active team. Call create_team() first."

# Skill match weights
TAG_MATCH = 3
ROLE_MATCH = 2
NAME_MATCH = 2
INSTRUCTIONS_MATCH = 1


def score_agent(agent: AgentProfile, skills: Iterable[str]) -> int:
    """Weighted skill overlap between an agent and a set of required skills."""

    tags = {tag.lower() for tag in agent.tags}
    role = agent.role.lower()
    name = agent.name.lower()
    instructions = agent.instructions.lower()

    score = 0
    for skill in skills:
        needle = skill.strip().lower()
        if not needle:
            continue
        if needle in tags:
            score += TAG_MATCH
        if needle in role:
            score += ROLE_MATCH
        if needle in name:
            score += NAME_MATCH
        if needle in instructions:
            score += INSTRUCTIONS_MATCH
    return score


class TeamCoordinator:
    """Owns one team at a time together with its task list and mailbox."""

    def __init__(self) -> None:
        self._team: Optional[TeamConfig] = None
        self._task_list: Optional[SharedTaskList] = None
        self._mailbox: Optional[TeamMailbox] = None
        self._agents: Dict[str, AgentProfile] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_team(
        self,
        name: str,
        lead: AgentProfile,
        teammates: Sequence[AgentProfile],
        goal: str = "",
    ) -> TeamConfig:
        """Register agents and start a fresh task list and mailbox.

        Raises:
            TeamLifecycleError: a team is already active
        """
        if self._team is not None and self._team.status == TeamState.ACTIVE:
            raise TeamLifecycleError("A team is already active. Call cleanup() first.")

        self._agents.clear()
        self._agents[lead.id] = lead
        member_ids: List[str] = []
        for teammate in teammates:
            self._agents[teammate.id] = teammate
            if teammate.id not in member_ids:
                member_ids.append(teammate.id)

        self._team = TeamConfig(name=name, lead_id=lead.id, member_ids=member_ids, goal=goal)
        self._task_list = SharedTaskList()
        self._mailbox = TeamMailbox()
        LOGGER.info(f"Team '{name}' created: lead={lead.id} members={member_ids}")
        return copy.deepcopy(self._team)

    def complete_team(self) -> None:
        if self._team is not None:
            self._team.status = TeamState.COMPLETED

    def cleanup(self) -> None:
        """Detach listeners and drop all team state. Safe with no team."""

        if self._task_list is not None:
            self._task_list.remove_all_listeners()
            self._task_list.clear()
        if self._mailbox is not None:
            self._mailbox.remove_all_listeners()
            self._mailbox.clear()
        if self._team is not None:
            self._team.status = TeamState.DISBANDED
            LOGGER.info(f"Team '{self._team.name}' disbanded")
        self._team = None
        self._task_list = None
        self._mailbox = None
        self._agents.clear()

    # ------------------------------------------------------------------
    # Tasks and membership
    # ------------------------------------------------------------------

    def add_tasks(self, inputs: Iterable[TeamTaskInput]) -> List[TeamTask]:
        task_list = self._require_task_list()
        return [task_list.add_task(task_input) for task_input in inputs]

    def add_teammate(self, agent: AgentProfile) -> None:
        team = self._require_team()
        self._agents[agent.id] = agent
        if agent.id not in team.member_ids:
            team.member_ids.append(agent.id)

    def remove_teammate(self, agent_id: str) -> None:
        team = self._require_team()
        if agent_id == team.lead_id:
            raise TeamLifecycleError("Cannot remove the team lead.")
        team.member_ids = [member for member in team.member_ids if member != agent_id]
        self._agents.pop(agent_id, None)

    # ------------------------------------------------------------------
    # Communication
    # ------------------------------------------------------------------

    def send_message(self, from_id: str, to_id: str, content: str) -> TeamMessage:
        return self._require_mailbox().send_message(from_id, to_id, content)

    def broadcast(self, from_id: str, content: str) -> List[TeamMessage]:
        """Send ``content`` to the lead and every member except the sender."""

        team = self._require_team()
        recipients = [team.lead_id, *team.member_ids]
        return self._require_mailbox().broadcast(from_id, recipients, content)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._team is not None and self._team.status == TeamState.ACTIVE

    @property
    def task_list(self) -> Optional[SharedTaskList]:
        return self._task_list

    @property
    def mailbox(self) -> Optional[TeamMailbox]:
        return self._mailbox

    def get_team(self) -> Optional[TeamConfig]:
        return copy.deepcopy(self._team) if self._team else None

    def get_agent(self, agent_id: str) -> Optional[AgentProfile]:
        return self._agents.get(agent_id)

    def get_members(self) -> List[AgentProfile]:
        if self._team is None:
            return []
        return [self._agents[member] for member in self._team.member_ids if member in self._agents]

    def get_team_status(self) -> Optional[TeamStatus]:
        if self._team is None or self._task_list is None:
            return None

        tasks = self._task_list.get_all_tasks()

        def count(status: TaskStatus) -> int:
            return sum(1 for task in tasks if task.status == status)

        return TeamStatus(
            name=self._team.name,
            status=self._team.status,
            lead_id=self._team.lead_id,
            member_count=len(self._team.member_ids),
            total_tasks=len(tasks),
            pending_tasks=count(TaskStatus.PENDING),
            ready_tasks=len(self._task_list.get_ready_tasks()),
            in_progress_tasks=count(TaskStatus.IN_PROGRESS),
            completed_tasks=count(TaskStatus.COMPLETED),
            failed_tasks=count(TaskStatus.FAILED),
            message_count=len(self._mailbox) if self._mailbox is not None else 0,
        )

    def get_best_teammate_for_task(self, task: Union[TeamTaskInput, TeamTask]) -> Optional[AgentProfile]:
        """Highest-scoring member for the task's skill hints.

        Ties go to the earliest registered member. With no positive score the
        first member is returned, so a team with members always yields one.
        """
        members = self.get_members()
        if not members:
            return None

        skills = list(task.required_skills)
        if task.role:
            skills.append(task.role)

        best: Optional[AgentProfile] = None
        best_score = 0
        for agent in members:
            score = score_agent(agent, skills)
            if score > best_score:
                best, best_score = agent, score

        if best is None:
            LOGGER.debug(f"No skill match for '{task.title}', falling back to {members[0].id}")
            return members[0]
        return best

    # ------------------------------------------------------------------

    def _require_team(self) -> TeamConfig:
        if self._team is None:
            raise TeamLifecycleError(NO_ACTIVE_TEAM)
        return self._team

    def _require_task_list(self) -> SharedTaskList:
        if self._team is None or self._task_list is None:
            raise TeamLifecycleError(NO_ACTIVE_TEAM)
        return self._task_list

    def _require_mailbox(self) -> TeamMailbox:
        if self._mailbox is None:
            raise TeamLifecycleError(NO_ACTIVE_TEAM)
        return self._mailbox
