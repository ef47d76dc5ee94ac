"""Team orchestration: decompose, recruit, schedule, synthesize.

``TeamOrchestrator.orchestrate`` drives one request end to end:

1. decompose the prompt into a plan (LLM with heuristic fallback)
2. recruit teammates from the roster by skill score, requested roles first
3. create a team and load the plan into its shared task list
4. schedule ready tasks according to the plan's strategy until every task
   has terminated
5. synthesize the outputs, or return the last plan node's output

Each call uses a fresh ``TeamCoordinator``; nothing is shared across runs.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Union

from teamAgent.agents.schema import AgentProfile
from teamAgent.config.settings import Settings, get_settings
from teamAgent.models.resolver import ModelResolver
from teamAgent.planning.decomposer import TaskDecomposer
from teamAgent.planning.heuristics import extract_title
from teamAgent.planning.schema import (
    DecomposedTask,
    ExecutionMode,
    ExecutionStrategy,
    TaskAnalysis,
    TaskDecomposition,
)
from teamAgent.runtime.agent_runner import (
    CANCELLED_ERROR,
    AgentRunner,
    AgentRunnerResult,
    CancellationSignal,
    TaskBrief,
    TurnProgress,
)
from teamAgent.runtime.context import AgentContextProviders
from teamAgent.runtime.sinks import SinkDispatcher
from teamAgent.synthesis.engine import SynthesisEngine, TaskResult
from teamAgent.team.coordinator import TeamCoordinator, score_agent
from teamAgent.team.detection import TeamDetectionResult, detect_team_from_prompt
from teamAgent.team.models import TaskStatus, TeamStatus, TeamTask, TeamTaskInput
from teamAgent.team.task_list import SharedTaskList
from teamAgent.tools.registry import ToolRegistry
from teamAgent.utils.error_handler import ConfigurationError, PlanValidationError, TeamLifecycleError
from teamAgent.utils.logging_utils import log_error

LOGGER = logging.getLogger(__name__)

BLOCKED_ERROR = "Blocked by failed dependency"
SEQUENTIAL_STRATEGIES = (ExecutionStrategy.SINGLE_AGENT, ExecutionStrategy.SEQUENTIAL_AGENTS)


@dataclass(frozen=True, slots=True)
class OrchestrationProgress:
    phase: str  # decomposing | recruiting | preparing | executing | synthesizing | completed
    progress: int
    message: str
    completed: int = 0
    total: int = 0


@dataclass(frozen=True, slots=True)
class TaskExecution:
    """Outcome of one plan node."""

    temp_id: str
    task_id: str
    title: str
    agent_id: Optional[str]
    agent_name: Optional[str]
    success: bool
    response: str = ""
    turns_used: int = 0
    tool_calls: int = 0
    error: Optional[str] = None


@dataclass(slots=True)
class OrchestrationResult:
    success: bool
    response: str
    decomposition: TaskDecomposition
    team_name: str
    executions: List[TaskExecution] = field(default_factory=list)
    was_synthesized: bool = False
    cancelled: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    team_status: Optional[TeamStatus] = None

    @property
    def total_turns(self) -> int:
        return sum(execution.turns_used for execution in self.executions)


ProgressCallback = Callable[[OrchestrationProgress], Union[None, Awaitable[None]]]


@dataclass
class _RunState:
    """Mutable bookkeeping for one orchestrate() call."""

    prompt: str
    decomposition: TaskDecomposition
    coordinator: TeamCoordinator
    task_list: SharedTaskList
    lead: AgentProfile
    nodes_by_task_id: Dict[str, DecomposedTask]
    task_ids: Dict[str, str]
    isolated: bool
    cancellation_signal: Optional[CancellationSignal]
    on_progress: Optional[ProgressCallback]
    executions: Dict[str, TaskExecution] = field(default_factory=dict)

    @property
    def cancelled(self) -> bool:
        return self.cancellation_signal is not None and self.cancellation_signal.is_set()


class TeamOrchestrator:
    """Runs a request through an agent team."""

    def __init__(
        self,
        roster: Sequence[AgentProfile],
        model_resolver: ModelResolver,
        tool_registry: Optional[ToolRegistry] = None,
        context_providers: Optional[AgentContextProviders] = None,
        settings: Optional[Settings] = None,
        lead_id: Optional[str] = None,
        decomposer: Optional[TaskDecomposer] = None,
        runner: Optional[AgentRunner] = None,
        synthesis: Optional[SynthesisEngine] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.roster = list(roster)
        self.lead_id = lead_id
        self.decomposer = decomposer or TaskDecomposer(
            model_resolver, log_prompt_max_length=self.settings.observability.log_prompt_max_length
        )
        self.runner = runner or AgentRunner(
            model_resolver,
            tool_registry=tool_registry,
            context_providers=context_providers,
            settings=self.settings,
        )
        self.synthesis = synthesis or SynthesisEngine(model_resolver)
        self.max_concurrent = self.settings.governance.max_concurrent_agents
        self.summary_chars = self.settings.governance.broadcast_summary_chars
        self.sinks = SinkDispatcher()

    # ------------------------------------------------------------------
    # Recruiting
    # ------------------------------------------------------------------

    def pick_lead(self) -> AgentProfile:
        """Configured lead, else the first roster agent.

        Raises:
            TeamLifecycleError: the roster is empty
        """
        if not self.roster:
            raise TeamLifecycleError("No agents available to form a team", "The agent roster is empty.")
        if self.lead_id:
            for agent in self.roster:
                if agent.id == self.lead_id:
                    return agent
            LOGGER.warning(f"Configured lead '{self.lead_id}' not in roster, using '{self.roster[0].id}'")
        return self.roster[0]

    def recruit(
        self,
        decomposition: TaskDecomposition,
        detection: TeamDetectionResult,
        lead: AgentProfile,
    ) -> List[AgentProfile]:
        """Choose teammates: explicitly requested roles first, then one per plan node.

        A node with no skill match takes the next unused agent. When nobody
        else is available the lead works the tasks alone.
        """
        used = {lead.id}
        teammates: List[AgentProfile] = []

        def best_unused(skills: List[str]) -> Optional[AgentProfile]:
            best: Optional[AgentProfile] = None
            best_score = 0
            for agent in self.roster:
                if agent.id in used:
                    continue
                score = score_agent(agent, skills)
                if score > best_score:
                    best, best_score = agent, score
            return best

        def take(agent: AgentProfile) -> None:
            used.add(agent.id)
            teammates.append(agent)

        if detection.is_team_request:
            for role in detection.suggested_roles:
                words = [word for word in role.split() if len(word) > 3]
                agent = best_unused([role, *words])
                if agent is not None:
                    take(agent)

        for node in decomposition.sub_tasks:
            spec = node.suggested_agent
            skills = list(spec.required_skills) + ([spec.role] if spec.role else [])
            agent = best_unused(skills)
            if agent is None:
                if any(score_agent(member, skills) > 0 for member in teammates):
                    continue
                agent = next((candidate for candidate in self.roster if candidate.id not in used), None)
            if agent is not None:
                take(agent)

        if not teammates:
            teammates.append(lead)
        LOGGER.info(f"Recruited teammates: {[agent.id for agent in teammates]}")
        return teammates

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def orchestrate(
        self,
        prompt: str,
        analysis: Optional[TaskAnalysis] = None,
        cancellation_signal: Optional[CancellationSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> OrchestrationResult:
        """Run ``prompt`` through a freshly formed team.

        Raises:
            ConfigurationError: no inference provider configured
            TeamLifecycleError: the roster is empty
        """
        coordinator = TeamCoordinator()
        try:
            self._progress(on_progress, "decomposing", 10, "Breaking down task for team execution...")
            decomposition = await self.decomposer.decompose(prompt, analysis)
            detection = detect_team_from_prompt(prompt)

            total = len(decomposition.sub_tasks)
            role_count = len(detection.suggested_roles) or total
            self._progress(on_progress, "recruiting", 25, f"Forming agent team ({role_count} roles)...")
            lead = self.pick_lead()
            teammates = self.recruit(decomposition, detection, lead)
            team_name = decomposition.main_task_title or extract_title(prompt)
            coordinator.create_team(team_name, lead, teammates, goal=prompt)

            self._progress(on_progress, "preparing", 35, f"Populating shared task list ({total} tasks)...")
            state = self._load_plan(prompt, decomposition, coordinator, lead, cancellation_signal, on_progress)

            self._progress(on_progress, "executing", 40, "Team is working on tasks...", 0, total)
            await self._execute(state)

            return await self._finish(state, team_name)
        finally:
            coordinator.cleanup()

    def _load_plan(
        self,
        prompt: str,
        decomposition: TaskDecomposition,
        coordinator: TeamCoordinator,
        lead: AgentProfile,
        cancellation_signal: Optional[CancellationSignal],
        on_progress: Optional[ProgressCallback],
    ) -> _RunState:
        ordered = decomposition.topological_order()
        task_ids = {node.temp_id: str(uuid.uuid4()) for node in ordered}
        coordinator.add_tasks(
            TeamTaskInput(
                title=node.title,
                description=node.description,
                dependencies=[task_ids[dep] for dep in node.depends_on if dep in task_ids],
                required_skills=list(node.suggested_agent.required_skills),
                role=node.suggested_agent.role or None,
                specialization=node.suggested_agent.specialization or None,
                task_id=task_ids[node.temp_id],
            )
            for node in ordered
        )

        task_list = coordinator.task_list
        if task_list.has_circular_dependency():
            raise PlanValidationError("Circular dependency in team task list")

        return _RunState(
            prompt=prompt,
            decomposition=decomposition,
            coordinator=coordinator,
            task_list=task_list,
            lead=lead,
            nodes_by_task_id={task_ids[node.temp_id]: node for node in ordered},
            task_ids=task_ids,
            isolated=decomposition.strategy == ExecutionStrategy.PARALLEL_ISOLATED,
            cancellation_signal=cancellation_signal,
            on_progress=on_progress,
        )

    async def _execute(self, state: _RunState) -> None:
        """Scheduler loop. Returns once every task is terminal or work stops."""

        limit = 1 if state.decomposition.strategy in SEQUENTIAL_STRATEGIES else self.max_concurrent
        in_flight: Dict[str, asyncio.Task] = {}
        try:
            while True:
                if not state.cancelled:
                    ready = [task for task in state.task_list.get_ready_tasks() if task.id not in in_flight]
                    for task in ready[: max(0, limit - len(in_flight))]:
                        in_flight[task.id] = asyncio.create_task(self._execute_task(state, task))

                if not in_flight:
                    break

                done, _ = await asyncio.wait(in_flight.values(), return_when=asyncio.FIRST_COMPLETED)
                for task_id in [task_id for task_id, job in in_flight.items() if job in done]:
                    in_flight.pop(task_id).result()
        except BaseException:
            for job in in_flight.values():
                job.cancel()
            if in_flight:
                await asyncio.gather(*in_flight.values(), return_exceptions=True)
            raise

        if state.cancelled:
            for task in state.task_list.get_tasks_by_status(TaskStatus.PENDING):
                state.task_list.fail_task(task.id, CANCELLED_ERROR)
        elif not state.task_list.is_complete():
            self._fail_blocked(state)

    def _fail_blocked(self, state: _RunState) -> None:
        """Fail pending tasks that can never become ready."""

        task_list = state.task_list
        changed = True
        while changed:
            changed = False
            for task in task_list.get_tasks_by_status(TaskStatus.PENDING):
                failed = [
                    dep.title
                    for dep in (task_list.get_task(dep_id) for dep_id in task.dependencies)
                    if dep is not None and dep.status == TaskStatus.FAILED
                ]
                if failed:
                    task_list.fail_task(task.id, f"{BLOCKED_ERROR}: {', '.join(failed)}")
                    changed = True

        for task in task_list.get_tasks_by_status(TaskStatus.PENDING):
            task_list.fail_task(task.id, "Unresolvable dependencies")
        LOGGER.warning("Team execution stalled; blocked tasks were failed")

    async def _execute_task(self, state: _RunState, team_task: TeamTask) -> None:
        coordinator = state.coordinator
        task_list = state.task_list
        node = state.nodes_by_task_id[team_task.id]

        teammate = coordinator.get_best_teammate_for_task(team_task) or state.lead
        if not task_list.claim_task(team_task.id, teammate.id):
            return

        dependency_outputs = task_list.get_dependency_outputs(team_task.id)
        prompt = node.description
        if not state.isolated:
            prompt = self._team_messages_prefix(coordinator, teammate.id) + prompt

        total = len(state.nodes_by_task_id)
        completed = len(state.executions)

        def on_turn(update: TurnProgress) -> None:
            base = 40 + (completed / total) * 40 if total else 40
            action = f"Using {update.tool_call}" if update.tool_call else f"Turn {update.turn}"
            self._progress(
                state.on_progress,
                "executing",
                int(min(85, base + update.turn)),
                f"[{teammate.name} -> {team_task.title}] {action}",
                completed,
                total,
            )

        brief = TaskBrief.from_team_task(team_task, node.requirements)
        scope = node.suggested_agent.scope
        try:
            if node.execution_mode == ExecutionMode.ITERATIVE:
                result = await self.runner.run(
                    brief,
                    teammate,
                    prompt,
                    scope=scope,
                    dependency_outputs=dependency_outputs,
                    cancellation_signal=state.cancellation_signal,
                    on_progress=on_turn,
                    model_hint=node.model_hint,
                )
            else:
                result = await self.runner.run_single_shot(
                    brief,
                    teammate,
                    prompt,
                    scope=scope,
                    dependency_outputs=dependency_outputs,
                    cancellation_signal=state.cancellation_signal,
                    model_hint=node.model_hint,
                )
        except ConfigurationError as e:
            task_list.fail_task(team_task.id, e.user_message)
            self._record(state, node, team_task, teammate, None, error=e.user_message)
            raise
        except Exception as e:  # noqa: BLE001 - one failed task does not abort the team
            message = getattr(e, "user_message", None) or str(e) or type(e).__name__
            log_error(LOGGER, e, context=f"task '{team_task.title}' by {teammate.id}")
            task_list.fail_task(team_task.id, message)
            self._record(state, node, team_task, teammate, None, error=message)
            return

        if not result.success:
            error = "; ".join(result.errors) or "Agent run failed"
            task_list.fail_task(team_task.id, error)
            self._record(state, node, team_task, teammate, result, error=error)
            return

        task_list.complete_task(team_task.id, result.response)
        self._record(state, node, team_task, teammate, result)

        if not state.isolated and result.response and task_list.get_tasks_by_status(TaskStatus.PENDING):
            coordinator.broadcast(teammate.id, f'Completed "{team_task.title}": {self._summary(result.response)}')

    async def _finish(self, state: _RunState, team_name: str) -> OrchestrationResult:
        decomposition = state.decomposition
        executions = [
            state.executions[node.temp_id] for node in decomposition.sub_tasks if node.temp_id in state.executions
        ]
        completed = [execution for execution in executions if execution.success]
        errors = [f"{execution.title}: {execution.error}" for execution in executions if execution.error]
        for task in state.task_list.get_tasks_by_status(TaskStatus.FAILED):
            if not any(execution.task_id == task.id for execution in executions):
                errors.append(f"{task.title}: {task.error}")

        warnings: List[str] = []
        was_synthesized = False
        if decomposition.requires_synthesis and len(completed) > 1 and not state.cancelled:
            self._progress(state.on_progress, "synthesizing", 85, "Synthesizing team results...")
            synthesis = await self.synthesis.synthesize(
                state.prompt,
                [TaskResult(task_title=e.title, content=e.response, agent_name=e.agent_name) for e in completed],
            )
            response = synthesis.content
            warnings.extend(synthesis.warnings)
            was_synthesized = True
        else:
            response = completed[-1].response if completed else ""

        team_status = state.coordinator.get_team_status()
        state.coordinator.complete_team()
        all_done = all(task.status == TaskStatus.COMPLETED for task in state.task_list.get_all_tasks())
        result = OrchestrationResult(
            success=all_done and not state.cancelled,
            response=response,
            decomposition=decomposition,
            team_name=team_name,
            executions=executions,
            was_synthesized=was_synthesized,
            cancelled=state.cancelled,
            errors=errors,
            warnings=warnings,
            team_status=team_status,
        )
        self._progress(
            state.on_progress,
            "completed",
            100,
            "Team execution complete" if result.success else "Team execution finished with errors",
            len(completed),
            len(decomposition.sub_tasks),
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _team_messages_prefix(coordinator: TeamCoordinator, agent_id: str) -> str:
        """Unread mailbox messages for ``agent_id``, marked read once consumed."""

        mailbox = coordinator.mailbox
        if mailbox is None:
            return ""
        lines = []
        for message in mailbox.get_unread_messages(agent_id):
            sender = coordinator.get_agent(message.from_id)
            mailbox.mark_read(agent_id, message.id)
            lines.append(f"[Message from {sender.name if sender else message.from_id}]: {message.content}")
        if not lines:
            return ""
        return "--- Team Messages ---\n" + "\n".join(lines) + "\n--- End Messages ---\n\n"

    def _summary(self, text: str) -> str:
        if len(text) > self.summary_chars:
            return text[: self.summary_chars] + "..."
        return text

    @staticmethod
    def _record(
        state: _RunState,
        node: DecomposedTask,
        team_task: TeamTask,
        agent: AgentProfile,
        result: Optional[AgentRunnerResult],
        error: Optional[str] = None,
    ) -> None:
        state.executions[node.temp_id] = TaskExecution(
            temp_id=node.temp_id,
            task_id=team_task.id,
            title=team_task.title,
            agent_id=agent.id,
            agent_name=agent.name,
            success=error is None and result is not None and result.success,
            response=result.response if result else "",
            turns_used=result.turns_used if result else 0,
            tool_calls=len(result.tool_calls_log) if result else 0,
            error=error,
        )

    def _progress(
        self,
        sink: Optional[ProgressCallback],
        phase: str,
        progress: int,
        message: str,
        completed: int = 0,
        total: int = 0,
    ) -> None:
        LOGGER.info(f"[{phase}] {progress}% {message}")
        self.sinks.notify(
            sink,
            OrchestrationProgress(phase=phase, progress=progress, message=message, completed=completed, total=total),
        )
