"""Per-task agent execution: the reason / act / observe loop.

One ``AgentRunner.run`` call executes one task through one agent:

1. build the system prompt (instructions, knowledge, memories, skills, task
   brief, upstream outputs)
2. collect the scoped tool set (allow-list first, then deny-list)
3. resolve the model configuration with scope overrides
4. loop until the model answers without tool calls, the turn budget runs
   out, or the cancellation signal is set

Tool results are fed back as ``[Tool Result: <name>]`` user messages. Running
out of turns still returns the last content as a successful best effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.tools import BaseTool

from teamAgent.agents.schema import AgentProfile, AgentScope
from teamAgent.config.settings import Settings, get_settings
from teamAgent.models.resolver import ModelResolver
from teamAgent.planning.schema import Requirement
from teamAgent.team.models import TaskOutput, TeamTask
from teamAgent.tools.executor import ToolCallRequest, ToolExecutor, format_result_for_llm
from teamAgent.tools.registry import ToolRegistry
from teamAgent.utils.error_handler import ModelInvocationError, handle_model_error
from teamAgent.utils.logging_utils import log_prompt, log_turn, log_visible_tools
from teamAgent.utils.message_utils import message_text
from teamAgent.utils.prompt_builder import PromptBuilder

from .context import AgentContextProviders
from .sinks import SinkDispatcher

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 15
MIN_TURNS = 1
DEFAULT_INSTRUCTIONS = "You are a helpful AI assistant."
CANCELLED_ERROR = "Execution cancelled"


class CancellationSignal(Protocol):
    """Anything with ``is_set()``, e.g. ``asyncio.Event`` or ``threading.Event``."""

    def is_set(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class TaskBrief:
    """What the agent is told about its task."""

    id: str
    title: str
    description: str
    requirements: List[Requirement] = field(default_factory=list)

    @classmethod
    def from_team_task(cls, task: TeamTask, requirements: Sequence[Requirement] = ()) -> "TaskBrief":
        return cls(id=task.id, title=task.title, description=task.description, requirements=list(requirements))


@dataclass(frozen=True, slots=True)
class TurnProgress:
    turn: int
    content: str
    tool_call: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ToolCallRecord:
    tool: str
    input: Dict[str, Any]
    output: str


@dataclass(slots=True)
class AgentRunnerResult:
    success: bool
    response: str
    turns_used: int
    tool_calls_log: List[ToolCallRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return CANCELLED_ERROR in self.errors


ProgressSink = Callable[[TurnProgress], Union[None, Awaitable[None]]]
ContentSink = Callable[[str], Union[None, Awaitable[None]]]


class AgentRunner:
    """Executes tasks with agents against a chat model and a tool catalog."""

    def __init__(
        self,
        model_resolver: ModelResolver,
        tool_registry: Optional[ToolRegistry] = None,
        context_providers: Optional[AgentContextProviders] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.model_resolver = model_resolver
        self.tool_registry = tool_registry or ToolRegistry()
        self.context_providers = context_providers or AgentContextProviders()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.default_max_turns = settings.governance.max_turns or DEFAULT_MAX_TURNS
        self.log_prompt_max_length = settings.observability.log_prompt_max_length
        self.sinks = SinkDispatcher()

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def max_turns_for(self, scope: Optional[AgentScope]) -> int:
        requested = scope.max_turns if scope is not None and scope.max_turns is not None else self.default_max_turns
        return max(MIN_TURNS, requested)

    def collect_tools(self, scope: Optional[AgentScope]) -> List[BaseTool]:
        return self.tool_registry.filter_for_scope(scope)

    async def build_system_prompt(
        self,
        agent: AgentProfile,
        task: TaskBrief,
        dependency_outputs: Optional[Sequence[TaskOutput]] = None,
        has_tools: bool = True,
    ) -> str:
        providers = self.context_providers
        base = agent.instructions or DEFAULT_INSTRUCTIONS
        instructions = await providers.instructions_for(base, agent.knowledge_item_ids, agent.id)
        memory_context = await providers.memories_for(agent.id, task.description)
        skill_instructions = await providers.skills_for(agent.id)

        return self.prompt_builder.agent_task_prompt(
            instructions=instructions,
            memory_context=memory_context,
            skill_instructions=skill_instructions,
            task=task,
            dependency_outputs=list(dependency_outputs or []),
            has_tools=has_tools,
        )

    async def _initial_messages(
        self,
        system_prompt: str,
        prompt: str,
        knowledge_refs: Sequence[str],
    ) -> List[BaseMessage]:
        attachments = await self.context_providers.attachments_for(knowledge_refs)
        user_content = prompt
        if attachments:
            user_content += "\n\n" + "\n\n".join(attachments)
        return [SystemMessage(content=system_prompt), HumanMessage(content=user_content)]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(
        self,
        task: TaskBrief,
        agent: AgentProfile,
        prompt: str,
        scope: Optional[AgentScope] = None,
        dependency_outputs: Optional[Sequence[TaskOutput]] = None,
        knowledge_refs: Optional[Sequence[str]] = None,
        cancellation_signal: Optional[CancellationSignal] = None,
        on_progress: Optional[ProgressSink] = None,
        on_content: Optional[ContentSink] = None,
        model_hint: Optional[str] = None,
    ) -> AgentRunnerResult:
        """Run the iterative tool loop for one task.

        Raises:
            ConfigurationError: no inference provider configured
            ModelInvocationError: the model call itself failed
        """
        max_turns = self.max_turns_for(scope)
        tools = self.collect_tools(scope)
        system_prompt = await self.build_system_prompt(agent, task, dependency_outputs, has_tools=bool(tools))
        config = self.model_resolver.resolve(scope, model_hint, temperature=agent.temperature)
        model = self.model_resolver.build(config, phase=f"task:{task.title}")
        bound_model = model.bind_tools(tools) if tools else model
        executor = ToolExecutor(ToolRegistry(tools))

        log_prompt(LOGGER, f"agent:{agent.name}", system_prompt, self.log_prompt_max_length)
        log_visible_tools(LOGGER, f"agent:{agent.name}", tools)

        messages = await self._initial_messages(
            system_prompt, prompt, knowledge_refs if knowledge_refs is not None else agent.knowledge_item_ids
        )

        tool_calls_log: List[ToolCallRecord] = []
        final_response = ""
        turns_used = 0

        for _ in range(max_turns):
            if cancellation_signal is not None and cancellation_signal.is_set():
                LOGGER.info(f"[{agent.name}] cancelled after {turns_used} turn(s)")
                return AgentRunnerResult(
                    success=False,
                    response=final_response,
                    turns_used=turns_used,
                    tool_calls_log=tool_calls_log,
                    errors=[CANCELLED_ERROR],
                )

            turns_used += 1
            try:
                response = await bound_model.ainvoke(messages)
            except Exception as e:
                LOGGER.error(f"[{agent.name}] model invocation failed on turn {turns_used}: {e}")
                raise ModelInvocationError(str(e), user_message=handle_model_error(e)) from e

            content = message_text(response)
            requested = [ToolCallRequest.from_message_call(call) for call in getattr(response, "tool_calls", None) or []]
            log_turn(LOGGER, agent.name, turns_used, max_turns, len(requested))

            if content:
                final_response = content
                self.sinks.notify(on_content, final_response)
            self.sinks.notify(
                on_progress,
                TurnProgress(turn=turns_used, content=content, tool_call=requested[0].name if requested else None),
            )

            if not requested:
                break

            messages.append(AIMessage(content=content))
            for call in requested:
                try:
                    output = format_result_for_llm(await executor.execute(call))
                except Exception as e:  # noqa: BLE001 - tool errors go back to the model
                    output = f"Error: {str(e) or type(e).__name__}"
                tool_calls_log.append(ToolCallRecord(tool=call.name, input=call.args, output=output))
                messages.append(HumanMessage(content=f"[Tool Result: {call.name}]\n{output or 'No output'}"))
        else:
            LOGGER.info(f"[{agent.name}] turn budget of {max_turns} exhausted, returning last response")

        return AgentRunnerResult(
            success=True,
            response=final_response,
            turns_used=turns_used,
            tool_calls_log=tool_calls_log,
        )

    async def run_single_shot(
        self,
        task: TaskBrief,
        agent: AgentProfile,
        prompt: str,
        scope: Optional[AgentScope] = None,
        dependency_outputs: Optional[Sequence[TaskOutput]] = None,
        knowledge_refs: Optional[Sequence[str]] = None,
        cancellation_signal: Optional[CancellationSignal] = None,
        on_content: Optional[ContentSink] = None,
        model_hint: Optional[str] = None,
    ) -> AgentRunnerResult:
        """Stream one answer without tools. ``on_content`` receives the text so far."""

        system_prompt = await self.build_system_prompt(agent, task, dependency_outputs, has_tools=False)
        config = self.model_resolver.resolve(scope, model_hint, temperature=agent.temperature)
        model = self.model_resolver.build(config, phase=f"task:{task.title}")
        messages = await self._initial_messages(
            system_prompt, prompt, knowledge_refs if knowledge_refs is not None else agent.knowledge_item_ids
        )
        log_prompt(LOGGER, f"agent:{agent.name}", system_prompt, self.log_prompt_max_length)

        if cancellation_signal is not None and cancellation_signal.is_set():
            return AgentRunnerResult(success=False, response="", turns_used=0, errors=[CANCELLED_ERROR])

        response = ""
        try:
            async for chunk in model.astream(messages):
                text = message_text(chunk)
                if not text:
                    continue
                response += text
                self.sinks.notify(on_content, response)
                if cancellation_signal is not None and cancellation_signal.is_set():
                    return AgentRunnerResult(success=False, response=response, turns_used=1, errors=[CANCELLED_ERROR])
        except Exception as e:
            LOGGER.error(f"[{agent.name}] streaming invocation failed: {e}")
            raise ModelInvocationError(str(e), user_message=handle_model_error(e)) from e

        return AgentRunnerResult(success=True, response=response, turns_used=1)
