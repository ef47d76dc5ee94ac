"""Plan schema for decomposition results.

Models accept both snake_case and the camelCase keys language models tend to
emit (``tempId``, ``dependsOn``, ``subTasks`` ...). Enumerated string fields
are normalized leniently so a slightly-off value does not discard a plan.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from teamAgent.agents.schema import AgentScope
from teamAgent.utils.error_handler import CircularDependencyError, PlanValidationError, UnknownDependencyError


class ExecutionStrategy(str, Enum):
    SINGLE_AGENT = "single_agent"
    SEQUENTIAL_AGENTS = "sequential_agents"
    PARALLEL_AGENTS = "parallel_agents"
    PARALLEL_ISOLATED = "parallel_isolated"
    ITERATIVE_DEEP = "iterative_deep"


class ExecutionMode(str, Enum):
    SINGLE_SHOT = "single-shot"
    ITERATIVE = "iterative"


REQUIREMENT_TYPES = ("functional", "non_functional", "constraint")
PRIORITIES = ("must", "should", "could")
MODEL_HINTS = ("fast", "balanced", "powerful")


def _pick(value: Any, allowed: tuple, default: str) -> str:
    text = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
    for option in allowed:
        if text == option.replace("-", "_"):
            return option
    return default


class _PlanModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
        coerce_numbers_to_str=True,
    )


class Requirement(_PlanModel):
    type: str = "functional"
    description: str
    priority: str = "should"

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> str:
        return _pick(value, REQUIREMENT_TYPES, "functional")

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> str:
        return _pick(value, PRIORITIES, "should")


class IOInput(_PlanModel):
    task_id: str
    description: str = ""


class IOOutput(_PlanModel):
    key: str
    description: str = ""


class IOContract(_PlanModel):
    """Named inputs and outputs. Documentation only: readiness follows ``depends_on``."""

    inputs: List[IOInput] = Field(default_factory=list)
    outputs: List[IOOutput] = Field(default_factory=list)


class SuggestedAgent(_PlanModel):
    name: str = ""
    role: str = ""
    required_skills: List[str] = Field(default_factory=list)
    specialization: str = ""
    scope: Optional[AgentScope] = None


class DecomposedTask(_PlanModel):
    """Single plan node. ``description`` must stand on its own."""

    temp_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    complexity: str = "simple"
    depends_on: List[str] = Field(default_factory=list)
    parallelizable: bool = False
    io_contract: IOContract = Field(default_factory=IOContract)
    execution_mode: ExecutionMode = ExecutionMode.ITERATIVE
    model_hint: str = "balanced"
    requirements: List[Requirement] = Field(default_factory=list)
    suggested_agent: SuggestedAgent = Field(default_factory=SuggestedAgent)

    @field_validator("complexity", mode="before")
    @classmethod
    def _normalize_complexity(cls, value: Any) -> str:
        return _pick(value, ("simple", "complex"), "complex")

    @field_validator("model_hint", mode="before")
    @classmethod
    def _normalize_hint(cls, value: Any) -> str:
        return _pick(value, MODEL_HINTS, "balanced")

    @field_validator("execution_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> str:
        return _pick(value, ("single-shot", "iterative"), "iterative")

    @model_validator(mode="after")
    def _default_description(self) -> "DecomposedTask":
        if not self.description:
            self.description = self.title
        return self


class TaskDecomposition(_PlanModel):
    """Graph root: nodes plus strategy metadata."""

    main_task_title: str = ""
    main_task_description: str = ""
    sub_tasks: List[DecomposedTask] = Field(min_length=1)
    requires_synthesis: bool = False
    strategy: ExecutionStrategy = ExecutionStrategy.SEQUENTIAL_AGENTS
    estimated_duration: float = 0

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, value: Any) -> str:
        return _pick(value, tuple(s.value for s in ExecutionStrategy), ExecutionStrategy.SEQUENTIAL_AGENTS.value)

    def task_by_id(self, temp_id: str) -> Optional[DecomposedTask]:
        for task in self.sub_tasks:
            if task.temp_id == temp_id:
                return task
        return None

    def topological_order(self) -> List[DecomposedTask]:
        """Nodes ordered so dependencies come first; ties keep plan order.

        Raises:
            CircularDependencyError: the plan contains a cycle
        """
        remaining = {task.temp_id: set(task.depends_on) for task in self.sub_tasks}
        ordered: List[DecomposedTask] = []
        while remaining:
            ready = [task for task in self.sub_tasks if task.temp_id in remaining and not remaining[task.temp_id]]
            if not ready:
                raise CircularDependencyError(next(iter(remaining)))
            for task in ready:
                del remaining[task.temp_id]
                ordered.append(task)
            for deps in remaining.values():
                deps.difference_update(task.temp_id for task in ready)
        return ordered


class TaskAnalysis(_PlanModel):
    """Upstream analysis of the request handed to the decomposer."""

    complexity: str = "moderate"
    required_skills: List[str] = Field(default_factory=list)
    requirements: List[Requirement] = Field(default_factory=list)
    suggested_agents: List[SuggestedAgent] = Field(default_factory=list)
    estimated_duration: float = 30

    def context_payload(self) -> Dict[str, Any]:
        """Compact JSON-ready view embedded in the decomposition prompt."""

        return {
            "complexity": self.complexity,
            "requiredSkills": self.required_skills,
            "requirements": [r.model_dump(include={"type", "description", "priority"}) for r in self.requirements],
            "suggestedAgents": [a.model_dump(by_alias=True, exclude_none=True) for a in self.suggested_agents],
        }


def validate_decomposition(decomposition: TaskDecomposition) -> None:
    """Check ids are unique, every dependency resolves, and the graph is acyclic.

    Raises:
        PlanValidationError: duplicate temp ids
        UnknownDependencyError: a dependency names a missing node
        CircularDependencyError: a dependency cycle exists
    """
    ids: List[str] = [task.temp_id for task in decomposition.sub_tasks]
    if len(ids) != len(set(ids)):
        duplicates = sorted({temp_id for temp_id in ids if ids.count(temp_id) > 1})
        raise PlanValidationError(f"Duplicate task ids in plan: {', '.join(duplicates)}")

    known = set(ids)
    for task in decomposition.sub_tasks:
        for dep in task.depends_on:
            if dep not in known:
                raise UnknownDependencyError(task.temp_id, dep)

    graph = {task.temp_id: task.depends_on for task in decomposition.sub_tasks}
    visited: set = set()
    visiting: set = set()

    def visit(temp_id: str) -> None:
        if temp_id in visiting:
            raise CircularDependencyError(temp_id)
        if temp_id in visited:
            return
        visiting.add(temp_id)
        for dep in graph.get(temp_id, ()):
            visit(dep)
        visiting.discard(temp_id)
        visited.add(temp_id)

    for temp_id in ids:
        visit(temp_id)
