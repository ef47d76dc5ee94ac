"""Deterministic fallback decomposition.

A small rule table maps the request's keyword family to one of five fixed
pipelines. Every pipeline is a valid, acyclic chain, so this path never fails.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .schema import (
    DecomposedTask,
    ExecutionMode,
    ExecutionStrategy,
    IOContract,
    IOInput,
    IOOutput,
    Requirement,
    SuggestedAgent,
    TaskAnalysis,
    TaskDecomposition,
)

# (category, pattern) checked in order; first match wins
CATEGORY_RULES: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("research", re.compile(r"research|analyze|compare|review|investigate|study")),
    ("creative", re.compile(r"write|create|compose|design|draft|story|novel|article|essay")),
    ("development", re.compile(r"implement|develop|build|code|program|deploy|test")),
    ("analysis", re.compile(r"analyze|evaluate|assess|audit|benchmark")),
)
GENERIC = "generic"

RequirementFilter = Callable[[TaskAnalysis], List[Requirement]]


def _by_type(req_type: str) -> RequirementFilter:
    return lambda analysis: [r for r in analysis.requirements if r.type == req_type]


def _all(analysis: TaskAnalysis) -> List[Requirement]:
    return list(analysis.requirements)


def _none(analysis: TaskAnalysis) -> List[Requirement]:
    return []


def _first_half(analysis: TaskAnalysis) -> List[Requirement]:
    return analysis.requirements[: math.ceil(len(analysis.requirements) / 2)]


def _second_half(analysis: TaskAnalysis) -> List[Requirement]:
    return analysis.requirements[math.ceil(len(analysis.requirements) / 2):]


@dataclass(frozen=True)
class StageTemplate:
    temp_id: str
    title: str
    description: str  # may contain {prompt}
    complexity: str
    output_key: str
    output_description: str
    input_description: str = ""
    execution_mode: ExecutionMode = ExecutionMode.ITERATIVE
    model_hint: str = "balanced"
    parallelizable: bool = False
    requirements: RequirementFilter = _none
    agent_name: str = ""
    agent_role: str = ""
    agent_skills: Sequence[str] = field(default_factory=tuple)
    agent_specialization: str = ""


PIPELINES = {
    "research": (
        StageTemplate(
            temp_id="research",
            title="Research & Information Gathering",
            description="Conduct thorough research on the following topic. Gather key facts, data, and perspectives.\n\nTopic: {prompt}",
            complexity="complex",
            output_key="research_findings",
            output_description="Comprehensive research findings",
            parallelizable=True,
            requirements=_by_type("functional"),
            agent_name="Researcher",
            agent_role="Research Analyst",
            agent_skills=("research", "analysis"),
            agent_specialization="Information gathering and synthesis",
        ),
        StageTemplate(
            temp_id="analyze",
            title="Analysis & Evaluation",
            description="Analyze the research findings. Identify patterns, draw conclusions, and evaluate the evidence.",
            complexity="simple",
            output_key="analysis_results",
            output_description="Analyzed conclusions and insights",
            input_description="Research findings to analyze",
            model_hint="powerful",
            requirements=_by_type("non_functional"),
            agent_name="Analyst",
            agent_role="Domain Analyst",
            agent_skills=("analysis", "critical-thinking"),
            agent_specialization="Data analysis and evaluation",
        ),
        StageTemplate(
            temp_id="synthesize",
            title="Synthesis & Report",
            description="Synthesize all research and analysis into a comprehensive, well-structured report.",
            complexity="simple",
            output_key="final_report",
            output_description="Final synthesized report",
            input_description="Analysis results to synthesize",
            execution_mode=ExecutionMode.SINGLE_SHOT,
            model_hint="powerful",
            agent_name="Writer",
            agent_role="Report Writer",
            agent_skills=("writing", "synthesis"),
            agent_specialization="Report creation and formatting",
        ),
    ),
    "creative": (
        StageTemplate(
            temp_id="plan",
            title="Creative Planning & Outline",
            description="Create a detailed plan and outline for the following creative work. Include structure, key themes, tone, and style decisions.\n\nRequest: {prompt}",
            complexity="simple",
            output_key="creative_plan",
            output_description="Outline and creative plan",
            requirements=_by_type("constraint"),
            agent_name="Creative Director",
            agent_role="Creative Planner",
            agent_skills=("planning", "creativity"),
            agent_specialization="Creative direction and planning",
        ),
        StageTemplate(
            temp_id="create",
            title="Content Creation",
            description="Execute the creative work based on the provided plan. Focus on quality, originality, and adherence to the plan.",
            complexity="complex",
            output_key="draft_content",
            output_description="Draft creative content",
            input_description="Creative plan to execute",
            model_hint="powerful",
            requirements=_by_type("functional"),
            agent_name="Writer",
            agent_role="Content Creator",
            agent_skills=("writing", "creativity"),
            agent_specialization="Creative content production",
        ),
        StageTemplate(
            temp_id="refine",
            title="Review & Polish",
            description="Review the draft content for quality, coherence, and completeness. Polish and refine.",
            complexity="simple",
            output_key="final_content",
            output_description="Polished final content",
            input_description="Draft content to review and polish",
            execution_mode=ExecutionMode.SINGLE_SHOT,
            model_hint="powerful",
            agent_name="Editor",
            agent_role="Content Editor",
            agent_skills=("editing", "quality-assurance"),
            agent_specialization="Content review and refinement",
        ),
    ),
    "development": (
        StageTemplate(
            temp_id="design",
            title="Technical Analysis & Design",
            description="Analyze requirements and create a technical design for: {prompt}\n\nConsider architecture, data models, APIs, and implementation approach.",
            complexity="simple",
            output_key="technical_design",
            output_description="Technical design document",
            requirements=_by_type("functional"),
            agent_name="Architect",
            agent_role="Technical Architect",
            agent_skills=("architecture", "design"),
            agent_specialization="System design and technical planning",
        ),
        StageTemplate(
            temp_id="implement",
            title="Implementation",
            description="Implement the solution based on the technical design. Write clean, well-documented code.",
            complexity="complex",
            output_key="implementation",
            output_description="Implemented code and documentation",
            input_description="Technical design to implement",
            model_hint="powerful",
            requirements=_all,
            agent_name="Developer",
            agent_role="Software Developer",
            agent_skills=("coding", "testing"),
            agent_specialization="Software implementation",
        ),
        StageTemplate(
            temp_id="review",
            title="Code Review & Testing",
            description="Review the implementation for quality, correctness, and completeness. Suggest improvements and verify all requirements are met.",
            complexity="simple",
            output_key="review_report",
            output_description="Review findings and suggestions",
            input_description="Implementation to review",
            execution_mode=ExecutionMode.SINGLE_SHOT,
            requirements=_by_type("non_functional"),
            agent_name="Reviewer",
            agent_role="Code Reviewer",
            agent_skills=("code-review", "testing"),
            agent_specialization="Code quality and testing",
        ),
    ),
    "analysis": (
        StageTemplate(
            temp_id="gather",
            title="Data Gathering",
            description="Gather all relevant data and information for analysis: {prompt}",
            complexity="simple",
            output_key="raw_data",
            output_description="Collected data and information",
            model_hint="fast",
            parallelizable=True,
            agent_name="Data Collector",
            agent_role="Research Assistant",
            agent_skills=("research", "data-collection"),
            agent_specialization="Data gathering",
        ),
        StageTemplate(
            temp_id="analyze",
            title="Deep Analysis",
            description="Perform in-depth analysis of the gathered data. Identify patterns, trends, and key insights.",
            complexity="complex",
            output_key="analysis",
            output_description="Analysis results and insights",
            input_description="Raw data to analyze",
            model_hint="powerful",
            requirements=_all,
            agent_name="Analyst",
            agent_role="Data Analyst",
            agent_skills=("analysis", "statistics"),
            agent_specialization="Data analysis and interpretation",
        ),
        StageTemplate(
            temp_id="report",
            title="Report Generation",
            description="Generate a comprehensive report from the analysis. Include visualizations, conclusions, and recommendations.",
            complexity="simple",
            output_key="final_report",
            output_description="Final analysis report",
            input_description="Analysis results to report on",
            execution_mode=ExecutionMode.SINGLE_SHOT,
            model_hint="powerful",
            agent_name="Report Writer",
            agent_role="Technical Writer",
            agent_skills=("writing", "visualization"),
            agent_specialization="Report creation",
        ),
    ),
    GENERIC: (
        StageTemplate(
            temp_id="plan",
            title="Planning & Analysis",
            description="Analyze the following request and create a detailed plan of action.\n\nRequest: {prompt}",
            complexity="simple",
            output_key="plan",
            output_description="Detailed action plan",
            requirements=_first_half,
            agent_name="Planner",
            agent_role="Strategic Planner",
            agent_skills=("planning", "analysis"),
            agent_specialization="Task planning and strategy",
        ),
        StageTemplate(
            temp_id="execute",
            title="Execution & Delivery",
            description="Execute the plan and produce the final deliverable.",
            complexity="complex",
            output_key="deliverable",
            output_description="Final deliverable",
            input_description="Plan to execute",
            model_hint="powerful",
            requirements=_second_half,
            agent_name="Executor",
            agent_role="Task Executor",
            agent_specialization="Task execution",
        ),
    ),
}


def classify_prompt(prompt: str) -> str:
    """Return the keyword family of ``prompt``."""

    lower = prompt.lower()
    for category, pattern in CATEGORY_RULES:
        if pattern.search(lower):
            return category
    return GENERIC


def extract_title(prompt: str) -> str:
    """First sentence of the prompt, truncated to 60 characters."""

    first = re.split(r"[.!?]+", prompt)[0].strip() or prompt.strip()
    return first[:60] + "..." if len(first) > 60 else first


def _build_stage(
    stage: StageTemplate,
    previous: Optional[StageTemplate],
    prompt: str,
    analysis: TaskAnalysis,
) -> DecomposedTask:
    inputs = []
    if previous is not None:
        inputs.append(IOInput(task_id=previous.temp_id, description=stage.input_description))

    skills = list(stage.agent_skills) or list(analysis.required_skills)
    return DecomposedTask(
        temp_id=stage.temp_id,
        title=stage.title,
        description=stage.description.format(prompt=prompt),
        complexity=stage.complexity,
        depends_on=[previous.temp_id] if previous is not None else [],
        parallelizable=stage.parallelizable,
        io_contract=IOContract(
            inputs=inputs,
            outputs=[IOOutput(key=stage.output_key, description=stage.output_description)],
        ),
        execution_mode=stage.execution_mode,
        model_hint=stage.model_hint,
        requirements=[r.model_copy() for r in stage.requirements(analysis)],
        suggested_agent=SuggestedAgent(
            name=stage.agent_name,
            role=stage.agent_role,
            required_skills=skills,
            specialization=stage.agent_specialization,
        ),
    )


def heuristic_decomposition(prompt: str, analysis: Optional[TaskAnalysis] = None) -> TaskDecomposition:
    """Build the fixed pipeline for the prompt's category. Never raises."""

    analysis = analysis or TaskAnalysis()
    stages = PIPELINES[classify_prompt(prompt)]

    sub_tasks: List[DecomposedTask] = []
    previous: Optional[StageTemplate] = None
    for stage in stages:
        sub_tasks.append(_build_stage(stage, previous, prompt, analysis))
        previous = stage

    return TaskDecomposition(
        main_task_title=extract_title(prompt),
        main_task_description=prompt,
        sub_tasks=sub_tasks,
        # the final stage already produces the merged deliverable
        requires_synthesis=False,
        strategy=ExecutionStrategy.SEQUENTIAL_AGENTS,
        estimated_duration=analysis.estimated_duration,
    )
