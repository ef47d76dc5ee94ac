"""Tests for the deterministic fallback decomposition."""

import pytest

from teamAgent.planning import (
    ExecutionMode,
    ExecutionStrategy,
    Requirement,
    TaskAnalysis,
    classify_prompt,
    extract_title,
    heuristic_decomposition,
    validate_decomposition,
)


@pytest.mark.parametrize(
    "prompt,category",
    [
        ("Research the history of solar power", "research"),
        ("Write a short story about a lighthouse", "creative"),
        ("Implement a rate limiter in Go", "development"),
        ("Evaluate our Q3 churn numbers", "analysis"),
        ("Plan my trip to Lisbon", "generic"),
    ],
)
def test_classify_prompt(prompt, category):
    assert classify_prompt(prompt) == category


def test_research_pipeline_shape():
    plan = heuristic_decomposition("Research the history of solar power")

    assert [t.title for t in plan.sub_tasks] == [
        "Research & Information Gathering",
        "Analysis & Evaluation",
        "Synthesis & Report",
    ]
    assert [t.depends_on for t in plan.sub_tasks] == [[], ["research"], ["analyze"]]
    assert plan.sub_tasks[-1].execution_mode == ExecutionMode.SINGLE_SHOT
    assert "Topic: Research the history of solar power" in plan.sub_tasks[0].description
    assert plan.strategy == ExecutionStrategy.SEQUENTIAL_AGENTS
    assert plan.requires_synthesis is False


def test_generic_pipeline_has_two_stages():
    plan = heuristic_decomposition("Plan my trip to Lisbon")

    assert [t.temp_id for t in plan.sub_tasks] == ["plan", "execute"]
    assert plan.sub_tasks[1].io_contract.inputs[0].task_id == "plan"


@pytest.mark.parametrize(
    "prompt",
    [
        "Research the history of solar power",
        "Write a short story about a lighthouse",
        "Implement a rate limiter in Go",
        "Evaluate our Q3 churn numbers",
        "Plan my trip to Lisbon",
        "",
    ],
)
def test_every_pipeline_is_valid(prompt):
    plan = heuristic_decomposition(prompt)

    validate_decomposition(plan)
    assert plan.sub_tasks


def test_requirements_are_routed_by_type():
    analysis = TaskAnalysis(
        requirements=[
            Requirement(type="functional", description="Cover 2010-2020"),
            Requirement(type="non_functional", description="Be concise"),
        ]
    )

    plan = heuristic_decomposition("Research the history of solar power", analysis)

    assert [r.description for r in plan.sub_tasks[0].requirements] == ["Cover 2010-2020"]
    assert [r.description for r in plan.sub_tasks[1].requirements] == ["Be concise"]
    assert plan.sub_tasks[2].requirements == []


def test_generic_pipeline_splits_requirements():
    analysis = TaskAnalysis(requirements=[Requirement(description=f"r{i}") for i in range(3)])

    plan = heuristic_decomposition("Plan my trip to Lisbon", analysis)

    assert [r.description for r in plan.sub_tasks[0].requirements] == ["r0", "r1"]
    assert [r.description for r in plan.sub_tasks[1].requirements] == ["r2"]


def test_extract_title():
    assert extract_title("Research solar power. Then write a report.") == "Research solar power"
    long_prompt = "x" * 80
    assert extract_title(long_prompt) == "x" * 60 + "..."
