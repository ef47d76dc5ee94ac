"""Tests for LLM task decomposition and its heuristic fallback."""

import json

import pytest

from conftest import FakeChatModel
from teamAgent.models.resolver import ModelResolver
from teamAgent.planning import ExecutionStrategy, TaskAnalysis, TaskDecomposer, parse_decomposition

PLAN = {
    "mainTaskTitle": "Compare databases",
    "mainTaskDescription": "Compare Postgres and MySQL",
    "strategy": "parallel_agents",
    "requiresSynthesis": True,
    "subTasks": [
        {"tempId": "pg", "title": "Postgres overview", "description": "Summarize Postgres", "dependsOn": []},
        {"tempId": "my", "title": "MySQL overview", "description": "Summarize MySQL", "dependsOn": []},
        {"tempId": "cmp", "title": "Comparison", "description": "Compare both", "dependsOn": ["pg", "my"]},
    ],
}


def test_parse_plain_json():
    plan = parse_decomposition(json.dumps(PLAN))

    assert plan.strategy == ExecutionStrategy.PARALLEL_AGENTS
    assert [t.temp_id for t in plan.sub_tasks] == ["pg", "my", "cmp"]


def test_parse_fenced_json_with_prose_and_trailing_commas():
    body = json.dumps(PLAN, indent=2).replace('"dependsOn": []\n', '"dependsOn": [],\n')
    text = f"Here is the plan:\n```json\n{body}\n```\nLet me know!"

    plan = parse_decomposition(text)

    assert plan.main_task_title == "Compare databases"


def test_parse_numeric_ids():
    plan = parse_decomposition(
        '{"subTasks": [{"tempId": 1, "title": "A"}, {"tempId": 2, "title": "B", "dependsOn": [1],'
        ' "ioContract": {"inputs": [{"taskId": 1}]}}]}'
    )

    assert [t.temp_id for t in plan.sub_tasks] == ["1", "2"]
    assert plan.sub_tasks[1].depends_on == ["1"]
    assert plan.sub_tasks[1].io_contract.inputs[0].task_id == "1"
    assert [t.temp_id for t in plan.topological_order()] == ["1", "2"]


def test_parse_requires_sub_tasks_array():
    with pytest.raises(ValueError):
        parse_decomposition('{"mainTaskTitle": "x"}')


@pytest.mark.asyncio
async def test_decompose_uses_model_plan(resolver, fake_model):
    fake_model.responses = [json.dumps(PLAN)]
    decomposer = TaskDecomposer(resolver)

    plan = await decomposer.decompose("Compare Postgres and MySQL")

    assert plan.requires_synthesis is True
    assert len(plan.sub_tasks) == 3
    assert fake_model.configs[0].model == "gpt-4.1"  # powerful slot
    system_prompt = fake_model.calls[0][0].content
    assert "task decomposition engine" in system_prompt


@pytest.mark.asyncio
async def test_decompose_embeds_analysis(resolver, fake_model):
    fake_model.responses = [json.dumps(PLAN)]
    analysis = TaskAnalysis(required_skills=["databases"])

    await TaskDecomposer(resolver).decompose("Compare Postgres and MySQL", analysis)

    assert '"databases"' in fake_model.calls[0][0].content


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        "I cannot produce JSON today.",
        '{"subTasks": "not a list"}',
        json.dumps({"subTasks": [{"tempId": "a", "title": "A", "dependsOn": ["ghost"]}]}),
        json.dumps({"subTasks": [{"tempId": "a", "title": "A", "dependsOn": ["a"]}]}),
        RuntimeError("rate limit exceeded"),
    ],
)
async def test_decompose_falls_back_to_heuristics(resolver, fake_model, response):
    fake_model.responses = [response]

    plan = await TaskDecomposer(resolver).decompose("Research the history of solar power")

    assert [t.temp_id for t in plan.sub_tasks] == ["research", "analyze", "synthesize"]


@pytest.mark.asyncio
async def test_decompose_without_provider_falls_back(settings):
    settings.inference.provider = ""
    called = []
    resolver = ModelResolver(settings, factory=lambda config: called.append(config) or FakeChatModel())

    plan = await TaskDecomposer(resolver).decompose("Plan my trip to Lisbon")

    assert called == []
    assert [t.temp_id for t in plan.sub_tasks] == ["plan", "execute"]


@pytest.mark.asyncio
async def test_decompose_without_resolver_falls_back():
    plan = await TaskDecomposer().decompose("Implement a rate limiter")

    assert [t.temp_id for t in plan.sub_tasks] == ["design", "implement", "review"]
