"""LLM-driven task decomposition with a deterministic fallback.

The primary path asks the model for a JSON plan, extracts it leniently and
validates it. Any configuration, inference, parse or validation failure
drops to ``heuristic_decomposition``, so ``decompose`` always returns a valid
plan.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from teamAgent.models.resolver import ModelResolver
from teamAgent.utils.error_handler import PlanValidationError, TeamAgentError
from teamAgent.utils.json_utils import extract_json_object
from teamAgent.utils.logging_utils import log_plan_created, log_prompt
from teamAgent.utils.message_utils import message_text
from teamAgent.utils.prompt_builder import PromptBuilder

from .heuristics import heuristic_decomposition
from .schema import ExecutionStrategy, TaskAnalysis, TaskDecomposition, validate_decomposition

LOGGER = logging.getLogger(__name__)


def parse_decomposition(text: str) -> TaskDecomposition:
    """Parse and structurally validate a model-produced plan.

    Raises:
        ValueError: no JSON object, or no ``subTasks`` list
        pydantic.ValidationError: malformed nodes
        PlanValidationError: dangling or circular dependencies
    """
    payload = extract_json_object(text)
    sub_tasks = payload.get("subTasks", payload.get("sub_tasks"))
    if not isinstance(sub_tasks, list):
        raise ValueError("Plan has no subTasks array")

    decomposition = TaskDecomposition.model_validate(payload)
    validate_decomposition(decomposition)
    return decomposition


class TaskDecomposer:
    """Turns a prompt into a validated dependency-graph plan."""

    def __init__(
        self,
        model_resolver: Optional[ModelResolver] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        model_hint: str = "powerful",
        log_prompt_max_length: Optional[int] = None,
    ) -> None:
        self.model_resolver = model_resolver
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.model_hint = model_hint
        self.log_prompt_max_length = log_prompt_max_length

    async def decompose(self, prompt: str, analysis: Optional[TaskAnalysis] = None) -> TaskDecomposition:
        analysis = analysis or TaskAnalysis()
        try:
            decomposition = await self._decompose_with_model(prompt, analysis)
            LOGGER.info(f"LLM decomposition produced {len(decomposition.sub_tasks)} task(s)")
        except (TeamAgentError, ValidationError, ValueError) as e:
            LOGGER.warning(f"LLM decomposition unusable, using heuristic fallback: {e}")
            decomposition = heuristic_decomposition(prompt, analysis)
        except Exception as e:  # noqa: BLE001 - any inference failure falls back
            LOGGER.error(f"Task decomposition failed, using heuristic fallback: {type(e).__name__}: {e}")
            decomposition = heuristic_decomposition(prompt, analysis)

        log_plan_created(LOGGER, decomposition.model_dump(mode="json"))
        return decomposition

    async def _decompose_with_model(self, prompt: str, analysis: TaskAnalysis) -> TaskDecomposition:
        if self.model_resolver is None:
            raise PlanValidationError("No model resolver available for decomposition")

        model = self.model_resolver.get_model(hint=self.model_hint, phase="decompose")
        system_prompt = self.prompt_builder.decomposition_prompt(
            prompt=prompt,
            analysis_json=json.dumps(analysis.context_payload(), ensure_ascii=False, indent=2),
            strategies=[s.value for s in ExecutionStrategy],
        )
        log_prompt(LOGGER, "decompose", system_prompt, self.log_prompt_max_length)

        response = await model.ainvoke([SystemMessage(content=system_prompt), HumanMessage(content=prompt)])
        return parse_decomposition(message_text(response))
