"""Merge several task outputs into one deliverable."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from langchain_core.messages import HumanMessage, SystemMessage

from teamAgent.models.resolver import ModelResolver
from teamAgent.utils.error_handler import handle_model_error
from teamAgent.utils.logging_utils import log_prompt
from teamAgent.utils.message_utils import message_text
from teamAgent.utils.prompt_builder import PromptBuilder

LOGGER = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True, slots=True)
class TaskResult:
    """One completed sub-task output."""

    task_title: str
    content: str
    agent_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    content: str
    success: bool
    warnings: List[str] = field(default_factory=list)


class SynthesisEngine:
    """LLM merge pass with a deterministic concatenation fallback."""

    def __init__(
        self,
        model_resolver: Optional[ModelResolver] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        model_hint: str = "powerful",
    ) -> None:
        self.model_resolver = model_resolver
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.model_hint = model_hint

    @staticmethod
    def merge(results: Sequence[TaskResult]) -> str:
        """Concatenate results under a heading per source task."""

        return SECTION_SEPARATOR.join(f"## {result.task_title}\n\n{result.content.strip()}" for result in results)

    async def synthesize(self, original_prompt: str, results: Sequence[TaskResult]) -> SynthesisResult:
        if not results:
            return SynthesisResult(content="", success=False, warnings=["No results to synthesize"])
        if len(results) == 1:
            return SynthesisResult(content=results[0].content, success=True)

        try:
            content = await self._synthesize_with_model(original_prompt, results)
        except Exception as e:  # noqa: BLE001 - synthesis always degrades to merge
            reason = handle_model_error(e)
            LOGGER.warning(f"Synthesis failed, concatenating {len(results)} results: {type(e).__name__}: {e}")
            return SynthesisResult(
                content=self.merge(results),
                success=False,
                warnings=[f"Synthesis failed ({reason}); sub-task results were concatenated instead."],
            )

        LOGGER.info(f"Synthesized {len(results)} results into {len(content)} chars")
        return SynthesisResult(content=content, success=True)

    async def _synthesize_with_model(self, original_prompt: str, results: Sequence[TaskResult]) -> str:
        if self.model_resolver is None:
            raise RuntimeError("No model resolver available for synthesis")

        model = self.model_resolver.get_model(hint=self.model_hint, phase="synthesis")
        system_prompt = self.prompt_builder.synthesis_prompt(original_prompt=original_prompt, results=list(results))
        log_prompt(LOGGER, "synthesis", system_prompt)

        response = await model.ainvoke(
            [
                SystemMessage(content=system_prompt),
                HumanMessage(content="Produce the final, unified deliverable for the original request."),
            ]
        )
        content = message_text(response).strip()
        if not content:
            raise ValueError("Synthesis model returned empty content")
        return content
