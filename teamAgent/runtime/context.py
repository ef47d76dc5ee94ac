"""Optional context lookups spliced into an agent's prompt.

Every provider may be a plain function or a coroutine function. A missing
provider or one that raises yields empty text, never a failed run.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

LOGGER = logging.getLogger(__name__)


async def _call_safely(name: str, provider: Optional[Callable[..., Any]], *args: Any, default: Any) -> Any:
    if provider is None:
        return default
    try:
        result = provider(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:  # noqa: BLE001 - context is best effort
        LOGGER.warning(f"Context provider '{name}' failed: {type(e).__name__}: {e}")
        return default
    return default if result is None else result


@dataclass
class AgentContextProviders:
    """Hooks into knowledge, memory and skill stores.

    Attributes:
        knowledge_instructions: (base_instructions, knowledge_item_ids, agent_id) -> instructions
        memory_context: (agent_id, query) -> text
        skill_instructions: (agent_id) -> text
        knowledge_attachments: (knowledge_item_ids) -> list of text blocks
    """

    knowledge_instructions: Optional[Callable[..., Any]] = None
    memory_context: Optional[Callable[..., Any]] = None
    skill_instructions: Optional[Callable[..., Any]] = None
    knowledge_attachments: Optional[Callable[..., Any]] = None

    async def instructions_for(self, base: str, knowledge_item_ids: Sequence[str], agent_id: str) -> str:
        if not knowledge_item_ids:
            return base
        enhanced = await _call_safely(
            "knowledge_instructions", self.knowledge_instructions, base, list(knowledge_item_ids), agent_id, default=base
        )
        return str(enhanced) or base

    async def memories_for(self, agent_id: str, query: str) -> str:
        return str(await _call_safely("memory_context", self.memory_context, agent_id, query, default=""))

    async def skills_for(self, agent_id: str) -> str:
        return str(await _call_safely("skill_instructions", self.skill_instructions, agent_id, default=""))

    async def attachments_for(self, knowledge_item_ids: Sequence[str]) -> List[str]:
        if not knowledge_item_ids:
            return []
        attachments = await _call_safely(
            "knowledge_attachments", self.knowledge_attachments, list(knowledge_item_ids), default=[]
        )
        if isinstance(attachments, str):
            return [attachments] if attachments else []
        return [str(item) for item in attachments if item]
