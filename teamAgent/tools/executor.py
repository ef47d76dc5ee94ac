"""Tool execution at the agent loop boundary.

Arguments requested by the model are validated against the tool's pydantic
args schema before the tool runs. Failures never raise: they come back as a
``ToolResult`` with ``success=False`` so the loop can feed them to the model.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from teamAgent.utils.logging_utils import log_tool_call, log_tool_result

from .registry import ToolRegistry

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolCallRequest:
    """One tool call requested by the model."""

    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None

    @classmethod
    def from_message_call(cls, call: Dict[str, Any]) -> "ToolCallRequest":
        """Build from a LangChain ``AIMessage.tool_calls`` entry."""

        args = call.get("args") or {}
        if isinstance(args, str):
            try:
                args = json.loads(args)
            except json.JSONDecodeError:
                args = {}
        if not isinstance(args, dict):
            args = {}
        return cls(name=call.get("name") or "", args=args, id=call.get("id"))


@dataclass(frozen=True, slots=True)
class ToolResult:
    name: str
    success: bool
    output: str = ""
    error: Optional[str] = None


def format_result_for_llm(result: ToolResult) -> str:
    """Textual rendering fed back into the conversation."""

    if not result.success:
        return f"Error: {result.error or 'Tool execution failed'}"
    return result.output or "No output"


def _validate_args(args_schema: Any, args: Dict[str, Any]) -> Optional[str]:
    if isinstance(args_schema, type) and issubclass(args_schema, BaseModel):
        try:
            args_schema.model_validate(args)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'args'}: {err['msg']}" for err in e.errors()
            )
            return f"Invalid arguments: {details}"
    return None


class ToolExecutor:
    """Executes tool calls against a ``ToolRegistry``."""

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def execute(self, call: ToolCallRequest) -> ToolResult:
        log_tool_call(LOGGER, call.name, call.args)

        try:
            tool = self.registry.get_tool(call.name)
        except KeyError:
            result = ToolResult(name=call.name, success=False, error=f"Unknown tool: {call.name}")
            log_tool_result(LOGGER, call.name, result.error, success=False)
            return result

        error = _validate_args(tool.args_schema, call.args)
        if error:
            log_tool_result(LOGGER, call.name, error, success=False)
            return ToolResult(name=call.name, success=False, error=error)

        try:
            output = await tool.ainvoke(call.args)
        except Exception as e:  # noqa: BLE001 - tool failures are reported to the model
            LOGGER.warning(f"Tool {call.name} failed: {e}")
            log_tool_result(LOGGER, call.name, e, success=False)
            return ToolResult(name=call.name, success=False, error=str(e) or type(e).__name__)

        if not isinstance(output, str):
            output = json.dumps(output, ensure_ascii=False, default=str)
        log_tool_result(LOGGER, call.name, output, success=True)
        return ToolResult(name=call.name, success=True, output=output)
