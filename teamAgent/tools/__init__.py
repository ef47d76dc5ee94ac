"""Tool catalog, scope filtering and execution."""

from .executor import ToolCallRequest, ToolExecutor, ToolResult, format_result_for_llm
from .registry import ToolRegistry, filter_tools
from .system import calc, default_tools, now

__all__ = [
    "ToolCallRequest",
    "ToolExecutor",
    "ToolRegistry",
    "ToolResult",
    "calc",
    "default_tools",
    "filter_tools",
    "format_result_for_llm",
    "now",
]
