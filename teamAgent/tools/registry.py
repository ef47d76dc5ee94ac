"""Tool registration and scope filtering."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from langchain_core.tools import BaseTool

from teamAgent.agents.schema import AgentScope


def filter_tools(
    tools: Iterable[BaseTool],
    allowlist: Optional[Iterable[str]] = None,
    denylist: Optional[Iterable[str]] = None,
) -> List[BaseTool]:
    """Narrow ``tools`` by allow-list, then remove deny-listed names.

    An empty or missing allow-list keeps every tool.
    """
    selected = list(tools)
    allowed = set(allowlist or ())
    if allowed:
        selected = [tool for tool in selected if tool.name in allowed]
    denied = set(denylist or ())
    if denied:
        selected = [tool for tool in selected if tool.name not in denied]
    return selected


class ToolRegistry:
    """Tracks tool instances by name."""

    def __init__(self, tools: Optional[Iterable[BaseTool]] = None) -> None:
        self._tools: Dict[str, BaseTool] = {}
        if tools:
            for tool in tools:
                self.register_tool(tool)

    def register_tool(self, tool: BaseTool) -> None:
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> BaseTool:
        if name not in self._tools:
            raise KeyError(f"Unknown tool: {name}")
        return self._tools[name]

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> List[BaseTool]:
        return list(self._tools.values())

    def filter_for_scope(self, scope: Optional[AgentScope]) -> List[BaseTool]:
        """Tools visible to one run under ``scope``."""

        if scope is None:
            return self.list_tools()
        return filter_tools(self._tools.values(), scope.allowed_tools, scope.denied_tools)
