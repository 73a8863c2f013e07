"""Tool protocol, the web_search tool and name-based dispatch."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from .errors import MalformedToolArguments, UnknownTool
from .models import Message, ToolCallRequest, ToolDef, ToolResult
from .search import SearchProvider, StubSearchProvider

logger = logging.getLogger(__name__)


class BaseTool(ABC):
    """Base class for orchestrator tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for parameters."""
        ...

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> ToolResult:
        ...

    def to_def(self) -> ToolDef:
        return ToolDef(name=self.name, description=self.description, parameters=self.parameters)

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema for the completion gateway."""
        return self.to_def().to_tool_schema()


# ---------------------------------------------------------------------------
# web_search
# ---------------------------------------------------------------------------


class WebSearchTool(BaseTool):
    """Looks up current BGSU information through a SearchProvider."""

    def __init__(self, provider: SearchProvider | None = None):
        self._provider = provider or StubSearchProvider()

    @property
    def name(self) -> str:
        return "web_search"

    @property
    def description(self) -> str:
        return (
            "Search the web for current information, particularly from BGSU websites. "
            "Use this when you need specific, current information about BGSU courses, "
            "policies, events, deadlines, or campus resources."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query. Include 'site:bgsu.edu' to search BGSU websites specifically.",
                },
            },
            "required": ["query"],
        }

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        query = params.get("query")
        if not isinstance(query, str) or not query.strip():
            raise MalformedToolArguments(self.name, "'query' must be a non-empty string")
        logger.info("Executing web search with query: %s", query)
        content = await self._provider.search(query)
        return ToolResult(content=content)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def parse_arguments(call: ToolCallRequest) -> dict[str, Any]:
    """Decode a tool call's JSON argument string into a dict."""
    raw = call.function.arguments or "{}"
    try:
        params = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedToolArguments(call.function.name, str(e)) from e
    if not isinstance(params, dict):
        raise MalformedToolArguments(call.function.name, "arguments must be a JSON object")
    return params


class ToolRegistry:
    """Tools the model may call, keyed by name."""

    def __init__(self, tools: list[BaseTool] | None = None):
        self._tools: dict[str, BaseTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def schemas(self) -> list[dict[str, Any]]:
        return [t.to_tool_schema() for t in self._tools.values()]

    async def dispatch(self, call: ToolCallRequest) -> Message:
        """Run one tool call and return the tool message answering it."""
        tool = self._tools.get(call.function.name)
        if tool is None:
            raise UnknownTool(call.function.name)
        params = parse_arguments(call)
        result = await tool.execute(params)
        return Message.tool_result(tool_call_id=call.id, name=tool.name, content=result.content)


def get_default_tools(search_provider: SearchProvider | None = None) -> ToolRegistry:
    """Return the tool set offered to the assistant."""
    return ToolRegistry([WebSearchTool(search_provider)])
