import json
from collections.abc import Callable, Sequence
from typing import Any

from codex_mcp_server.tool import Tool, ToolResult
from codex_mcp_server.tools.arguments import NoArgs, parse_arguments


def describe_tools(tools: Sequence[Tool]) -> list[dict[str, Any]]:
    return [
        {
            "name": t.name,
            "description": t.description,
            "inputSchema": t.input_schema,
        }
        for t in tools
    ]


class ListToolsTool:
    def __init__(self, catalogue: Callable[[], Sequence[Tool]]):
        self._catalogue = catalogue

    @property
    def name(self) -> str:
        return "listTools"

    @property
    def description(self) -> str:
        return "List all available tools and their schemas for client introspection."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        parse_arguments(NoArgs, self.name, tool_input)
        return ToolResult.text(json.dumps(describe_tools(self._catalogue()), indent=2))
