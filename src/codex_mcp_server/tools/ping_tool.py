from typing import Any

from codex_mcp_server.tool import ToolResult
from codex_mcp_server.tools.arguments import PingArgs, parse_arguments


class PingTool:
    def __init__(self, version: str):
        self._version = version

    @property
    def name(self) -> str:
        return "ping"

    @property
    def description(self) -> str:
        return "Test the server connection. Echoes your message and includes the server version in meta."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "message": {
                    "type": "string",
                    "description": "Message to echo back",
                },
            },
            "required": [],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        args = parse_arguments(PingArgs, self.name, tool_input)
        return ToolResult.text(args.message, meta={"version": self._version})
