from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import mcp.types as types
from loguru import logger
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from codex_mcp_server.errors import ToolExecutionError, ValidationError
from codex_mcp_server.tool import Tool, ToolResult


class CodexMcpServer:
    """Exposes the tool catalogue over MCP and turns tool failures into error results."""

    def __init__(self, name: str, version: str, tools: Sequence[Tool], *, echo_page_token: bool = True):
        self._name = name
        self._version = version
        self._tools: dict[str, Tool] = {t.name: t for t in tools}
        self._echo_page_token = echo_page_token
        self._server = Server(name, version=version)
        self._server.list_tools()(self.list_tools)
        # Arguments are validated by each tool so failures carry tool-specific messages.
        self._server.call_tool(validate_input=False)(self.call_tool)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def is_valid_tool_name(self, name: str) -> bool:
        return name in self._tools

    async def list_tools(self) -> list[types.Tool]:
        return [
            types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
            for t in self._tools.values()
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("Unknown tool requested: {name}", name=name)
            return self._to_call_result(ToolResult.text(f"Unknown tool: {name}", is_error=True))

        logger.debug("Tool call: {name} | args={args}", name=name, args=json.dumps(arguments or {}, default=str)[:500])
        try:
            result = await tool.execute(arguments or {})
        except ValidationError as ex:
            logger.warning("Validation failed for {name}: {err}", name=name, err=ex.detail)
            return self._to_call_result(ToolResult.text(f"Error: {ex}", is_error=True))
        except ToolExecutionError as ex:
            logger.error("Tool {name} failed: {err}", name=name, err=ex)
            return self._to_call_result(ToolResult.text(f"Error: {ex}", is_error=True))
        except Exception as ex:
            logger.exception("Unhandled error in tool {name}", name=name)
            return self._to_call_result(ToolResult.text(f"Error: {type(ex).__name__}: {ex}", is_error=True))

        logger.debug(
            "Tool result: {name} | isError={err} | chars={chars}",
            name=name,
            err=result.is_error,
            chars=sum(len(item.get("text", "")) for item in result.content),
        )
        return self._to_call_result(result)

    def _to_call_result(self, result: ToolResult) -> types.CallToolResult:
        content = [types.TextContent(type="text", text=item.get("text", "")) for item in result.content]
        token = (result.meta or {}).get("nextPageToken")
        if token and self._echo_page_token:
            # Echoed for clients that drop _meta.
            content.append(types.TextContent(type="text", text=json.dumps({"nextPageToken": token})))
        return types.CallToolResult(content=content, isError=result.is_error, _meta=result.meta or None)

    async def run_stdio(self) -> None:
        logger.info("{name} {version} serving {count} tools over stdio", name=self._name, version=self._version, count=len(self._tools))
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
