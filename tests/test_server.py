import asyncio
import json
import unittest
from typing import Any

from codex_mcp_server.errors import ToolExecutionError, ValidationError
from codex_mcp_server.server import CodexMcpServer
from codex_mcp_server.tool import ToolResult


class _FakeTool:
    def __init__(self, name: str, result: ToolResult | None = None, error: Exception | None = None):
        self._name = name
        self._result = result or ToolResult.text("done")
        self._error = error
        self.calls: list[dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return f"{self._name} tool"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        self.calls.append(tool_input)
        if self._error is not None:
            raise self._error
        return self._result


def _texts(result) -> list[str]:
    return [item.text for item in result.content]


class CodexMcpServerTests(unittest.TestCase):
    def _server(self, *tools, echo: bool = True) -> CodexMcpServer:
        return CodexMcpServer("codex-mcp-server", "1.0.0", list(tools), echo_page_token=echo)

    def test_list_tools(self) -> None:
        server = self._server(_FakeTool("a"), _FakeTool("b"))
        listed = asyncio.run(server.list_tools())
        self.assertEqual(["a", "b"], [t.name for t in listed])
        self.assertEqual("object", listed[0].inputSchema["type"])
        self.assertTrue(server.is_valid_tool_name("a"))
        self.assertFalse(server.is_valid_tool_name("zzz"))

    def test_unknown_tool_is_error_result(self) -> None:
        result = asyncio.run(self._server(_FakeTool("a")).call_tool("nope", {}))
        self.assertTrue(result.isError)
        self.assertEqual(["Unknown tool: nope"], _texts(result))

    def test_success_passes_arguments(self) -> None:
        tool = _FakeTool("a")
        result = asyncio.run(self._server(tool).call_tool("a", {"x": 1}))
        self.assertFalse(result.isError)
        self.assertEqual(["done"], _texts(result))
        self.assertEqual([{"x": 1}], tool.calls)

    def test_missing_arguments_become_empty_dict(self) -> None:
        tool = _FakeTool("a")
        asyncio.run(self._server(tool).call_tool("a", None))
        self.assertEqual([{}], tool.calls)

    def test_validation_error_becomes_error_result(self) -> None:
        tool = _FakeTool("a", error=ValidationError("a", "sessionId: Field required"))
        result = asyncio.run(self._server(tool).call_tool("a", {}))
        self.assertTrue(result.isError)
        self.assertEqual(["Error: Invalid arguments for tool 'a': sessionId: Field required"], _texts(result))

    def test_execution_error_becomes_error_result(self) -> None:
        tool = _FakeTool("a", error=ToolExecutionError("a", "Failed to execute codex command", RuntimeError("x")))
        result = asyncio.run(self._server(tool).call_tool("a", {}))
        self.assertTrue(result.isError)
        self.assertEqual(["Error: Failed to execute codex command: x"], _texts(result))

    def test_unexpected_error_becomes_error_result(self) -> None:
        tool = _FakeTool("a", error=KeyError("k"))
        result = asyncio.run(self._server(tool).call_tool("a", {}))
        self.assertTrue(result.isError)
        self.assertTrue(_texts(result)[0].startswith("Error: KeyError"))

    def test_page_token_in_meta_and_echoed_in_content(self) -> None:
        tool = _FakeTool("codex", ToolResult.text("page 1", meta={"nextPageToken": "tok"}))
        result = asyncio.run(self._server(tool).call_tool("codex", {}))
        self.assertEqual({"nextPageToken": "tok"}, result.meta)
        self.assertEqual("page 1", result.content[0].text)
        self.assertEqual({"nextPageToken": "tok"}, json.loads(result.content[1].text))

    def test_page_token_echo_can_be_disabled(self) -> None:
        tool = _FakeTool("codex", ToolResult.text("page 1", meta={"nextPageToken": "tok"}))
        result = asyncio.run(self._server(tool, echo=False).call_tool("codex", {}))
        self.assertEqual(["page 1"], _texts(result))
        self.assertEqual({"nextPageToken": "tok"}, result.meta)

    def test_no_meta_when_tool_has_none(self) -> None:
        result = asyncio.run(self._server(_FakeTool("a")).call_tool("a", {}))
        self.assertIsNone(result.meta)
