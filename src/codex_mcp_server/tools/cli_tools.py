from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

from codex_mcp_server.command import CommandResult
from codex_mcp_server.errors import CommandExecutionError, ToolExecutionError
from codex_mcp_server.tool import ToolResult
from codex_mcp_server.tools.arguments import NoArgs, parse_arguments


class BufferedRunner(Protocol):
    async def run(self, executable: str, args: list[str] | None = None) -> CommandResult: ...


class _CliPassthroughTool:
    """Runs a fixed codex subcommand and returns its stdout."""

    _name = ""
    _description = ""
    _cli_args: tuple[str, ...] = ()
    _empty_text = ""

    def __init__(self, runner: BufferedRunner, executable: str = "codex"):
        self._runner = runner
        self._executable = executable

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        parse_arguments(NoArgs, self.name, tool_input)
        try:
            result = await self._runner.run(self._executable, list(self._cli_args))
        except CommandExecutionError as ex:
            logger.error("{tool} failed: {err}", tool=self.name, err=ex)
            raise ToolExecutionError(self.name, f"Failed to execute {self._executable} {' '.join(self._cli_args)}", ex) from ex
        return ToolResult.text(result.stdout or self._empty_text)


class HelpTool(_CliPassthroughTool):
    _name = "help"
    _description = "Get Codex CLI help information. Returns the CLI help output for Codex."
    _cli_args = ("--help",)
    _empty_text = "No help information available"


class ResumeTool(_CliPassthroughTool):
    _name = "resume"
    _description = "Run `codex resume` and return its output."
    _cli_args = ("resume",)
    _empty_text = "No output from codex resume"
