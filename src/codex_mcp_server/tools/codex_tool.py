from __future__ import annotations

from typing import Any

from codex_mcp_server.errors import ToolExecutionError, ValidationError
from codex_mcp_server.services.codex_orchestrator import (
    CODEX_TOOL_NAME,
    CodexInvocationOptions,
    CodexOrchestrator,
    CodexRequest,
)
from codex_mcp_server.tool import ToolResult
from codex_mcp_server.tools.arguments import CodexArgs, parse_arguments


class CodexTool:
    def __init__(self, orchestrator: CodexOrchestrator):
        self._orchestrator = orchestrator

    @property
    def name(self) -> str:
        return CODEX_TOOL_NAME

    @property
    def description(self) -> str:
        return (
            "Run the Codex CLI in non-interactive mode for code analysis, generation, or explanation. "
            "Supports conversational context (via sessionId), pagination (via pageToken), image input, "
            "and model control. Use `listModels` to discover locally configured models."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "The coding task, question, or analysis request. If omitted, must provide pageToken.",
                },
                "sessionId": {
                    "type": "string",
                    "description": "Stable ID for conversational context. If omitted, each call is stateless.",
                },
                "resetSession": {
                    "type": "boolean",
                    "description": "If true, clears the session for the given sessionId before running.",
                },
                "pageSize": {
                    "type": "integer",
                    "description": "Approximate characters per page (default 40000, min 1000, max 200000).",
                },
                "pageToken": {
                    "type": "string",
                    "description": "Token from a previous response to fetch the next page of output.",
                },
                "model": {
                    "type": "string",
                    "description": "Model id for the Codex CLI. Defaults to the CLI's configured model.",
                },
                "image": {
                    "anyOf": [
                        {"type": "string"},
                        {"type": "array", "items": {"type": "string"}},
                    ],
                    "description": "Path(s) to image file(s) to analyze. Passed to the Codex CLI as --image.",
                },
                "approvalPolicy": {
                    "type": "string",
                    "description": "Advanced: Codex CLI --approval-policy.",
                },
                "sandbox": {
                    "type": "boolean",
                    "description": "Advanced: Codex CLI --sandbox. Run in sandbox mode.",
                },
                "workingDirectory": {
                    "type": "string",
                    "description": "Advanced: Codex CLI --working-directory.",
                },
                "baseInstructions": {
                    "type": "string",
                    "description": "Advanced: Codex CLI --base-instructions.",
                },
            },
            "required": [],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        args = parse_arguments(CodexArgs, self.name, tool_input)
        request = CodexRequest(
            prompt=args.prompt,
            page_token=args.page_token,
            session_id=args.session_id,
            reset_session=args.reset_session,
            page_size=args.page_size,
            options=CodexInvocationOptions(
                model=args.model,
                images=args.images,
                approval_policy=args.approval_policy,
                sandbox=args.sandbox,
                working_directory=args.working_directory,
                base_instructions=args.base_instructions,
            ),
        )
        try:
            return await self._orchestrator.handle(request)
        except (ValidationError, ToolExecutionError):
            raise
        except Exception as ex:
            raise ToolExecutionError(self.name, "Failed to execute codex command", ex) from ex
