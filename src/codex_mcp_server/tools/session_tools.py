from __future__ import annotations

from typing import Any

from codex_mcp_server.memory.session_store import SessionStore
from codex_mcp_server.services.session_controller import SessionController
from codex_mcp_server.tool import ToolResult
from codex_mcp_server.tools.arguments import NoArgs, SessionIdArgs, parse_arguments

_SESSION_ID_SCHEMA = {
    "type": "object",
    "properties": {
        "sessionId": {
            "type": "string",
            "description": "The sessionId to operate on.",
        },
    },
    "required": ["sessionId"],
}


class ListSessionsTool:
    def __init__(self, sessions: SessionStore, controller: SessionController | None = None):
        self._sessions = sessions
        self._controller = controller or SessionController()

    @property
    def name(self) -> str:
        return "listSessions"

    @property
    def description(self) -> str:
        return "List all active sessions with metadata (sessionId, turns, bytes, createdAt, lastUsedAt, expiresAt)."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        parse_arguments(NoArgs, self.name, tool_input)
        return ToolResult.text(self._controller.format_session_list(self._sessions.list_session_meta()))


class SessionStatsTool:
    def __init__(self, sessions: SessionStore, controller: SessionController | None = None):
        self._sessions = sessions
        self._controller = controller or SessionController()

    @property
    def name(self) -> str:
        return "sessionStats"

    @property
    def description(self) -> str:
        return (
            "Get statistics and metadata for a session, including creation time, last used, "
            "expiration, number of turns, and bytes used."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return _SESSION_ID_SCHEMA

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        args = parse_arguments(SessionIdArgs, self.name, tool_input)
        meta = self._sessions.get_session_meta(args.session_id)
        if meta is None:
            return ToolResult.text(f"Session {args.session_id} not found.")
        return ToolResult.text(self._controller.format_session_stats(meta))


class DeleteSessionTool:
    def __init__(self, sessions: SessionStore):
        self._sessions = sessions

    @property
    def name(self) -> str:
        return "deleteSession"

    @property
    def description(self) -> str:
        return "Delete a session by sessionId to free its transcript. Succeeds even if the session does not exist."

    @property
    def input_schema(self) -> dict[str, Any]:
        return _SESSION_ID_SCHEMA

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        args = parse_arguments(SessionIdArgs, self.name, tool_input)
        self._sessions.clear_session(args.session_id)
        return ToolResult.text(f"Session {args.session_id} deleted.")
