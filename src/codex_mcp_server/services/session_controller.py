from __future__ import annotations

from datetime import UTC, datetime

from codex_mcp_server.memory.models import SessionMeta


def iso(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision, e.g. ``2025-01-02T03:04:05.678Z``."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionController:
    def __init__(self, *, line_prefix: str = "- "):
        self._line_prefix = line_prefix

    def format_session_list_entry(self, meta: SessionMeta) -> str:
        return (
            f"{self._line_prefix}{meta.session_id}: turns={meta.turns}, bytes={meta.bytes}, "
            f"createdAt={iso(meta.created_at)}, lastUsedAt={iso(meta.last_used_at)}, "
            f"expiresAt={iso(meta.expires_at)}"
        )

    def format_session_list(self, sessions: list[SessionMeta]) -> str:
        if not sessions:
            return "No active sessions."
        return "\n".join(self.format_session_list_entry(meta) for meta in sessions)

    def format_session_stats(self, meta: SessionMeta) -> str:
        lines = [
            f"Session {meta.session_id}:",
            f"turns={meta.turns}",
            f"bytes={meta.bytes}",
            f"createdAt={iso(meta.created_at)}",
            f"lastUsedAt={iso(meta.last_used_at)}",
            f"expiresAt={iso(meta.expires_at)}",
        ]
        return "\n".join(lines)
