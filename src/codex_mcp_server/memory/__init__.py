from codex_mcp_server.memory.clock import Clock, utc_now
from codex_mcp_server.memory.cursor_store import CursorStore
from codex_mcp_server.memory.models import PendingChunk, Session, SessionMeta, Turn
from codex_mcp_server.memory.session_store import SessionStore

__all__ = [
    "Clock",
    "CursorStore",
    "PendingChunk",
    "Session",
    "SessionMeta",
    "SessionStore",
    "Turn",
    "utc_now",
]
