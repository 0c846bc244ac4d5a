from __future__ import annotations

import threading
from datetime import timedelta

from loguru import logger

from codex_mcp_server.memory.clock import Clock, utc_now
from codex_mcp_server.memory.models import ROLES, Role, Session, SessionMeta, Turn

DEFAULT_SESSION_TTL = timedelta(hours=24)
DEFAULT_MAX_SESSIONS = 500


class SessionStore:
    """In-memory conversation transcripts keyed by a caller-supplied session id.

    Expiry is evaluated against the injected clock on every access. An expired
    session reads exactly like one that never existed and is dropped lazily.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Clock = utc_now,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._max_sessions = max_sessions
        self._sessions: dict[str, Session] = {}
        self._lock = threading.RLock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def append_turn(self, session_id: str, role: Role, text: str) -> Turn:
        if role not in ROLES:
            raise ValueError(f"Unsupported role: {role!r}")
        with self._lock:
            now = self._clock()
            session = self._live_session(session_id)
            if session is None:
                self._make_room()
                session = Session(
                    session_id=session_id,
                    created_at=now,
                    last_used_at=now,
                    expires_at=now + self._ttl,
                )
                self._sessions[session_id] = session
                logger.debug("Session started: {sid}", sid=session_id)
            turn = Turn(role=role, text=text, at=now)
            session.turns.append(turn)
            session.byte_count += len(text.encode("utf-8"))
            session.last_used_at = now
            session.expires_at = now + self._ttl
            return turn

    def get_transcript(self, session_id: str) -> list[Turn]:
        with self._lock:
            session = self._live_session(session_id)
            if session is None:
                return []
            return list(session.turns)

    def clear_session(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.debug("Session cleared: {sid}", sid=session_id)

    def list_session_ids(self) -> set[str]:
        with self._lock:
            self.prune_expired()
            return {sid for sid, s in self._sessions.items() if s.turns}

    def list_session_meta(self) -> list[SessionMeta]:
        """Live sessions, most recently used first."""
        with self._lock:
            self.prune_expired()
            sessions = [s for s in self._sessions.values() if s.turns]
            sessions.sort(key=lambda s: s.last_used_at, reverse=True)
            return [s.to_meta() for s in sessions]

    def get_session_meta(self, session_id: str) -> SessionMeta | None:
        with self._lock:
            session = self._live_session(session_id)
            if session is None or not session.turns:
                return None
            return session.to_meta()

    def prune_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]
            if expired:
                logger.debug("Pruned {count} expired session(s)", count=len(expired))
            return len(expired)

    def _live_session(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            del self._sessions[session_id]
            return None
        return session

    def _make_room(self) -> None:
        if self._max_sessions <= 0:
            return
        self.prune_expired()
        while len(self._sessions) >= self._max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.last_used_at)
            del self._sessions[oldest.session_id]
            logger.debug("Evicted least recently used session: {sid}", sid=oldest.session_id)
