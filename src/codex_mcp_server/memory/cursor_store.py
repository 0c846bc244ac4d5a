from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import timedelta

from loguru import logger

from codex_mcp_server.memory.clock import Clock, utc_now
from codex_mcp_server.memory.models import PendingChunk
from codex_mcp_server.run_id import make_run_id

DEFAULT_CURSOR_TTL = timedelta(minutes=10)


class CursorStore:
    """Unread tails of oversized responses, addressed by opaque tokens."""

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_CURSOR_TTL,
        clock: Clock = utc_now,
        token_factory: Callable[[], str] = make_run_id,
    ):
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._token_factory = token_factory
        self._chunks: dict[str, PendingChunk] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            self.gc()
            return len(self._chunks)

    def save_chunk(self, remaining: str) -> str:
        if not remaining:
            raise ValueError("Cannot save an empty chunk")
        with self._lock:
            self.gc()
            token = self._token_factory()
            while token in self._chunks:
                token = self._token_factory()
            self._chunks[token] = PendingChunk(
                token=token,
                remaining=remaining,
                expires_at=self._clock() + self._ttl,
            )
            logger.debug("Saved pending chunk {token} ({chars} chars)", token=token, chars=len(remaining))
            return token

    def peek_chunk(self, token: str) -> str | None:
        with self._lock:
            self.gc()
            chunk = self._chunks.get(token)
            return chunk.remaining if chunk is not None else None

    def advance_chunk(self, token: str, consumed_length: int) -> None:
        if consumed_length <= 0:
            raise ValueError("consumed_length must be positive")
        with self._lock:
            self.gc()
            chunk = self._chunks.get(token)
            if chunk is None:
                return
            chunk.remaining = chunk.remaining[consumed_length:]
            if not chunk.remaining:
                del self._chunks[token]
                logger.debug("Pending chunk {token} exhausted", token=token)
                return
            chunk.expires_at = self._clock() + self._ttl

    def gc(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [t for t, c in self._chunks.items() if c.is_expired(now)]
            for token in expired:
                del self._chunks[token]
            if expired:
                logger.debug("Dropped {count} expired pending chunk(s)", count=len(expired))
            return len(expired)
