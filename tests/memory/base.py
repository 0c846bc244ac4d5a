import unittest
from datetime import UTC, datetime, timedelta

from codex_mcp_server.memory import CursorStore, SessionStore


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class SequentialTokens:
    def __init__(self, prefix: str = "tok"):
        self._prefix = prefix
        self._n = 0

    def __call__(self) -> str:
        self._n += 1
        return f"{self._prefix}{self._n}"


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._clock = FakeClock()
        self._sessions = SessionStore(ttl=timedelta(hours=1), clock=self._clock, max_sessions=0)
        self._cursors = CursorStore(
            ttl=timedelta(minutes=5),
            clock=self._clock,
            token_factory=SequentialTokens(),
        )
