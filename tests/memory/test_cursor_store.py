from datetime import timedelta

from codex_mcp_server.memory import CursorStore
from tests.memory.base import FakeClock, StoreTestCase


class CursorStoreTests(StoreTestCase):
    def test_save_and_peek_does_not_consume(self) -> None:
        token = self._cursors.save_chunk("abcdef")
        self.assertEqual("tok1", token)
        self.assertEqual("abcdef", self._cursors.peek_chunk(token))
        self.assertEqual("abcdef", self._cursors.peek_chunk(token))

    def test_peek_unknown_token_returns_none(self) -> None:
        self.assertIsNone(self._cursors.peek_chunk("missing"))

    def test_advance_shrinks_remaining(self) -> None:
        token = self._cursors.save_chunk("abcdef")
        self._cursors.advance_chunk(token, 2)
        self.assertEqual("cdef", self._cursors.peek_chunk(token))

    def test_advance_to_end_deletes_entry(self) -> None:
        token = self._cursors.save_chunk("abc")
        self._cursors.advance_chunk(token, 3)
        self.assertIsNone(self._cursors.peek_chunk(token))
        self.assertEqual(0, len(self._cursors))

    def test_advance_past_end_deletes_entry(self) -> None:
        token = self._cursors.save_chunk("abc")
        self._cursors.advance_chunk(token, 50)
        self.assertIsNone(self._cursors.peek_chunk(token))

    def test_advance_unknown_token_is_noop(self) -> None:
        self._cursors.advance_chunk("notfound", 1)

    def test_advance_rejects_non_positive_length(self) -> None:
        token = self._cursors.save_chunk("abc")
        with self.assertRaises(ValueError):
            self._cursors.advance_chunk(token, 0)
        self.assertEqual("abc", self._cursors.peek_chunk(token))

    def test_save_rejects_empty_text(self) -> None:
        with self.assertRaises(ValueError):
            self._cursors.save_chunk("")

    def test_expired_entry_is_absent_and_collected(self) -> None:
        token = self._cursors.save_chunk("abc")
        self._clock.advance(minutes=5)
        self.assertIsNone(self._cursors.peek_chunk(token))
        self.assertEqual(0, len(self._cursors))

    def test_advance_refreshes_expiry(self) -> None:
        token = self._cursors.save_chunk("abcdef")
        self._clock.advance(minutes=4)
        self._cursors.advance_chunk(token, 1)
        self._clock.advance(minutes=4)
        self.assertEqual("bcdef", self._cursors.peek_chunk(token))

    def test_gc_removes_only_expired_entries(self) -> None:
        old = self._cursors.save_chunk("old")
        self._clock.advance(minutes=3)
        fresh = self._cursors.save_chunk("fresh")
        self._clock.advance(minutes=3)
        self.assertEqual(1, self._cursors.gc())
        self.assertIsNone(self._cursors.peek_chunk(old))
        self.assertEqual("fresh", self._cursors.peek_chunk(fresh))

    def test_paging_until_exhaustion_reconstructs_text(self) -> None:
        text = "".join(chr(ord("a") + i % 26) for i in range(1003))
        for page in (1, 7, 100, 1003, 5000):
            token = self._cursors.save_chunk(text)
            pieces: list[str] = []
            while (remaining := self._cursors.peek_chunk(token)) is not None:
                head = remaining[:page]
                pieces.append(head)
                self._cursors.advance_chunk(token, len(head))
            self.assertEqual(text, "".join(pieces))
            self.assertIsNone(self._cursors.peek_chunk(token))

    def test_token_collision_is_retried(self) -> None:
        tokens = iter(["same", "same", "other"])
        store = CursorStore(ttl=timedelta(minutes=1), clock=FakeClock(), token_factory=lambda: next(tokens))
        first = store.save_chunk("a")
        second = store.save_chunk("b")
        self.assertEqual("same", first)
        self.assertEqual("other", second)
