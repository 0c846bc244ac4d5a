from __future__ import annotations

import itertools
import threading
import time
from uuid import uuid4

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def make_run_id() -> str:
    """Return a per-invocation identifier such as ``3f9a1c0be47d-lx2k9q1c-1``.

    Random prefix, base36 millisecond timestamp, base36 process-local sequence.
    The result only contains ``[0-9a-z-]``.
    """
    with _sequence_lock:
        seq = next(_sequence)
    millis = time.time_ns() // 1_000_000
    return f"{uuid4().hex[:12]}-{to_base36(millis)}-{to_base36(seq)}"
