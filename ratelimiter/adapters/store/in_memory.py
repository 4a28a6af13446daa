"""In-memory counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Expiry is evaluated lazily against an injectable monotonic clock.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from ratelimiter.adapters.store.base import AbstractCounterStore
from ratelimiter.core.errors import MalformedCounterValueError
from ratelimiter.core.logging import hash_for_log


@dataclass
class _Entry:
    value: str
    expires_at: float | None


class InMemoryCounterStore(AbstractCounterStore):
    """Dictionary-backed store mimicking the Redis commands the limiter uses.

    Behaviour mirrors Redis where it matters to the counter: ``incr`` on a
    missing key creates it at 1 without a TTL, and ``incr`` on a non-integer
    value raises ``MalformedCounterValueError`` like the Redis adapter.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def _live_entry(self, key: str) -> _Entry | None:
        """Return the entry for key, dropping it first if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry else None

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def incr(self, key: str) -> int:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._entries[key] = _Entry(value="1", expires_at=None)
                return 1
            try:
                new_value = int(entry.value) + 1
            except ValueError as exc:
                raise MalformedCounterValueError(
                    code="malformed_counter_value",
                    message="Stored counter value is not an integer",
                    details={"operation": "incr", "key_hash": hash_for_log(key)},
                ) from exc
            entry.value = str(new_value)
            return new_value

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        with self._lock:
            self._entries[key] = _Entry(
                value=str(value),
                expires_at=self._clock() + ttl_seconds,
            )

    def ttl(self, key: str) -> float | None:
        """Remaining lifetime of ``key`` in seconds (None if absent or persistent)."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.expires_at is None:
                return None
            return entry.expires_at - self._clock()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
