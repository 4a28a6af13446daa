"""Counter store interface.

The fixed-window counter needs exactly four operations from the shared store.
Any key-value store that offers them (Redis being the production choice) can
back the rate limiter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractCounterStore(ABC):
    """Interface for shared counter stores.

    Implementations raise ``StoreUnavailableError`` when the backend cannot
    be reached. They never retry and never substitute a default value.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the raw value stored at ``key`` or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True when ``key`` is present (and not expired)."""
        raise NotImplementedError

    @abstractmethod
    def incr(self, key: str) -> int:
        """Atomically increment the integer at ``key`` by one.

        The key's time-to-live is left untouched.

        Returns:
            The value after the increment.
        """
        raise NotImplementedError

    @abstractmethod
    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` at ``key`` expiring after ``ttl_seconds``."""
        raise NotImplementedError

    def ping(self) -> bool:
        """Check connectivity; used by the readiness endpoint."""
        return True

    def close(self) -> None:
        """Release connections held by the store."""
