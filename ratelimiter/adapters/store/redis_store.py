"""Redis-backed counter store.

Works with both a standalone ``redis.Redis`` client and a
``redis.cluster.RedisCluster`` client; the commands used (GET, EXISTS, INCR,
SETEX) are single-key and therefore cluster safe.

Failures are translated into application errors so the HTTP layer can report
them consistently. Nothing here retries: an unreachable store fails the
evaluation that needed it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from redis import Redis
from redis.cluster import RedisCluster
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ratelimiter.adapters.store.base import AbstractCounterStore
from ratelimiter.core.errors import MalformedCounterValueError, StoreUnavailableError
from ratelimiter.core.logging import hash_for_log

logger = logging.getLogger(__name__)


class RedisCounterStore(AbstractCounterStore):
    """Counter store delegating to a redis-py client.

    The client must be created with ``decode_responses=True`` so values come
    back as ``str``.
    """

    def __init__(self, client: Redis | RedisCluster, *, backend: str = "redis") -> None:
        self._client = client
        self._backend = backend

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        cluster: bool = False,
        socket_timeout: float | None = None,
    ) -> "RedisCounterStore":
        """Build a store from a connection URL.

        Args:
            url: ``redis://`` or ``rediss://`` URL.
            cluster: Connect with the cluster-aware client.
            socket_timeout: Connect/read timeout in seconds.

        Returns:
            RedisCounterStore bound to a lazily connecting client.
        """
        options = {
            "decode_responses": True,
            "socket_timeout": socket_timeout,
            "socket_connect_timeout": socket_timeout,
        }
        if cluster:
            return cls(RedisCluster.from_url(url, **options), backend="redis_cluster")
        return cls(Redis.from_url(url, **options), backend="redis")

    @contextmanager
    def _translate_errors(self, operation: str, key: str | None = None) -> Iterator[None]:
        """Map redis-py exceptions onto application store errors."""
        key_hash = hash_for_log(key) if key is not None else None
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as exc:
            logger.error(
                "store.unavailable",
                extra={
                    "operation": operation,
                    "backend": self._backend,
                    "key_hash": key_hash,
                    "error_type": type(exc).__name__,
                },
            )
            raise StoreUnavailableError(
                code="store_unavailable",
                message="Counter store is unreachable",
                details={"operation": operation, "backend": self._backend},
            ) from exc
        except ResponseError as exc:
            if "not an integer" in str(exc):
                raise MalformedCounterValueError(
                    code="malformed_counter_value",
                    message="Stored counter value is not an integer",
                    details={"operation": operation, "key_hash": key_hash or ""},
                ) from exc
            raise StoreUnavailableError(
                code="store_error",
                message="Counter store rejected the command",
                details={"operation": operation, "backend": self._backend},
            ) from exc
        except RedisError as exc:
            raise StoreUnavailableError(
                code="store_error",
                message="Counter store command failed",
                details={"operation": operation, "backend": self._backend},
            ) from exc

    def get(self, key: str) -> str | None:
        with self._translate_errors("get", key):
            return self._client.get(key)

    def exists(self, key: str) -> bool:
        with self._translate_errors("exists", key):
            return bool(self._client.exists(key))

    def incr(self, key: str) -> int:
        with self._translate_errors("incr", key):
            return int(self._client.incr(key))

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._translate_errors("setex", key):
            self._client.setex(key, ttl_seconds, value)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError as exc:
            logger.warning(
                "store.ping_failed",
                extra={"backend": self._backend, "error_type": type(exc).__name__},
            )
            return False

    def close(self) -> None:
        self._client.close()
