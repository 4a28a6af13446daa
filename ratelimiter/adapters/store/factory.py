"""Factory for counter store instances."""

from ratelimiter.adapters.store.base import AbstractCounterStore
from ratelimiter.adapters.store.in_memory import InMemoryCounterStore
from ratelimiter.adapters.store.redis_store import RedisCounterStore
from ratelimiter.core.config import StoreSettings, settings
from ratelimiter.core.errors import ValidationAppError


def create_counter_store(store_settings: StoreSettings | None = None) -> AbstractCounterStore:
    """Instantiate the counter store selected by configuration.

    Args:
        store_settings: Store settings; defaults to the global settings.

    Returns:
        AbstractCounterStore: Configured store instance.

    Raises:
        ValidationAppError: If the configured backend is unknown.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend in ("redis", "redis_cluster"):
        return RedisCounterStore.from_url(
            cfg.redis_url,
            cluster=backend == "redis_cluster",
            socket_timeout=cfg.socket_timeout_seconds,
        )

    if backend == "memory":
        return InMemoryCounterStore()

    raise ValidationAppError(
        code="store_unknown_backend",
        message=(
            f"Unknown counter store backend: '{backend}'. "
            "Supported backends: redis, redis_cluster, memory"
        ),
    )
