"""Counter store adapters.

The rate limiter depends only on the small interface in ``base`` so counters
can live in Redis, a Redis Cluster, or (for local runs and tests) memory.
"""

from ratelimiter.adapters.store.base import AbstractCounterStore
from ratelimiter.adapters.store.factory import create_counter_store
from ratelimiter.adapters.store.in_memory import InMemoryCounterStore
from ratelimiter.adapters.store.redis_store import RedisCounterStore

__all__ = [
    "AbstractCounterStore",
    "InMemoryCounterStore",
    "RedisCounterStore",
    "create_counter_store",
]
