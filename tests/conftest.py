"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that builds the global
settings object, so tests never talk to a real Redis.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.pop("APP_RATE_LIMIT_RULES", None)
os.environ.pop("APP_RATE_LIMIT_RULES_FILE", None)

from datetime import datetime  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402

from ratelimiter.adapters.store.in_memory import InMemoryCounterStore  # noqa: E402
from ratelimiter.services.window_counter import FixedWindowCounter  # noqa: E402


@pytest.fixture
def store() -> InMemoryCounterStore:
    """Fresh in-memory counter store with a pinned monotonic clock."""
    return InMemoryCounterStore(clock=Mock(return_value=1000.0))


@pytest.fixture
def wall_clock() -> Mock:
    """Wall clock pinned to 09:05:30; tests move it via ``return_value``."""
    return Mock(return_value=datetime(2024, 3, 1, 9, 5, 30))


@pytest.fixture
def counter(store: InMemoryCounterStore, wall_clock: Mock) -> FixedWindowCounter:
    return FixedWindowCounter(store, clock=wall_clock)
