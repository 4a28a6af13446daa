"""Rate limit service dependency for FastAPI routes.

This module wires the store adapter, rule set and decision service into the
HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Swap-friendly: the store backend is chosen by configuration behind an
  abstract interface.
- One instance per process: rules are loaded once and shared read-only.
"""

from __future__ import annotations

import logging

from ratelimiter.adapters.store import AbstractCounterStore, create_counter_store
from ratelimiter.core.config import settings
from ratelimiter.core.rules import load_rate_limit_rules
from ratelimiter.services.rate_limit_service import RateLimitService
from ratelimiter.services.window_counter import FixedWindowCounter

logger = logging.getLogger(__name__)


_components: tuple[RateLimitService, AbstractCounterStore] | None = None
_service_config: tuple[str, str, str | None, str | None] | None = None


def _current_config() -> tuple[str, str, str | None, str | None]:
    return (
        settings.store.backend,
        settings.store.redis_url,
        settings.app.rate_limit_rules,
        settings.app.rate_limit_rules_file,
    )


def _get_components() -> tuple[RateLimitService, AbstractCounterStore]:
    """Return the process-wide service and the store it counts in.

    Both are cached in-module so the rule set is parsed once.
    If configuration changes (primarily in tests), they are rebuilt.

    Raises:
        ConfigurationAppError: If the rule configuration is invalid.
    """

    global _components, _service_config

    config = _current_config()

    if _components is None or _service_config != config:
        rules = load_rate_limit_rules(settings.app)
        store = create_counter_store(settings.store)
        _components = (RateLimitService(rules, FixedWindowCounter(store)), store)
        _service_config = config
        logger.info(
            "rate_limit.service_initialized",
            extra={"backend": settings.store.backend, "rule_count": len(rules)},
        )

    return _components


def get_rate_limit_service() -> RateLimitService:
    """Return the process-wide rate limit service instance."""

    service, _ = _get_components()
    return service


def get_counter_store() -> AbstractCounterStore:
    """Return the process-wide counter store."""

    _, store = _get_components()
    return store


def reset_rate_limit_service() -> None:
    """Close the cached store and drop it so the next call rebuilds everything."""

    global _components, _service_config
    if _components is not None:
        _components[1].close()
    _components = None
    _service_config = None
