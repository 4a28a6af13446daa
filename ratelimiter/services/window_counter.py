"""Fixed-window request counting against the shared counter store.

Windows are aligned to the wall clock: a MINUTE window starts at second 0 of
every minute and an HOUR window at the top of every hour. Each window has its
own counter key, so the counter resets when the key for the next window is
first written. The key's TTL only garbage-collects old windows.

The read-compare-increment sequence is not a single store transaction. Two
concurrent callers may both read a value just below the allowance and both
increment it, so the counter can overshoot the allowance slightly under load.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ratelimiter.adapters.store.base import AbstractCounterStore
from ratelimiter.core.errors import MalformedCounterValueError
from ratelimiter.core.logging import hash_for_log
from ratelimiter.schemas.rate_limit import (
    DESCRIPTOR_FIELDS,
    RateLimitRule,
    RequestDescriptor,
    TimeInterval,
)

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"
TIME_LABEL = "time"

# Key segment label per descriptor field
FIELD_LABELS: dict[str, str] = {
    "account_id": "accountId",
    "client_ip": "clientIp",
    "request_type": "requestType",
}


def build_time_bucket(interval: TimeInterval, now: datetime) -> str:
    """Label the window containing ``now``.

    Examples:
        >>> build_time_bucket(TimeInterval.HOUR, datetime(2024, 1, 1, 9, 5))
        'time:9'
        >>> build_time_bucket(TimeInterval.MINUTE, datetime(2024, 1, 1, 9, 5))
        'time:9:5'
    """
    if interval is TimeInterval.HOUR:
        return f"{TIME_LABEL}{KEY_DELIMITER}{now.hour}"
    return f"{TIME_LABEL}{KEY_DELIMITER}{now.hour}{KEY_DELIMITER}{now.minute}"


def build_counter_key(
    descriptor: RequestDescriptor,
    rule: RateLimitRule,
    time_bucket: str,
) -> str:
    """Build the store key addressing the counter for one window.

    Only fields the rule has a predicate for contribute a segment, so
    descriptors that differ in a field the rule ignores share a budget.
    Segments appear in the fixed order account, client IP, request type.

    Args:
        descriptor: Descriptor being evaluated.
        rule: Rule matched for the descriptor.
        time_bucket: Label from :func:`build_time_bucket`.

    Returns:
        Key such as ``accountId:acct1:clientIp:1.1.1.1:time:9:5``.
    """
    segments: list[str] = []
    for name in DESCRIPTOR_FIELDS:
        value = descriptor.field_value(name)
        if value is None or rule.predicate(name) is None:
            continue
        segments.append(f"{FIELD_LABELS[name]}{KEY_DELIMITER}{value}{KEY_DELIMITER}")
    return "".join(segments) + time_bucket


class FixedWindowCounter:
    """Evaluates descriptors against fixed-window counters in a shared store."""

    def __init__(
        self,
        store: AbstractCounterStore,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the counter.

        Args:
            store: Shared counter store.
            clock: Wall-clock time source; windows are derived from its
                hour and minute.
        """
        self._store = store
        self._clock = clock

    def _read_count(self, key: str) -> int | None:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise MalformedCounterValueError(
                code="malformed_counter_value",
                message="Stored counter value is not an integer",
                details={"key_hash": hash_for_log(key), "value": str(raw)[:32]},
            ) from exc

    def _advance(self, key: str, interval: TimeInterval) -> None:
        """Count one more request in the window addressed by ``key``."""
        if self._store.exists(key):
            self._store.incr(key)
        else:
            self._store.set_with_expiry(key, "1", interval.window_seconds)

    def should_limit(self, descriptor: RequestDescriptor, rule: RateLimitRule) -> bool:
        """Decide whether a descriptor exceeds its rule in the current window.

        A rejected request is not counted. An admitted request increments
        the window counter, creating it with the window's TTL if needed.

        Args:
            descriptor: Descriptor being evaluated.
            rule: Rule matched for the descriptor.

        Returns:
            True if the request must be rejected.

        Raises:
            StoreUnavailableError: If the store cannot be reached.
            MalformedCounterValueError: If the stored value is not an integer.
        """
        interval = rule.time_interval
        key = build_counter_key(descriptor, rule, build_time_bucket(interval, self._clock()))

        current = self._read_count(key)
        if current is not None and current >= rule.allowed_number_of_requests:
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "key_hash": hash_for_log(key),
                    "limit": rule.allowed_number_of_requests,
                    "count": current,
                    "interval": interval.value,
                },
            )
            return True

        self._advance(key, interval)
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": hash_for_log(key),
                "limit": rule.allowed_number_of_requests,
                "count": (current or 0) + 1,
                "interval": interval.value,
            },
        )
        return False
