"""Rate limit decision service.

Combines rule matching and fixed-window counting into the single decision the
HTTP layer needs: should this batch of descriptors be rejected?
"""

from __future__ import annotations

import logging
from typing import Iterable

from ratelimiter.core.errors import StoreAppError
from ratelimiter.schemas.rate_limit import RateLimitRule, RequestDescriptor
from ratelimiter.services.rule_matcher import find_rate_limit_rule
from ratelimiter.services.window_counter import FixedWindowCounter

logger = logging.getLogger(__name__)


class RateLimitService:
    """Evaluates descriptor batches against an immutable rule set."""

    def __init__(self, rules: Iterable[RateLimitRule], counter: FixedWindowCounter) -> None:
        self._rules: tuple[RateLimitRule, ...] = tuple(rules)
        self._counter = counter

    @property
    def rules(self) -> tuple[RateLimitRule, ...]:
        return self._rules

    def should_limit_descriptor(self, descriptor: RequestDescriptor) -> bool:
        """Evaluate one descriptor; descriptors without a rule are never limited."""
        rule = find_rate_limit_rule(descriptor, self._rules)
        if rule is None:
            logger.debug("rate_limit.no_rule")
            return False

        try:
            return self._counter.should_limit(descriptor, rule)
        except StoreAppError as exc:
            logger.error(
                "rate_limit.store_error",
                extra={"error_code": exc.code, "interval": rule.time_interval.value},
            )
            raise

    def should_limit(self, descriptors: Iterable[RequestDescriptor]) -> bool:
        """Decide whether a batch of descriptors must be rejected.

        Identical descriptors are evaluated once. Evaluation stops at the first
        rejected descriptor, so later descriptors do not consume budget. Store
        errors propagate and fail the whole batch.

        Args:
            descriptors: Descriptors of one inbound request.

        Returns:
            True if any descriptor exceeds its rule.
        """
        unique = dict.fromkeys(descriptors)
        return any(self.should_limit_descriptor(descriptor) for descriptor in unique)
