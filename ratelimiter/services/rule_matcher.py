"""Selection of the rate limit rule that applies to a request descriptor."""

from __future__ import annotations

from typing import Iterable

from ratelimiter.schemas.rate_limit import DESCRIPTOR_FIELDS, RateLimitRule, RequestDescriptor


def field_matches(descriptor_value: str | None, rule_value: str | None) -> bool:
    """Check one descriptor field against one rule predicate.

    Args:
        descriptor_value: Descriptor value, None when not supplied. Empty
            strings are treated as not supplied.
        rule_value: Rule predicate. None matches anything; "" requires any
            non-empty descriptor value; otherwise values must be equal.

    Returns:
        True if the field satisfies the predicate.
    """
    if rule_value is None:
        return True
    if not descriptor_value:
        return False
    return rule_value == "" or descriptor_value == rule_value


def rule_matches(descriptor: RequestDescriptor, rule: RateLimitRule) -> bool:
    """Return True when every field of ``descriptor`` satisfies ``rule``."""
    return all(
        field_matches(descriptor.field_value(name), rule.predicate(name))
        for name in DESCRIPTOR_FIELDS
    )


def find_rate_limit_rule(
    descriptor: RequestDescriptor,
    rules: Iterable[RateLimitRule],
) -> RateLimitRule | None:
    """Find the rule applying to a descriptor.

    When several rules match, the first one in iteration order wins. Rule sets
    are meant to be non-overlapping; which overlapping rule applies is not
    part of the contract.

    Args:
        descriptor: Descriptor of the inbound request.
        rules: Configured rules.

    Returns:
        The matching rule, or None if the descriptor is not rate limited.
    """
    return next((rule for rule in rules if rule_matches(descriptor, rule)), None)
