"""Unit tests for rule selection."""

import pytest

from ratelimiter.schemas.rate_limit import RateLimitRule, RequestDescriptor, TimeInterval
from ratelimiter.services.rule_matcher import field_matches, find_rate_limit_rule, rule_matches


def _rule(**predicates) -> RateLimitRule:
    return RateLimitRule(
        allowed_number_of_requests=5,
        time_interval=TimeInterval.MINUTE,
        **predicates,
    )


@pytest.mark.parametrize(
    "descriptor_value, rule_value, expected",
    [
        (None, None, True),
        ("x", None, True),
        ("", None, True),
        ("x", "x", True),
        ("y", "x", False),
        (None, "x", False),
        ("", "x", False),
        ("anything", "", True),
        (None, "", False),
        ("", "", False),
    ],
)
def test_field_matches(descriptor_value, rule_value, expected) -> None:
    assert field_matches(descriptor_value, rule_value) is expected


def test_empty_descriptor_never_matches_concrete_rules() -> None:
    rules = [
        _rule(account_id="acct1"),
        _rule(client_ip="1.1.1.1"),
        _rule(request_type="GET", account_id="acct2"),
    ]
    descriptor = RequestDescriptor()

    assert find_rate_limit_rule(descriptor, rules) is None


def test_empty_string_fields_count_as_absent() -> None:
    rule = _rule(account_id="")
    descriptor = RequestDescriptor(account_id="", client_ip="1.1.1.1")

    assert rule_matches(descriptor, rule) is False


@pytest.mark.parametrize("account", ["acct1", "acct2", "someone-else"])
def test_empty_predicate_matches_any_value(account: str) -> None:
    rule = _rule(account_id="", request_type="login")

    assert rule_matches(RequestDescriptor(account_id=account, request_type="login"), rule)
    assert not rule_matches(RequestDescriptor(account_id=account, request_type="GET"), rule)


def test_unconstrained_fields_are_ignored() -> None:
    rule = _rule(account_id="acct1")
    descriptor = RequestDescriptor(account_id="acct1", client_ip="2.2.2.2", request_type="POST")

    assert find_rate_limit_rule(descriptor, [rule]) == rule


def test_client_ip_predicate_is_checked() -> None:
    rule = _rule(client_ip="1.1.1.1")

    assert rule_matches(RequestDescriptor(client_ip="1.1.1.1"), rule)
    assert not rule_matches(RequestDescriptor(client_ip="9.9.9.9"), rule)
    assert not rule_matches(RequestDescriptor(account_id="acct1"), rule)


def test_returns_first_match_in_iteration_order() -> None:
    broad = _rule(account_id="")
    specific = _rule(account_id="acct1")
    descriptor = RequestDescriptor(account_id="acct1")

    assert find_rate_limit_rule(descriptor, [broad, specific]) == broad
    assert find_rate_limit_rule(descriptor, [specific, broad]) == specific


def test_no_rules_means_no_match() -> None:
    assert find_rate_limit_rule(RequestDescriptor(account_id="acct1"), []) is None


def test_descriptor_accepts_camel_case_aliases() -> None:
    descriptor = RequestDescriptor.model_validate(
        {"accountId": "acct1", "clientIp": "1.1.1.1", "requestType": "GET"}
    )

    assert descriptor.account_id == "acct1"
    assert descriptor.client_ip == "1.1.1.1"
    assert descriptor.request_type == "GET"
