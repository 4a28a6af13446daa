"""Pydantic schemas for request descriptors and rate limit rules.

Field names follow Python conventions; the wire/config format uses the
camelCase aliases (``accountId``, ``clientIp``, ``requestType``,
``allowedNumberOfRequests``, ``timeInterval``). All models are frozen, so
descriptors and rules are hashable and can be deduplicated like sets.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

# Fixed order used by the rule matcher and the counter key builder
DESCRIPTOR_FIELDS: tuple[str, ...] = ("account_id", "client_ip", "request_type")


class TimeInterval(str, Enum):
    """Length of a fixed rate limit window."""

    MINUTE = "MINUTE"
    HOUR = "HOUR"

    @property
    def window_seconds(self) -> int:
        """TTL applied to a freshly created counter for this interval."""
        return 3600 if self is TimeInterval.HOUR else 60


class RequestDescriptor(BaseModel):
    """Attributes identifying the caller of one inbound request.

    Any subset of the fields may be supplied. An empty string is treated the
    same as an absent field.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account_id: str | None = Field(
        default=None,
        alias="accountId",
        description="Account identifier of the caller.",
    )
    client_ip: str | None = Field(
        default=None,
        alias="clientIp",
        description="Client IP address.",
    )
    request_type: str | None = Field(
        default=None,
        alias="requestType",
        description="Logical request type (e.g. GET, login).",
    )

    def field_value(self, name: str) -> str | None:
        """Return the value of ``name`` only when it is present (non-empty)."""
        value = getattr(self, name)
        return value or None


class RateLimitRule(BaseModel):
    """A configured allowance for descriptors matching its predicates.

    Predicate semantics per field: ``None`` matches anything, a non-empty
    string must equal the descriptor's value, and an empty string requires the
    descriptor to supply the field with any non-empty value.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account_id: str | None = Field(default=None, alias="accountId")
    client_ip: str | None = Field(default=None, alias="clientIp")
    request_type: str | None = Field(default=None, alias="requestType")
    allowed_number_of_requests: int = Field(
        ...,
        alias="allowedNumberOfRequests",
        ge=1,
        description="Requests admitted per window before rejecting.",
    )
    time_interval: TimeInterval = Field(
        ...,
        alias="timeInterval",
        description="Window length: MINUTE or HOUR.",
    )

    def predicate(self, name: str) -> str | None:
        return getattr(self, name)


class RateLimitRequest(BaseModel):
    """Inbound batch of descriptors evaluated as one decision."""

    descriptors: List[RequestDescriptor] = Field(
        default_factory=list,
        description="Descriptors to evaluate; the request is limited if any is.",
    )
