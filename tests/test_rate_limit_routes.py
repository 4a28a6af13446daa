"""Tests for the fixed-window HTTP endpoints.

The rate limit service dependency is overridden with one backed by the
in-memory store and a pinned wall clock, so no Redis is needed.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from ratelimiter.core import rate_limit
from ratelimiter.core.app_factory import create_app
from ratelimiter.core.config import settings
from ratelimiter.core.errors import ConfigurationAppError, StoreUnavailableError
from ratelimiter.core.rate_limit import get_counter_store, get_rate_limit_service
from ratelimiter.schemas.rate_limit import RateLimitRule, TimeInterval
from ratelimiter.services.rate_limit_service import RateLimitService
from ratelimiter.services.window_counter import FixedWindowCounter

URL = "/api/v1/ratelimit/fixedwindow"


@pytest.fixture
def service(counter) -> RateLimitService:
    rules = (
        RateLimitRule(account_id="acct1", allowed_number_of_requests=2, time_interval=TimeInterval.MINUTE),
        RateLimitRule(request_type="login", allowed_number_of_requests=1, time_interval=TimeInterval.HOUR),
    )
    return RateLimitService(rules, counter)


@pytest.fixture
def client(service, store) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_rate_limit_service] = lambda: service
    app.dependency_overrides[get_counter_store] = lambda: store
    return TestClient(app)


def _body(*descriptors: dict) -> dict:
    return {"descriptors": list(descriptors)}


def test_admits_until_allowance_is_used(client: TestClient) -> None:
    a = {"accountId": "acct1", "clientIp": "1.1.1.1"}
    b = {"accountId": "acct1", "clientIp": "2.2.2.2"}

    assert client.post(URL, json=_body(a)).status_code == 200
    assert client.post(URL, json=_body(b)).status_code == 200

    response = client.post(URL, json=_body(a))
    assert response.status_code == 429
    assert response.content == b""


def test_any_limited_descriptor_limits_request(client: TestClient) -> None:
    login = {"requestType": "login"}
    assert client.post(URL, json=_body(login)).status_code == 200

    response = client.post(URL, json=_body({"accountId": "acct1"}, login))

    assert response.status_code == 429


def test_unmatched_descriptors_are_always_admitted(client: TestClient) -> None:
    statuses = {
        client.post(URL, json=_body({"clientIp": "9.9.9.9"}, {})).status_code
        for _ in range(20)
    }

    assert statuses == {200}


def test_empty_descriptor_list_is_admitted(client: TestClient) -> None:
    assert client.post(URL, json={"descriptors": []}).status_code == 200


def test_invalid_body_is_rejected(client: TestClient) -> None:
    response = client.post(URL, json={"descriptors": [{"accountId": 123}]})

    assert response.status_code == 422


def test_store_unavailable_returns_503(wall_clock) -> None:
    down = Mock()
    down.get.side_effect = StoreUnavailableError(
        code="store_unavailable",
        message="Counter store is unreachable",
        details={"operation": "get", "backend": "redis"},
    )
    rules = (RateLimitRule(account_id="acct1", allowed_number_of_requests=2, time_interval=TimeInterval.MINUTE),)
    app = create_app()
    app.dependency_overrides[get_rate_limit_service] = lambda: RateLimitService(
        rules, FixedWindowCounter(down, clock=wall_clock)
    )

    response = TestClient(app).post(URL, json=_body({"accountId": "acct1"}))

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "store_unavailable"
    down.get.assert_called_once_with("accountId:acct1:time:9:5")
    down.incr.assert_not_called()


def test_malformed_counter_returns_500(client: TestClient, store) -> None:
    store.set_with_expiry("accountId:acct1:time:9:5", "garbage", 60)

    response = client.post(URL, json=_body({"accountId": "acct1"}))

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "malformed_counter_value"


def test_disabled_rate_limiting_admits_everything(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_enabled", False)

    statuses = {client.post(URL, json=_body({"accountId": "acct1"})).status_code for _ in range(5)}

    assert statuses == {200}


def test_get_endpoint_is_reachable(client: TestClient) -> None:
    assert client.get(URL).status_code == 200


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/ready").status_code == 200


def test_readiness_reports_unreachable_store() -> None:
    app = create_app()
    down = Mock()
    down.ping.return_value = False
    app.dependency_overrides[get_counter_store] = lambda: down

    response = TestClient(app).get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "unavailable"}


def test_openapi_documents_store_errors(client: TestClient, monkeypatch) -> None:
    schema = client.get("/openapi.json").json()

    assert "503" in schema["paths"][URL]["post"]["responses"]
    assert "ErrorResponse" in schema["components"]["schemas"]
    assert {"RateLimit", "Health"} <= {t["name"] for t in schema["tags"]}

    from ratelimiter.core import rate_limit

    monkeypatch.setattr(settings.store, "backend", "memory")
    monkeypatch.setattr(settings.app, "rate_limit_rules", '[{"accountId": "x", "allowedNumberOfRequests": 1, "timeInterval": "MINUTE"}]')
    rate_limit.reset_rate_limit_service()

    service = get_rate_limit_service()

    assert get_rate_limit_service() is service
    assert len(service.rules) == 1
    rate_limit.reset_rate_limit_service()


def test_invalid_rules_abort_startup(monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_rules", "{not json")
    rate_limit.reset_rate_limit_service()
    app = create_app()

    with pytest.raises(ConfigurationAppError) as exc_info:
        with TestClient(app):
            pass

    assert exc_info.value.code == "rules_invalid_json"


def test_startup_loads_rules_and_shutdown_resets(monkeypatch) -> None:
    monkeypatch.setattr(settings.store, "backend", "memory")
    monkeypatch.setattr(settings.app, "rate_limit_rules", '[{"accountId": "x", "allowedNumberOfRequests": 1, "timeInterval": "MINUTE"}]')
    rate_limit.reset_rate_limit_service()

    with TestClient(create_app()) as started:
        assert rate_limit._components is not None
        assert started.post(URL, json=_body({"accountId": "x"})).status_code == 200

    assert rate_limit._components is None


def test_counter_store_is_shared_with_service(monkeypatch) -> None:
    monkeypatch.setattr(settings.store, "backend", "memory")
    monkeypatch.setattr(settings.app, "rate_limit_rules", "[]")
    rate_limit.reset_rate_limit_service()

    store = get_counter_store()
    get_rate_limit_service()

    assert get_counter_store() is store
    assert rate_limit._components == (get_rate_limit_service(), store)
    rate_limit.reset_rate_limit_service()
