"""
tests/test_http_client.py

Unit tests for HttpClient, auth injection and pagination. A fake
requests.Session records every outgoing call; nothing touches the network.
"""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any

import pytest
import requests

from data_collection.config import HttpClientSettings
from data_collection.domain.http import PaginationOptions
from data_collection.http import HostRateLimiter, HttpClient, get_nested_value

API_URL = "https://api.example.com/v1/items"


class FakeResponse:
    def __init__(
        self,
        *,
        status_code: int = 200,
        payload: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
        reason: str = "OK",
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.reason = reason
        if headers is not None:
            self.headers = headers
        elif text is not None:
            self.headers = {"Content-Type": "text/plain"}
        else:
            self.headers = {"Content-Type": "application/json; charset=utf-8"}
        self.text = text if text is not None else ""

    def json(self) -> Any:
        return self._payload


class FakeSession:
    def __init__(
        self,
        responder: Callable[[dict[str, Any]], FakeResponse] | None = None,
        token_response: FakeResponse | Exception | None = None,
    ) -> None:
        self.calls: list[dict[str, Any]] = []
        self.posts: list[dict[str, Any]] = []
        self._responder = responder or (lambda call: FakeResponse(payload={"ok": True}))
        self._token_response = token_response

    def request(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        return self._responder(kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.posts.append({"url": url, **kwargs})
        if isinstance(self._token_response, Exception):
            raise self._token_response
        return self._token_response or FakeResponse(payload={"access_token": "tok-123"})


def _raise(exc: Exception) -> Callable[[dict[str, Any]], FakeResponse]:
    def responder(call: dict[str, Any]) -> FakeResponse:
        raise exc

    return responder


def _client(
    session: FakeSession,
    *,
    settings: HttpClientSettings | None = None,
    sleeps: list[float] | None = None,
    limiter: HostRateLimiter | None = None,
) -> HttpClient:
    recorded = sleeps if sleeps is not None else []
    return HttpClient(
        session=session,
        settings=settings or HttpClientSettings(),
        rate_limiter=limiter,
        sleep=recorded.append,
    )


# ---------------------------------------------------------------------------
# Auth injection
# ---------------------------------------------------------------------------


class TestAuthInjection:
    def test_bearer_token_sets_authorization_header(self) -> None:
        session = FakeSession()

        response = _client(session).request({"url": API_URL, "auth": {"type": "bearer", "token": "abc"}})

        assert response.success is True
        assert session.calls[0]["headers"]["Authorization"] == "Bearer abc"

    def test_basic_auth_encodes_credentials(self) -> None:
        session = FakeSession()

        _client(session).request({"url": API_URL, "auth": {"type": "basic", "username": "ada", "password": "s3cret"}})

        expected = base64.b64encode(b"ada:s3cret").decode("ascii")
        assert session.calls[0]["headers"]["Authorization"] == f"Basic {expected}"

    def test_api_key_in_header(self) -> None:
        session = FakeSession()

        _client(session).request(
            {"url": API_URL, "auth": {"type": "api_key", "key": "X-Api-Key", "value": "k1", "location": "header"}}
        )

        assert session.calls[0]["headers"]["X-Api-Key"] == "k1"
        assert "X-Api-Key" not in (session.calls[0]["params"] or {})

    def test_api_key_in_query_string(self) -> None:
        session = FakeSession()

        _client(session).request(
            {
                "url": API_URL,
                "queryParams": {"q": "shoes"},
                "auth": {"type": "api_key", "key": "api_key", "value": "k2", "location": "query"},
            }
        )

        call = session.calls[0]
        assert call["params"] == {"q": "shoes", "api_key": "k2"}
        assert "api_key" not in call["headers"]

    def test_oauth2_token_is_exchanged_before_request(self) -> None:
        session = FakeSession()
        auth = {
            "type": "oauth2",
            "clientId": "cid",
            "clientSecret": "csecret",
            "tokenUrl": "https://auth.example.com/token",
            "scopes": ["read", "write"],
        }

        _client(session).request({"url": API_URL, "auth": auth})

        assert session.posts[0]["data"] == {
            "grant_type": "client_credentials",
            "client_id": "cid",
            "client_secret": "csecret",
            "scope": "read write",
        }
        assert session.calls[0]["headers"]["Authorization"] == "Bearer tok-123"

    def test_oauth2_failure_degrades_to_unauthenticated_request(self) -> None:
        session = FakeSession(token_response=FakeResponse(status_code=401, payload={}, reason="Unauthorized"))
        auth = {"type": "oauth2", "client_id": "cid", "client_secret": "x", "token_url": "https://auth.example.com/t"}

        response = _client(session).request({"url": API_URL, "auth": auth})

        assert response.success is True
        assert "Authorization" not in session.calls[0]["headers"]

    def test_oauth2_failure_policy_fail_aborts_request(self) -> None:
        session = FakeSession(token_response=requests.ConnectionError("token host down"))
        auth = {"type": "oauth2", "client_id": "cid", "client_secret": "x", "token_url": "https://auth.example.com/t"}
        settings = HttpClientSettings(oauth2_failure_policy="fail")

        response = _client(session, settings=settings).request({"url": API_URL, "auth": auth, "retryCount": 0})

        assert response.success is False
        assert "OAuth2 token request failed" in (response.error or "")
        assert session.calls == []


# ---------------------------------------------------------------------------
# Request execution and retries
# ---------------------------------------------------------------------------


class TestRequest:
    def test_retry_count_bounds_total_attempts(self) -> None:
        session = FakeSession(responder=_raise(requests.ConnectionError("connection refused")))
        sleeps: list[float] = []

        response = _client(session, sleeps=sleeps).request({"url": API_URL, "retryCount": 3, "retryDelay": 100})

        assert len(session.calls) == 4
        assert response.success is False
        assert response.error == "connection refused"
        assert sleeps == pytest.approx([0.1, 0.2, 0.3])

    def test_large_retry_and_timeout_values_are_accepted(self) -> None:
        session = FakeSession(responder=_raise(requests.ConnectionError("down")))
        sleeps: list[float] = []

        response = _client(session, sleeps=sleeps).request(
            {"url": API_URL, "retryCount": 20, "retryDelay": 120_000, "timeout": 900_000}
        )

        assert len(session.calls) == 21
        assert session.calls[0]["timeout"] == pytest.approx(900.0)
        assert sleeps[0] == pytest.approx(120.0)
        assert response.success is False

    def test_zero_retries_means_single_attempt(self) -> None:
        session = FakeSession(responder=_raise(requests.ConnectionError("nope")))

        _client(session).request({"url": API_URL, "retryCount": 0})

        assert len(session.calls) == 1

    def test_http_error_status_is_returned_without_retry(self) -> None:
        session = FakeSession(
            responder=lambda call: FakeResponse(status_code=503, payload={"detail": "busy"}, reason="Service Unavailable")
        )

        response = _client(session).request({"url": API_URL, "retryCount": 3})

        assert len(session.calls) == 1
        assert response.success is False
        assert response.status_code == 503
        assert response.error == "HTTP 503: Service Unavailable"
        assert response.data == {"detail": "busy"}

    def test_timeout_is_reported_distinctly(self) -> None:
        session = FakeSession(responder=_raise(requests.Timeout("read timed out")))

        response = _client(session).request({"url": API_URL, "retryCount": 1, "timeout": 2500})

        assert len(session.calls) == 2
        assert response.error == "Request timed out after 2500ms"
        assert session.calls[0]["timeout"] == pytest.approx(2.5)

    def test_body_is_json_encoded_for_write_methods(self) -> None:
        session = FakeSession()

        _client(session).request({"url": API_URL, "method": "post", "body": {"name": "widget"}})

        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["data"] == '{"name": "widget"}'
        assert call["headers"]["Content-Type"] == "application/json"

    def test_text_responses_are_decoded_as_text(self) -> None:
        session = FakeSession(responder=lambda call: FakeResponse(text="pong", headers={"content-type": "text/plain"}))

        response = _client(session).request({"url": API_URL})

        assert response.data == "pong"
        assert response.headers == {"content-type": "text/plain"}

    def test_invalid_config_fails_before_any_io(self) -> None:
        session = FakeSession()

        response = _client(session).request({"url": "ftp://example.com/file", "method": "GET"})

        assert response.success is False
        assert (response.error or "").startswith("Invalid configuration")
        assert session.calls == []

    def test_connection_test_forces_single_short_attempt(self) -> None:
        session = FakeSession(responder=_raise(requests.ConnectionError("down")))

        result = _client(session).test_connection({"url": API_URL, "retryCount": 5, "timeout": 60000})

        assert result.success is False
        assert result.message == "down"
        assert result.latency_ms is not None
        assert len(session.calls) == 1
        assert session.calls[0]["timeout"] == pytest.approx(10.0)

    def test_connection_test_success_message(self) -> None:
        result = _client(FakeSession()).test_connection({"url": API_URL})

        assert result.success is True
        assert result.message.startswith("Connection succeeded")


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


class TestRateLimiting:
    def test_request_over_budget_is_rejected_without_network_call(self) -> None:
        now = [0.0]
        limiter = HostRateLimiter(max_requests=2, window_ms=1_000, clock=lambda: now[0])
        session = FakeSession()
        client = _client(session, limiter=limiter)

        first = client.request({"url": API_URL})
        second = client.request({"url": "https://api.example.com/v1/other"})
        third = client.request({"url": API_URL, "retryCount": 3})

        assert first.success and second.success
        assert third.success is False
        assert "Rate limit exceeded" in (third.error or "")
        assert len(session.calls) == 2

        now[0] = 1.5
        fourth = client.request({"url": API_URL})

        assert fourth.success is True
        assert len(session.calls) == 3

    def test_hosts_have_independent_budgets(self) -> None:
        limiter = HostRateLimiter(max_requests=1, window_ms=60_000, clock=lambda: 0.0)
        client = _client(FakeSession(), limiter=limiter)

        assert client.request({"url": "https://a.example.com/x"}).success is True
        assert client.request({"url": "https://b.example.com/x"}).success is True
        assert client.request({"url": "https://a.example.com/y"}).success is False

    def test_clients_get_isolated_limiters_by_default(self) -> None:
        settings = HttpClientSettings(rate_limit_max_requests=1)
        first = _client(FakeSession(), settings=settings)
        second = _client(FakeSession(), settings=settings)

        assert first.request({"url": API_URL}).success is True
        assert second.request({"url": API_URL}).success is True

    def test_remaining_and_reset(self) -> None:
        limiter = HostRateLimiter(max_requests=3, window_ms=60_000, clock=lambda: 0.0)

        limiter.acquire(API_URL)
        assert limiter.remaining(API_URL) == 2

        limiter.reset()
        assert limiter.remaining(API_URL) == 3


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def _paged_responder(pages: dict[int, Any]) -> Callable[[dict[str, Any]], FakeResponse]:
    def responder(call: dict[str, Any]) -> FakeResponse:
        page = int(call["params"]["page"])
        return FakeResponse(payload=pages.get(page, []))

    return responder


class TestFetchPaginated:
    def test_stops_at_first_short_page(self) -> None:
        session = FakeSession(responder=_paged_responder({1: [1, 2], 2: [3, 4], 3: [5], 4: [6, 7]}))

        response = _client(session).fetch_paginated({"url": API_URL}, PaginationOptions(page_size=2))

        assert response.success is True
        assert response.data == [1, 2, 3, 4, 5]
        assert [call["params"]["page"] for call in session.calls] == ["1", "2", "3"]
        assert all(call["params"]["limit"] == "2" for call in session.calls)

    def test_max_pages_is_never_exceeded(self) -> None:
        session = FakeSession(responder=lambda call: FakeResponse(payload=[{"id": 1}, {"id": 2}]))

        response = _client(session).fetch_paginated({"url": API_URL}, PaginationOptions(page_size=2, max_pages=3))

        assert len(session.calls) == 3
        assert len(response.data) == 6

    def test_data_path_extracts_nested_records(self) -> None:
        pages = {1: {"data": {"items": ["a", "b"]}}, 2: {"data": {"items": ["c"]}}}
        session = FakeSession(responder=_paged_responder(pages))

        response = _client(session).fetch_paginated(
            {"url": API_URL},
            PaginationOptions(page_size=2, data_path="data.items"),
        )

        assert response.data == ["a", "b", "c"]

    def test_get_next_page_controls_traversal(self) -> None:
        pages = {
            1: {"rows": [1], "next": 5},
            5: {"rows": [2], "next": None},
        }
        session = FakeSession(responder=_paged_responder(pages))

        response = _client(session).fetch_paginated(
            {"url": API_URL},
            PaginationOptions(
                page_size=50,
                get_data=lambda payload: payload["rows"],
                get_next_page=lambda payload: payload["next"],
            ),
        )

        assert response.data == [1, 2]
        assert [call["params"]["page"] for call in session.calls] == ["1", "5"]

    def test_empty_page_stops_traversal(self) -> None:
        session = FakeSession(responder=_paged_responder({1: []}))

        response = _client(session).fetch_paginated(
            {"url": API_URL},
            PaginationOptions(get_next_page=lambda payload: "more"),
        )

        assert response.data == []
        assert len(session.calls) == 1

    def test_first_page_failure_is_returned(self) -> None:
        session = FakeSession(responder=lambda call: FakeResponse(status_code=401, payload=None, reason="Unauthorized"))

        response = _client(session).fetch_paginated({"url": API_URL}, PaginationOptions())

        assert response.success is False
        assert response.status_code == 401

    def test_later_failure_keeps_accumulated_records(self) -> None:
        def responder(call: dict[str, Any]) -> FakeResponse:
            if call["params"]["page"] == "1":
                return FakeResponse(payload=[1, 2])
            return FakeResponse(status_code=500, payload=None, reason="Server Error")

        response = _client(FakeSession(responder=responder)).fetch_paginated(
            {"url": API_URL}, PaginationOptions(page_size=2)
        )

        assert response.success is True
        assert response.data == [1, 2]


def test_get_nested_value_walks_dicts_and_lists() -> None:
    payload = {"results": [{"rows": [1, 2]}, {"rows": [3]}]}

    assert get_nested_value(payload, "results.1.rows") == [3]
    assert get_nested_value(payload, "results.9.rows") is None
    assert get_nested_value(payload, "missing.key") is None
