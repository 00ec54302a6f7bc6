"""
data_collection/http/client.py

Retrying, rate-limited REST client with auth injection and page traversal.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests
from pydantic import ValidationError
from requests.structures import CaseInsensitiveDict

from data_collection.config import HttpClientSettings, get_http_client_settings
from data_collection.domain.http import ApiResponse, ConnectionTestResult, PaginationOptions
from data_collection.http.auth import AuthInjector
from data_collection.http.errors import OAuth2TokenError, RateLimitExceededError, RequestTimeoutError
from data_collection.http.rate_limiter import HostRateLimiter
from data_collection.logging_utils import log_event
from data_collection.schemas import ApiRequestConfig, coerce_model, format_validation_error

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    requests.RequestException,
    RequestTimeoutError,
    OAuth2TokenError,
    ValueError,
)

CONNECTION_TEST_TIMEOUT_MS = 10_000


class HttpClient:
    """
    Executes one logical request per call.

    Only raised exceptions are retried. A non-2xx status is a completed
    request and comes back as ``success=False`` with the status code.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        settings: HttpClientSettings | None = None,
        rate_limiter: HostRateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or get_http_client_settings()
        self._session = session or requests.Session()
        self._rate_limiter = rate_limiter or HostRateLimiter(
            max_requests=self._settings.rate_limit_max_requests,
            window_ms=self._settings.rate_limit_window_ms,
        )
        self._sleep = sleep
        self._clock = clock
        self._auth = AuthInjector(
            session=self._session,
            failure_policy=self._settings.oauth2_failure_policy,
            token_timeout_seconds=self._settings.default_timeout_ms / 1000.0,
        )

    def request(self, config: ApiRequestConfig | Mapping[str, Any]) -> ApiResponse:
        """
        Run the request with up to ``retry_count`` retries and linear backoff.
        """

        started = self._clock()
        try:
            request_config = coerce_model(ApiRequestConfig, config)
        except ValidationError as exc:
            return ApiResponse(success=False, error=format_validation_error(exc))

        try:
            self._rate_limiter.acquire(request_config.url)
        except RateLimitExceededError as exc:
            log_event(logger, logging.WARNING, "http_rate_limited", url=request_config.url)
            return ApiResponse(success=False, error=str(exc), duration_ms=self._elapsed_ms(started))

        last_error: Exception | None = None
        for attempt in range(request_config.retry_count + 1):
            try:
                response = self._execute(request_config)
            except RETRYABLE_EXCEPTIONS as exc:
                last_error = exc
                if attempt < request_config.retry_count:
                    delay_ms = request_config.retry_delay * (attempt + 1)
                    log_event(
                        logger,
                        logging.WARNING,
                        "http_request_retry",
                        url=request_config.url,
                        attempt=attempt + 1,
                        delay_ms=delay_ms,
                        error=str(exc),
                    )
                    self._sleep(delay_ms / 1000.0)
                continue
            return ApiResponse(
                success=response.success,
                data=response.data,
                error=response.error,
                status_code=response.status_code,
                headers=response.headers,
                duration_ms=self._elapsed_ms(started),
            )

        log_event(
            logger,
            logging.ERROR,
            "http_request_failed",
            url=request_config.url,
            attempts=request_config.retry_count + 1,
            error=str(last_error),
        )
        return ApiResponse(
            success=False,
            error=str(last_error) if last_error else "Unknown error",
            duration_ms=self._elapsed_ms(started),
        )

    def test_connection(self, config: ApiRequestConfig | Mapping[str, Any]) -> ConnectionTestResult:
        """
        Single attempt with a 10s timeout; latency is reported either way.
        """

        started = self._clock()
        try:
            request_config = coerce_model(ApiRequestConfig, config)
        except ValidationError as exc:
            return ConnectionTestResult(success=False, message=format_validation_error(exc))

        response = self.request(
            request_config.model_copy(update={"retry_count": 0, "timeout": CONNECTION_TEST_TIMEOUT_MS})
        )
        latency_ms = self._elapsed_ms(started)
        if response.success:
            return ConnectionTestResult(
                success=True,
                message=f"Connection succeeded ({latency_ms}ms)",
                latency_ms=latency_ms,
            )
        return ConnectionTestResult(
            success=False,
            message=response.error or "Connection failed",
            latency_ms=latency_ms,
        )

    def fetch_paginated(
        self,
        config: ApiRequestConfig | Mapping[str, Any],
        options: PaginationOptions | None = None,
    ) -> ApiResponse:
        """
        Follow page/limit query parameters and concatenate every page's records.

        Traversal stops when ``get_next_page`` returns None, when a page is
        empty, when a page is shorter than ``page_size`` (no ``get_next_page``),
        or after ``max_pages`` requests. A failed first page is returned as is;
        a later failure keeps the records gathered so far.
        """

        started = self._clock()
        options = options or PaginationOptions()
        try:
            base_config = coerce_model(ApiRequestConfig, config)
        except ValidationError as exc:
            return ApiResponse(success=False, error=format_validation_error(exc))

        records: list[Any] = []
        current_page = 1
        pages_fetched = 0
        has_more = True
        while has_more and pages_fetched < options.max_pages:
            query_params = dict(base_config.query_params or {})
            query_params[options.page_param] = str(current_page)
            query_params[options.limit_param] = str(options.page_size)
            response = self.request(base_config.model_copy(update={"query_params": query_params}))
            pages_fetched += 1

            if not response.success or response.data is None:
                if pages_fetched == 1:
                    return response
                log_event(
                    logger,
                    logging.WARNING,
                    "http_pagination_stopped",
                    url=base_config.url,
                    page=current_page,
                    error=response.error,
                )
                break

            page_records = self._extract_page(response.data, options)
            records.extend(page_records)
            if not page_records:
                break

            if options.get_next_page is not None:
                next_page = options.get_next_page(response.data)
                has_more = next_page is not None
                if isinstance(next_page, int) and not isinstance(next_page, bool):
                    current_page = next_page
                else:
                    current_page += 1
            else:
                has_more = len(page_records) == options.page_size
                current_page += 1

        return ApiResponse(success=True, data=records, duration_ms=self._elapsed_ms(started))

    def _execute(self, config: ApiRequestConfig) -> ApiResponse:
        headers = {**DEFAULT_HEADERS, **(config.headers or {})}
        params = dict(config.query_params or {})
        self._auth.apply(config.auth, headers=headers, params=params)

        body: str | bytes | None = None
        if config.body is not None and config.method != "GET":
            body = config.body if isinstance(config.body, (str, bytes)) else json.dumps(config.body)

        try:
            response = self._session.request(
                method=config.method,
                url=config.url,
                params=params or None,
                headers=headers,
                data=body,
                timeout=config.timeout / 1000.0,
            )
        except requests.Timeout as exc:
            raise RequestTimeoutError(f"Request timed out after {config.timeout}ms") from exc

        response_headers = CaseInsensitiveDict(response.headers or {})
        content_type = (response_headers.get("content-type") or "").lower()
        data: Any = None
        if "application/json" in content_type:
            data = response.json()
        elif "text/" in content_type:
            data = response.text

        plain_headers = {str(key).lower(): str(value) for key, value in response_headers.items()}
        if not 200 <= response.status_code < 300:
            reason = getattr(response, "reason", "") or ""
            return ApiResponse(
                success=False,
                data=data,
                error=f"HTTP {response.status_code}: {reason}" if reason else f"HTTP {response.status_code}",
                status_code=response.status_code,
                headers=plain_headers,
            )
        return ApiResponse(
            success=True,
            data=data,
            status_code=response.status_code,
            headers=plain_headers,
        )

    @staticmethod
    def _extract_page(payload: Any, options: PaginationOptions) -> list[Any]:
        if options.get_data is not None:
            return list(options.get_data(payload) or [])
        if options.data_path:
            payload = get_nested_value(payload, options.data_path)
        if payload is None:
            return []
        if isinstance(payload, list):
            return payload
        return [payload]

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int(round((self._clock() - started) * 1000)))


def get_nested_value(payload: Any, path: str) -> Any:
    """
    Follow a dotted path (``"data.items"`` or ``"results.0.rows"``) into dicts and lists.
    """

    current = payload
    for part in path.split("."):
        if not part:
            continue
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, list) and part.lstrip("-").isdigit():
            index = int(part)
            current = current[index] if -len(current) <= index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current
