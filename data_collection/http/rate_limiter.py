"""
Host-keyed fixed-window request limiter.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from data_collection.config import get_http_client_settings
from data_collection.http.errors import RateLimitExceededError


@dataclass
class _WindowState:
    count: int
    reset_at: float


class HostRateLimiter:
    """
    Allows at most ``max_requests`` per hostname inside each fixed window.

    A window opens on the first request for a host and expires lazily on the
    first request seen after ``reset_at``.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_ms: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max(1, max_requests)
        self._window_seconds = max(1, window_ms) / 1000.0
        self._clock = clock
        self._windows: dict[str, _WindowState] = {}
        self._lock = threading.Lock()

    def acquire(self, url: str) -> None:
        """
        Consume one request slot for the URL's host or raise RateLimitExceededError.
        """

        host = _hostname(url)
        with self._lock:
            now = self._clock()
            state = self._windows.get(host)
            if state is None or now > state.reset_at:
                self._windows[host] = _WindowState(count=1, reset_at=now + self._window_seconds)
                return
            if state.count >= self._max_requests:
                raise RateLimitExceededError(
                    f"Rate limit exceeded for {host}: {self._max_requests} requests per "
                    f"{int(self._window_seconds * 1000)}ms."
                )
            state.count += 1

    def remaining(self, url: str) -> int:
        host = _hostname(url)
        with self._lock:
            state = self._windows.get(host)
            if state is None or self._clock() > state.reset_at:
                return self._max_requests
            return max(0, self._max_requests - state.count)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


def _hostname(url: str) -> str:
    parsed = urlparse(url)
    return (parsed.hostname or parsed.netloc or parsed.path).lower()


@lru_cache(maxsize=1)
def get_shared_rate_limiter() -> HostRateLimiter:
    """
    Return one process-wide limiter for callers that want cross-client budgets.
    """

    settings = get_http_client_settings()
    return HostRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
    )
