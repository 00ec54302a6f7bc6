"""
data_collection/domain/http.py

Result and option types for the HTTP client.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ApiResponse:
    """
    Outcome of one logical request (including all retries).

    ``duration_ms`` is wall-clock time across every attempt.
    """

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None
    headers: dict[str, str] | None = None
    duration_ms: int = 0


@dataclass(frozen=True)
class ConnectionTestResult:
    success: bool
    message: str
    latency_ms: int | None = None


@dataclass(frozen=True)
class PaginationOptions:
    """
    Page traversal options for ``HttpClient.fetch_paginated``.

    ``get_next_page`` returns an explicit page number, any other non-None
    sentinel to advance by one, or None to stop. ``get_data`` extracts the
    records of one page; when omitted, ``data_path`` (dotted path such as
    ``"data.items"``) is followed, and failing that the payload itself is
    used (lists as-is, anything else wrapped in a list).
    """

    page_param: str = "page"
    limit_param: str = "limit"
    page_size: int = 100
    max_pages: int = 10
    get_next_page: Callable[[Any], Any] | None = None
    get_data: Callable[[Any], list[Any]] | None = None
    data_path: str | None = None
