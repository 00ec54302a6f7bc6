"""
data_collection/config.py

Environment-driven configuration for the ingestion pipeline.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

OAUTH2_FAILURE_POLICIES = {"degrade", "fail"}

ENV_FILES = (".env", ".env.local")
_TRUTHY = {"1", "true", "yes", "on"}


def _iter_env_file(path: Path) -> Iterator[tuple[str, str]]:
    for entry in path.read_text(encoding="utf-8").splitlines():
        entry = entry.strip()
        if not entry or entry.startswith("#") or "=" not in entry:
            continue
        name, _, raw = entry.partition("=")
        name = name.strip()
        if name:
            yield name, raw.strip().strip("\"'")


def load_env_files() -> None:
    """
    Populate ``os.environ`` from the project's dotenv files.

    Variables already set in the process win over file values.
    """

    root = Path(__file__).resolve().parents[1]
    for path in (root / filename for filename in ENV_FILES):
        if path.is_file():
            for name, value in _iter_env_file(path):
                os.environ.setdefault(name, value)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_bool_env(name: str, default: bool) -> bool:
    value = _env(name)
    return default if value is None else value.lower() in _TRUTHY


def _get_int_env(name: str, default: int) -> int:
    """
    Integer env var; unset or unparseable values give ``default``.
    """

    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    value = _env(name)
    return default if value is None else value


@dataclass(frozen=True)
class HttpClientSettings:
    """
    Shared HTTP behavior settings for the API client.
    """

    rate_limit_max_requests: int = 100
    rate_limit_window_ms: int = 60_000
    default_timeout_ms: int = 30_000
    default_retry_count: int = 3
    default_retry_delay_ms: int = 1_000
    oauth2_failure_policy: str = "degrade"


@dataclass(frozen=True)
class ScrapingSettings:
    """
    Runtime settings for web scraping.
    """

    default_user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "tr-TR,tr;q=0.9,en-US;q=0.8,en;q=0.7"
    default_timeout_ms: int = 30_000
    default_page_delay_ms: int = 1_000
    spa_min_html_bytes: int = 5_000


@dataclass(frozen=True)
class FileParserSettings:
    """
    Defaults applied when a caller omits file upload options.
    """

    default_preview_rows: int = 100
    default_delimiter: str = ","
    default_encoding: str = "utf-8"


@dataclass(frozen=True)
class ValidationSettings:
    """
    Limits for the validation pipeline.
    """

    max_issues: int = 10_000
    log_issues: bool = False


@lru_cache(maxsize=1)
def get_http_client_settings() -> HttpClientSettings:
    """
    Return cached HTTP client settings from environment variables.
    """

    policy = _get_str_env("DATA_COLLECTION_OAUTH2_FAILURE_POLICY", "degrade").lower()
    if policy not in OAUTH2_FAILURE_POLICIES:
        policy = "degrade"
    return HttpClientSettings(
        rate_limit_max_requests=max(1, _get_int_env("DATA_COLLECTION_RATE_LIMIT_MAX_REQUESTS", 100)),
        rate_limit_window_ms=max(1, _get_int_env("DATA_COLLECTION_RATE_LIMIT_WINDOW_MS", 60_000)),
        default_timeout_ms=max(1, _get_int_env("DATA_COLLECTION_HTTP_TIMEOUT_MS", 30_000)),
        default_retry_count=max(0, _get_int_env("DATA_COLLECTION_HTTP_RETRY_COUNT", 3)),
        default_retry_delay_ms=max(0, _get_int_env("DATA_COLLECTION_HTTP_RETRY_DELAY_MS", 1_000)),
        oauth2_failure_policy=policy,
    )


@lru_cache(maxsize=1)
def get_scraping_settings() -> ScrapingSettings:
    """
    Scraper defaults, read once per process.
    """

    return ScrapingSettings(
        default_user_agent=_get_str_env("DATA_COLLECTION_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        accept_language=_get_str_env(
            "DATA_COLLECTION_SCRAPE_ACCEPT_LANGUAGE",
            "tr-TR,tr;q=0.9,en-US;q=0.8,en;q=0.7",
        ),
        default_timeout_ms=max(1, _get_int_env("DATA_COLLECTION_SCRAPE_TIMEOUT_MS", 30_000)),
        default_page_delay_ms=max(0, _get_int_env("DATA_COLLECTION_SCRAPE_PAGE_DELAY_MS", 1_000)),
        spa_min_html_bytes=max(0, _get_int_env("DATA_COLLECTION_SPA_MIN_HTML_BYTES", 5_000)),
    )


@lru_cache(maxsize=1)
def get_file_parser_settings() -> FileParserSettings:
    """
    Return cached file parser defaults from environment variables.
    """

    return FileParserSettings(
        default_preview_rows=max(1, _get_int_env("DATA_COLLECTION_PREVIEW_ROWS", 100)),
        default_delimiter=_get_str_env("DATA_COLLECTION_CSV_DELIMITER", ","),
        default_encoding=_get_str_env("DATA_COLLECTION_FILE_ENCODING", "utf-8"),
    )


@lru_cache(maxsize=1)
def get_validation_settings() -> ValidationSettings:
    """
    Return cached validation settings from environment variables.
    """

    return ValidationSettings(
        max_issues=max(1, _get_int_env("DATA_COLLECTION_MAX_VALIDATION_ISSUES", 10_000)),
        log_issues=_get_bool_env("DATA_COLLECTION_LOG_VALIDATION_ISSUES", False),
    )
