"""
data_collection/domain/scraping.py

Scraping outcome models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ScrapingEngine:
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class ScrapingResult:
    """
    Outcome for one scrape invocation.
    """

    success: bool
    data: list[dict[str, Any]] = field(default_factory=list)
    pages_scraped: int = 0
    total_records: int = 0
    duration_ms: int = 0
    error: str | None = None


@dataclass(frozen=True)
class UrlTestResult:
    success: bool
    message: str
    requires_javascript: bool = False
    suggested_engine: str = ScrapingEngine.STATIC
