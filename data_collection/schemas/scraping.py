"""
data_collection/schemas/scraping.py

Inbound configuration for scrape invocations.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from data_collection.schemas.base import BoundaryModel, require_http_url

_ENGINE_ALIASES = {
    "cheerio": "static",
    "puppeteer": "dynamic",
    "browser": "dynamic",
}

SelectorTransform = Literal["text", "html", "number", "date", "trim", "lowercase", "uppercase"]


class ScrapingSelector(BoundaryModel):
    """
    One output field. ``multiple`` marks the selector that yields one record per match.
    """

    name: str = Field(min_length=1)
    selector: str = Field(min_length=1)
    selector_type: Literal["css", "xpath"] = "css"
    attribute: str | None = None
    multiple: bool = False
    transform: SelectorTransform | None = None


class PaginationConfig(BoundaryModel):
    enabled: bool = False
    next_selector: str | None = None
    max_pages: int = Field(default=1, ge=1)
    delay: int = Field(default=1_000, ge=0)


class Cookie(BoundaryModel):
    name: str
    value: str
    domain: str | None = None


class ScrapingConfig(BoundaryModel):
    """
    Scrape target plus extraction rules. ``timeout`` and delays are milliseconds.
    """

    url: str
    engine: Literal["static", "dynamic"] = "static"
    selectors: list[ScrapingSelector] = Field(min_length=1)
    pagination: PaginationConfig | None = None
    wait_for_selector: str | None = None
    user_agent: str | None = None
    cookies: list[Cookie] | None = None
    headers: dict[str, str] | None = None
    timeout: int = Field(default=30_000, ge=1)
    javascript: bool = False

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        return require_http_url(value)

    @field_validator("engine", mode="before")
    @classmethod
    def _normalize_engine(cls, value: Any) -> Any:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return _ENGINE_ALIASES.get(normalized, normalized)
        return value

    @property
    def uses_renderer(self) -> bool:
        return self.javascript or self.engine == "dynamic"

    @property
    def max_pages(self) -> int:
        return self.pagination.max_pages if self.pagination is not None else 1
