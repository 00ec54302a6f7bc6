"""
data_collection/scraping/service.py

Static and browser-rendered scraping with selector extraction and link pagination.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from pydantic import ValidationError

from data_collection.config import ScrapingSettings, get_scraping_settings
from data_collection.domain.scraping import ScrapingEngine, ScrapingResult, UrlTestResult
from data_collection.logging_utils import log_event
from data_collection.schemas import ScrapingConfig, coerce_model, format_validation_error
from data_collection.schemas.base import require_http_url
from data_collection.scraping.extraction import extract_records
from data_collection.scraping.renderers import PlaywrightRenderer, Renderer, RendererUnavailableError
from data_collection.scraping.templates import create_template

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
PROBE_USER_AGENT = "Mozilla/5.0 (compatible; DataCollector/1.0)"
SPA_MARKERS = ("__NEXT_DATA__", "ng-app", 'id="app"', "data-reactroot")


class ScrapingService:
    """
    Runs one scrape per call and always returns a ScrapingResult.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        settings: ScrapingSettings | None = None,
        renderer: Renderer | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or get_scraping_settings()
        self.session = session or requests.Session()
        self.renderer = renderer or PlaywrightRenderer(default_user_agent=self.settings.default_user_agent)
        self._sleep = sleep
        self._clock = clock

    create_template = staticmethod(create_template)

    def scrape(self, config: ScrapingConfig | Mapping[str, Any]) -> ScrapingResult:
        started = self._clock()
        try:
            scrape_config = coerce_model(ScrapingConfig, config)
        except ValidationError as exc:
            return ScrapingResult(success=False, error=format_validation_error(exc))

        try:
            if scrape_config.uses_renderer:
                records, pages = self._scrape_rendered(scrape_config)
            else:
                records, pages = self._scrape_static(scrape_config)
        except RendererUnavailableError as exc:
            log_event(logger, logging.ERROR, "renderer_unavailable", url=scrape_config.url)
            return ScrapingResult(success=False, error=str(exc), duration_ms=self._elapsed_ms(started))
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "scrape_failed",
                url=scrape_config.url,
                engine=scrape_config.engine,
                error=str(exc),
            )
            return ScrapingResult(success=False, error=str(exc), duration_ms=self._elapsed_ms(started))

        return ScrapingResult(
            success=True,
            data=records,
            pages_scraped=pages,
            total_records=len(records),
            duration_ms=self._elapsed_ms(started),
        )

    def test_url(self, url: str) -> UrlTestResult:
        """
        Probe a URL and guess whether it needs a rendering engine.
        """

        headers = {"User-Agent": PROBE_USER_AGENT}
        timeout = self.settings.default_timeout_ms / 1000.0
        try:
            target = require_http_url(url)
            head = self.session.head(target, headers=headers, timeout=timeout, allow_redirects=True)
            if not 200 <= head.status_code < 300:
                return UrlTestResult(success=False, message=_status_message(head))
            html = self.session.get(target, headers=headers, timeout=timeout).text or ""
        except (requests.RequestException, ValueError) as exc:
            return UrlTestResult(success=False, message=str(exc))

        requires_javascript = any(marker in html for marker in SPA_MARKERS) or (
            len(html.encode("utf-8")) < self.settings.spa_min_html_bytes
        )
        return UrlTestResult(
            success=True,
            message="URL is reachable",
            requires_javascript=requires_javascript,
            suggested_engine=ScrapingEngine.DYNAMIC if requires_javascript else ScrapingEngine.STATIC,
        )

    def _scrape_static(self, config: ScrapingConfig) -> tuple[list[dict[str, Any]], int]:
        records: list[dict[str, Any]] = []
        pages = 0
        current_url: str | None = config.url
        while current_url and pages < config.max_pages:
            soup = BeautifulSoup(self._fetch_html(current_url, config), "html.parser")
            page_records = extract_records(soup, config.selectors)
            records.extend(page_records)
            pages += 1
            log_event(logger, logging.INFO, "page_scraped", url=current_url, records=len(page_records))

            next_url = None
            if config.pagination and config.pagination.enabled and config.pagination.next_selector:
                next_node = soup.select_one(config.pagination.next_selector)
                href = next_node.get("href") if next_node is not None else None
                if href:
                    next_url = urljoin(current_url, str(href))
                    if pages < config.max_pages:
                        self._sleep(config.pagination.delay / 1000.0)
            current_url = next_url
        return records, pages

    def _scrape_rendered(self, config: ScrapingConfig) -> tuple[list[dict[str, Any]], int]:
        records: list[dict[str, Any]] = []
        pages = 0
        with self.renderer.open(config) as session:
            current_url: str | None = config.url
            while current_url and pages < config.max_pages:
                soup = BeautifulSoup(session.load(current_url), "html.parser")
                page_records = extract_records(soup, config.selectors)
                records.extend(page_records)
                pages += 1
                log_event(
                    logger,
                    logging.INFO,
                    "page_scraped",
                    url=current_url,
                    records=len(page_records),
                    engine=ScrapingEngine.DYNAMIC,
                )

                next_url = None
                if config.pagination and config.pagination.enabled and config.pagination.next_selector:
                    next_url = session.next_link(config.pagination.next_selector)
                    if next_url and pages < config.max_pages:
                        self._sleep(config.pagination.delay / 1000.0)
                current_url = next_url
        return records, pages

    def _fetch_html(self, url: str, config: ScrapingConfig) -> str:
        headers = {
            "User-Agent": config.user_agent or self.settings.default_user_agent,
            "Accept": HTML_ACCEPT,
            "Accept-Language": self.settings.accept_language,
            **(config.headers or {}),
        }
        if config.cookies:
            headers["Cookie"] = "; ".join(f"{cookie.name}={cookie.value}" for cookie in config.cookies)

        response = self.session.get(url, headers=headers, timeout=config.timeout / 1000.0)
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(_status_message(response), response=response)
        return response.text

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int(round((self._clock() - started) * 1000)))


def _status_message(response: Any) -> str:
    reason = getattr(response, "reason", "") or ""
    return f"HTTP {response.status_code}: {reason}" if reason else f"HTTP {response.status_code}"
