"""
data_collection/scraping/renderers.py

Headless-browser rendering strategies for JavaScript-driven pages.
"""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlparse

from data_collection.config import DEFAULT_USER_AGENT
from data_collection.schemas import ScrapingConfig

BROWSER_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]


class RendererUnavailableError(RuntimeError):
    """
    Raised when the headless browser dependency is not installed.
    """


class RenderSession(ABC):
    """
    One open browser page for the duration of a scrape.
    """

    @abstractmethod
    def load(self, url: str) -> str:
        """
        Navigate to ``url`` and return the rendered HTML.
        """

    @abstractmethod
    def next_link(self, selector: str) -> str | None:
        """
        Return the absolute href of the element matching ``selector``, if any.
        """


class Renderer(ABC):
    @abstractmethod
    def open(self, config: ScrapingConfig) -> Any:
        """
        Return a context manager yielding a RenderSession; the browser is closed on exit.
        """


class PlaywrightRenderer(Renderer):
    """
    Chromium via Playwright's sync API. Playwright is imported on first use.
    """

    def __init__(self, *, default_user_agent: str = DEFAULT_USER_AGENT) -> None:
        self._default_user_agent = default_user_agent

    @contextmanager
    def open(self, config: ScrapingConfig) -> Iterator[RenderSession]:
        sync_api = _load_playwright()
        with sync_api.sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=True, args=BROWSER_LAUNCH_ARGS)
            try:
                context = browser.new_context(
                    user_agent=config.user_agent or self._default_user_agent,
                    extra_http_headers=dict(config.headers or {}),
                )
                if config.cookies:
                    default_domain = urlparse(config.url).hostname or ""
                    context.add_cookies(
                        [
                            {
                                "name": cookie.name,
                                "value": cookie.value,
                                "domain": cookie.domain or default_domain,
                                "path": "/",
                            }
                            for cookie in config.cookies
                        ]
                    )
                yield _PlaywrightSession(page=context.new_page(), config=config)
            finally:
                browser.close()


class _PlaywrightSession(RenderSession):
    def __init__(self, *, page: Any, config: ScrapingConfig) -> None:
        self._page = page
        self._config = config

    def load(self, url: str) -> str:
        self._page.goto(url, wait_until="networkidle", timeout=self._config.timeout)
        if self._config.wait_for_selector:
            self._page.wait_for_selector(self._config.wait_for_selector, timeout=self._config.timeout)
        return self._page.content()

    def next_link(self, selector: str) -> str | None:
        element = self._page.query_selector(selector)
        if element is None:
            return None
        href = element.evaluate("el => el.href")
        return str(href) if href else None


def _load_playwright() -> Any:
    try:
        return importlib.import_module("playwright.sync_api")
    except ImportError as exc:
        raise RendererUnavailableError(
            "Playwright is not installed. Install the 'browser' extra and run "
            "'playwright install chromium' to enable dynamic scraping."
        ) from exc
