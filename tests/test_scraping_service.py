"""
tests/test_scraping_service.py

Unit tests for ScrapingService extraction, pagination and URL probing.

Coverage:
  - Multiple-mode and single-record extraction with transforms
  - Link pagination with relative hrefs, page cap and politeness delay
  - Renderer strategy: missing dependency, session cleanup on error
  - test_url heuristics and failure messages
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import pytest

from data_collection.config import ScrapingSettings
from data_collection.schemas import ScrapingConfig
from data_collection.scraping import RenderSession, Renderer, ScrapingService
from data_collection.scraping.extraction import transform_value

CATALOG_URL = "https://shop.example.com/catalog"

PRODUCT_PAGE = """
<html><body>
  <div class="product" data-sku="A-1">
    <h2 class="title">Laptop Pro</h2>
    <span class="price">$1,299.50</span>
    <a class="link" href="/p/a-1">details</a>
  </div>
  <div class="product" data-sku="B-2">
    <h2 class="title">  Dock  </h2>
    <span class="price">$89</span>
  </div>
</body></html>
"""


class FakeResponse:
    def __init__(self, text: str = "", *, status_code: int = 200, reason: str = "OK") -> None:
        self.text = text
        self.status_code = status_code
        self.reason = reason


class FakeSession:
    def __init__(self, pages: dict[str, FakeResponse], head: FakeResponse | None = None) -> None:
        self.pages = pages
        self.head_response = head or FakeResponse()
        self.gets: list[dict[str, Any]] = []
        self.heads: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.gets.append({"url": url, **kwargs})
        return self.pages.get(url, FakeResponse(status_code=404, reason="Not Found"))

    def head(self, url: str, **kwargs: Any) -> FakeResponse:
        self.heads.append(url)
        return self.head_response


class FakeRenderSession(RenderSession):
    def __init__(self, pages: dict[str, str], fail: bool = False) -> None:
        self.pages = pages
        self.fail = fail
        self.loaded: list[str] = []

    def load(self, url: str) -> str:
        if self.fail:
            raise RuntimeError("navigation timeout")
        self.loaded.append(url)
        return self.pages[url]

    def next_link(self, selector: str) -> str | None:
        return None


class FakeRenderer(Renderer):
    def __init__(self, session: FakeRenderSession) -> None:
        self.session = session
        self.opened = 0
        self.closed = 0

    @contextmanager
    def open(self, config: ScrapingConfig) -> Iterator[RenderSession]:
        self.opened += 1
        try:
            yield self.session
        finally:
            self.closed += 1


def _service(
    session: FakeSession,
    *,
    renderer: Renderer | None = None,
    sleeps: list[float] | None = None,
) -> ScrapingService:
    recorded = sleeps if sleeps is not None else []
    return ScrapingService(
        session=session,
        settings=ScrapingSettings(),
        renderer=renderer or FakeRenderer(FakeRenderSession({})),
        sleep=recorded.append,
    )


PRODUCT_SELECTORS = [
    {"name": "sku", "selector": "div.product", "multiple": True, "attribute": "data-sku"},
    {"name": "title", "selector": "h2.title"},
    {"name": "price", "selector": "span.price", "transform": "number"},
    {"name": "link", "selector": "a.link", "attribute": "href"},
]


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class TestExtraction:
    def test_one_record_per_repeated_element(self) -> None:
        session = FakeSession({CATALOG_URL: FakeResponse(PRODUCT_PAGE)})

        result = _service(session).scrape({"url": CATALOG_URL, "selectors": PRODUCT_SELECTORS})

        assert result.success is True
        assert result.pages_scraped == 1
        assert result.total_records == 2
        assert result.data == [
            {"sku": "A-1", "title": "Laptop Pro", "price": 1299.5, "link": "/p/a-1"},
            {"sku": "B-2", "title": "Dock", "price": 89.0, "link": None},
        ]

    def test_without_multiple_selector_page_is_one_record(self) -> None:
        session = FakeSession({CATALOG_URL: FakeResponse(PRODUCT_PAGE)})
        selectors = [
            {"name": "first_title", "selector": "h2.title", "transform": "uppercase"},
            {"name": "missing", "selector": "footer"},
        ]

        result = _service(session).scrape({"url": CATALOG_URL, "selectors": selectors})

        assert result.data == [{"first_title": "LAPTOP PRO  DOCK", "missing": None}]

    def test_request_carries_browser_headers_and_cookies(self) -> None:
        session = FakeSession({CATALOG_URL: FakeResponse(PRODUCT_PAGE)})

        _service(session).scrape(
            {
                "url": CATALOG_URL,
                "selectors": PRODUCT_SELECTORS,
                "userAgent": "TestBot/2.0",
                "headers": {"X-Trace": "abc"},
                "cookies": [{"name": "sid", "value": "42"}, {"name": "lang", "value": "tr"}],
                "timeout": 5000,
            }
        )

        call = session.gets[0]
        assert call["headers"]["User-Agent"] == "TestBot/2.0"
        assert call["headers"]["X-Trace"] == "abc"
        assert call["headers"]["Cookie"] == "sid=42; lang=tr"
        assert call["timeout"] == pytest.approx(5.0)

    def test_xpath_selectors_fail_the_scrape(self) -> None:
        session = FakeSession({CATALOG_URL: FakeResponse(PRODUCT_PAGE)})
        selectors = [{"name": "title", "selector": "//h2", "selectorType": "xpath"}]

        result = _service(session).scrape({"url": CATALOG_URL, "selectors": selectors})

        assert result.success is False
        assert "only CSS selectors are supported" in (result.error or "")

    def test_http_error_fails_the_scrape(self) -> None:
        session = FakeSession(
            {CATALOG_URL: FakeResponse(status_code=500, reason="Internal Server Error")}
        )

        result = _service(session).scrape({"url": CATALOG_URL, "selectors": PRODUCT_SELECTORS})

        assert result.success is False
        assert result.error == "HTTP 500: Internal Server Error"
        assert result.data == []

    def test_invalid_config_is_reported(self) -> None:
        result = _service(FakeSession({})).scrape({"url": CATALOG_URL, "selectors": []})

        assert result.success is False
        assert (result.error or "").startswith("Invalid configuration")


@pytest.mark.parametrize(
    ("value", "transform", "expected"),
    [
        ("Price: 42 TL", "number", 42.0),
        ("-3.5%", "number", -3.5),
        ("n/a", "number", None),
        ("Jan 5, 2024", "date", "2024-01-05T00:00:00.000Z"),
        ("soon", "date", "soon"),
        ("MiXeD", "lowercase", "mixed"),
        ("<b>bold</b>", "html", "<b>bold</b>"),
        ("plain", None, "plain"),
    ],
)
def test_transform_value(value: str, transform: str | None, expected: Any) -> None:
    assert transform_value(value, transform) == expected


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def _listing(item: str, next_href: str | None) -> FakeResponse:
    link = f'<a class="next" href="{next_href}">next</a>' if next_href else ""
    return FakeResponse(f"<ul><li>{item}</li></ul>{link}")


class TestPagination:
    def test_follows_relative_next_links_until_exhausted(self) -> None:
        session = FakeSession(
            {
                CATALOG_URL: _listing("first", "/catalog?page=2"),
                "https://shop.example.com/catalog?page=2": _listing("second", None),
            }
        )
        sleeps: list[float] = []
        config = {
            "url": CATALOG_URL,
            "selectors": [{"name": "item", "selector": "li", "multiple": True}],
            "pagination": {"enabled": True, "nextSelector": "a.next", "maxPages": 5, "delay": 250},
        }

        result = _service(session, sleeps=sleeps).scrape(config)

        assert result.pages_scraped == 2
        assert result.data == [{"item": "first"}, {"item": "second"}]
        assert [call["url"] for call in session.gets] == [CATALOG_URL, "https://shop.example.com/catalog?page=2"]
        assert sleeps == [0.25]

    def test_page_cap_stops_traversal(self) -> None:
        session = FakeSession(
            {
                CATALOG_URL: _listing("first", "/catalog/2"),
                "https://shop.example.com/catalog/2": _listing("second", "/catalog/3"),
            }
        )
        sleeps: list[float] = []
        config = {
            "url": CATALOG_URL,
            "selectors": [{"name": "item", "selector": "li", "multiple": True}],
            "pagination": {"enabled": True, "nextSelector": "a.next", "maxPages": 2, "delay": 100},
        }

        result = _service(session, sleeps=sleeps).scrape(config)

        assert result.pages_scraped == 2
        assert len(session.gets) == 2
        assert sleeps == [0.1]

    def test_enabled_pagination_without_page_cap_reads_one_page(self) -> None:
        session = FakeSession(
            {
                CATALOG_URL: _listing("first", "/catalog/2"),
                "https://shop.example.com/catalog/2": _listing("second", "/catalog/3"),
            }
        )
        sleeps: list[float] = []
        config = {
            "url": CATALOG_URL,
            "selectors": [{"name": "item", "selector": "li", "multiple": True}],
            "pagination": {"enabled": True, "nextSelector": "a.next"},
        }

        result = _service(session, sleeps=sleeps).scrape(config)

        assert result.pages_scraped == 1
        assert result.data == [{"item": "first"}]
        assert [call["url"] for call in session.gets] == [CATALOG_URL]
        assert sleeps == []

    def test_disabled_pagination_reads_one_page(self) -> None:
        session = FakeSession({CATALOG_URL: _listing("only", "/catalog/2")})
        config = {
            "url": CATALOG_URL,
            "selectors": [{"name": "item", "selector": "li", "multiple": True}],
            "pagination": {"enabled": False, "nextSelector": "a.next"},
        }

        result = _service(session).scrape(config)

        assert result.pages_scraped == 1


# ---------------------------------------------------------------------------
# Rendered scraping
# ---------------------------------------------------------------------------


class TestRenderedScraping:
    def test_dynamic_engine_uses_renderer(self) -> None:
        render_session = FakeRenderSession({CATALOG_URL: PRODUCT_PAGE})
        renderer = FakeRenderer(render_session)
        session = FakeSession({})

        result = _service(session, renderer=renderer).scrape(
            {"url": CATALOG_URL, "engine": "puppeteer", "selectors": PRODUCT_SELECTORS}
        )

        assert result.success is True
        assert result.total_records == 2
        assert render_session.loaded == [CATALOG_URL]
        assert session.gets == []
        assert renderer.closed == 1

    def test_renderer_is_closed_when_page_load_fails(self) -> None:
        renderer = FakeRenderer(FakeRenderSession({}, fail=True))

        result = _service(FakeSession({}), renderer=renderer).scrape(
            {"url": CATALOG_URL, "javascript": True, "selectors": PRODUCT_SELECTORS}
        )

        assert result.success is False
        assert result.error == "navigation timeout"
        assert renderer.opened == 1
        assert renderer.closed == 1

    def test_missing_playwright_is_a_structured_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "playwright.sync_api", None)
        service = ScrapingService(session=FakeSession({}), settings=ScrapingSettings())

        result = service.scrape({"url": CATALOG_URL, "engine": "dynamic", "selectors": PRODUCT_SELECTORS})

        assert result.success is False
        assert (result.error or "").startswith("Playwright is not installed")


def test_engine_aliases() -> None:
    selectors = [{"name": "t", "selector": "h1"}]

    assert ScrapingConfig(url=CATALOG_URL, engine="cheerio", selectors=selectors).engine == "static"
    assert ScrapingConfig(url=CATALOG_URL, engine="puppeteer", selectors=selectors).uses_renderer is True


# ---------------------------------------------------------------------------
# URL probing and templates
# ---------------------------------------------------------------------------


class TestUrlProbe:
    def test_spa_marker_suggests_dynamic_engine(self) -> None:
        html = '<html><body><div id="app"></div>' + "x" * 6000 + "</body></html>"
        session = FakeSession({CATALOG_URL: FakeResponse(html)})

        result = _service(session).test_url(CATALOG_URL)

        assert result.success is True
        assert result.message == "URL is reachable"
        assert result.requires_javascript is True
        assert result.suggested_engine == "dynamic"
        assert session.heads == [CATALOG_URL]

    def test_short_document_suggests_dynamic_engine(self) -> None:
        session = FakeSession({CATALOG_URL: FakeResponse("<html><body>loading</body></html>")})

        assert _service(session).test_url(CATALOG_URL).suggested_engine == "dynamic"

    def test_large_plain_document_suggests_static_engine(self) -> None:
        html = "<html><body>" + "<p>row</p>" * 1000 + "</body></html>"
        session = FakeSession({CATALOG_URL: FakeResponse(html)})

        result = _service(session).test_url(CATALOG_URL)

        assert result.requires_javascript is False
        assert result.suggested_engine == "static"

    def test_failed_head_reports_status(self) -> None:
        session = FakeSession({}, head=FakeResponse(status_code=404, reason="Not Found"))

        result = _service(session).test_url(CATALOG_URL)

        assert result.success is False
        assert result.message == "HTTP 404: Not Found"
        assert session.gets == []

    def test_invalid_url_is_rejected(self) -> None:
        result = _service(FakeSession({})).test_url("not a url")

        assert result.success is False
        assert result.suggested_engine == "static"


def test_templates_produce_valid_configs() -> None:
    for kind in ("table", "list", "article"):
        template = ScrapingService.create_template(kind)
        config = ScrapingConfig.model_validate({"url": CATALOG_URL, **template})
        assert config.engine == "static"

    assert ScrapingService.create_template("table")["selectors"][0]["multiple"] is True
    assert ScrapingService.create_template("gallery") == {}
