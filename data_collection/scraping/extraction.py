"""
data_collection/scraping/extraction.py

Turns a parsed HTML document plus declarative selectors into records.
"""

from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from data_collection.dates import parse_date, to_iso
from data_collection.schemas import ScrapingSelector

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


class UnsupportedSelectorError(ValueError):
    """
    Raised for selector types the HTML engine cannot evaluate (XPath).
    """


def extract_records(soup: BeautifulSoup, selectors: list[ScrapingSelector]) -> list[dict[str, Any]]:
    """
    Extract records from one page.

    When a selector is marked ``multiple`` each of its matches becomes one
    record and the other selectors are evaluated inside that match. Without
    one, every selector runs against the whole document and the page yields a
    single record.
    """

    for selector in selectors:
        if selector.selector_type != "css":
            raise UnsupportedSelectorError(
                f"Selector '{selector.name}' uses {selector.selector_type}; only CSS selectors are supported."
            )

    row_selector = next((selector for selector in selectors if selector.multiple), None)
    if row_selector is None:
        return [
            {selector.name: extract_value(soup.select(selector.selector), selector) for selector in selectors}
        ]

    records: list[dict[str, Any]] = []
    for element in soup.select(row_selector.selector):
        record: dict[str, Any] = {}
        for selector in selectors:
            targets = [element] if selector.multiple else element.select(selector.selector)
            record[selector.name] = extract_value(targets, selector)
        records.append(record)
    return records


def extract_value(elements: list[Tag], selector: ScrapingSelector) -> Any:
    """
    Read the attribute of the first match, or the combined trimmed text of all matches.
    """

    if selector.attribute:
        raw = elements[0].get(selector.attribute) if elements else None
        if isinstance(raw, list):
            raw = " ".join(raw)
        value = raw or None
    else:
        value = "".join(element.get_text() for element in elements).strip() or None

    if value is None:
        return None
    return transform_value(value, selector.transform)


def transform_value(value: str, transform: str | None) -> Any:
    if transform is None or transform in {"text", "html"}:
        return value
    if transform == "number":
        match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", value))
        return float(match.group(0)) if match else None
    if transform == "date":
        parsed = parse_date(value)
        return to_iso(parsed) if parsed is not None else value
    if transform == "trim":
        return value.strip()
    if transform == "lowercase":
        return value.lower()
    if transform == "uppercase":
        return value.upper()
    return value
