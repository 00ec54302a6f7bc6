"""
Starter scrape configurations for common page shapes.
"""

from __future__ import annotations

from typing import Any

TEMPLATE_KINDS = ("table", "list", "article")


def create_template(kind: str) -> dict[str, Any]:
    """
    Return a partial ScrapingConfig payload; unknown kinds give an empty dict.
    """

    if kind == "table":
        return {
            "engine": "static",
            "selectors": [
                {"name": "rows", "selector": "table tbody tr", "selector_type": "css", "multiple": True},
            ],
        }
    if kind == "list":
        return {
            "engine": "static",
            "selectors": [
                {"name": "items", "selector": "ul li, ol li", "selector_type": "css", "multiple": True},
            ],
        }
    if kind == "article":
        return {
            "engine": "static",
            "selectors": [
                {"name": "title", "selector": "h1, .title", "selector_type": "css", "multiple": False},
                {"name": "content", "selector": "article, .content", "selector_type": "css", "multiple": False},
                {
                    "name": "date",
                    "selector": "time, .date",
                    "selector_type": "css",
                    "multiple": False,
                    "transform": "date",
                },
            ],
        }
    return {}
