"""
data_collection/scraping package marker.
"""

from data_collection.scraping.extraction import UnsupportedSelectorError, extract_records
from data_collection.scraping.renderers import (
    PlaywrightRenderer,
    Renderer,
    RendererUnavailableError,
    RenderSession,
)
from data_collection.scraping.service import ScrapingService
from data_collection.scraping.templates import TEMPLATE_KINDS, create_template

__all__ = [
    "PlaywrightRenderer",
    "RenderSession",
    "Renderer",
    "RendererUnavailableError",
    "ScrapingService",
    "TEMPLATE_KINDS",
    "UnsupportedSelectorError",
    "create_template",
    "extract_records",
]
