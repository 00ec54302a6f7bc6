"""
data_collection package.

Ingestion and classification pipeline: HTTP/API fetches, web scraping,
file parsing, semantic classification and validation/cleaning.
"""

from data_collection.classification import ClassificationService
from data_collection.http import HttpClient
from data_collection.parsing import FileParserService
from data_collection.scraping import ScrapingService
from data_collection.services import IngestionOrchestrator
from data_collection.validation import ValidationPipeline

__all__ = [
    "ClassificationService",
    "FileParserService",
    "HttpClient",
    "IngestionOrchestrator",
    "ScrapingService",
    "ValidationPipeline",
]
