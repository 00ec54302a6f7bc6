"""
data_collection/schemas package marker.
"""

from data_collection.schemas.api_request import (
    ApiKeyAuth,
    ApiRequestConfig,
    AuthConfig,
    BasicAuth,
    BearerAuth,
    NoAuth,
    OAuth2Auth,
)
from data_collection.schemas.base import BoundaryModel, coerce_model, format_validation_error
from data_collection.schemas.files import DEFAULT_DATE_FORMATS, FileUploadConfig
from data_collection.schemas.scraping import Cookie, PaginationConfig, ScrapingConfig, ScrapingSelector
from data_collection.schemas.validation import CleaningOptions, ValidationRule

__all__ = [
    "ApiKeyAuth",
    "ApiRequestConfig",
    "AuthConfig",
    "BasicAuth",
    "BearerAuth",
    "BoundaryModel",
    "CleaningOptions",
    "Cookie",
    "DEFAULT_DATE_FORMATS",
    "FileUploadConfig",
    "NoAuth",
    "OAuth2Auth",
    "PaginationConfig",
    "ScrapingConfig",
    "ScrapingSelector",
    "ValidationRule",
    "coerce_model",
    "format_validation_error",
]
