"""
data_collection/schemas/base.py

Shared pydantic configuration for inbound boundary models.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ModelT = TypeVar("ModelT", bound=BaseModel)


class BoundaryModel(BaseModel):
    """
    Accepts snake_case field names and the camelCase keys callers send.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


def coerce_model(model_cls: type[ModelT], value: ModelT | Mapping[str, Any] | None) -> ModelT:
    """
    Return ``value`` as ``model_cls``, validating raw mappings.

    Raises pydantic.ValidationError for malformed input.
    """

    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(dict(value or {}))


def require_http_url(value: str) -> str:
    stripped = value.strip()
    parsed = urlparse(stripped)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("A valid http(s) URL is required.")
    return stripped


def format_validation_error(exc: Exception) -> str:
    """
    Flatten a pydantic ValidationError into one readable line.
    """

    errors = getattr(exc, "errors", None)
    if not callable(errors):
        return str(exc)
    parts = []
    for error in errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "Invalid configuration: " + "; ".join(parts)
