"""
data_collection/schemas/files.py

Inbound options for file uploads.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from data_collection.schemas.base import BoundaryModel

DEFAULT_DATE_FORMATS = [
    "YYYY-MM-DD",
    "DD/MM/YYYY",
    "MM/DD/YYYY",
    "YYYY-MM-DD HH:mm:ss",
    "DD.MM.YYYY",
]


class FileUploadConfig(BoundaryModel):
    """
    ``file_type`` overrides extension detection when given.
    """

    file_type: str | None = None
    encoding: str = "utf-8"
    delimiter: str = Field(default=",", min_length=1)
    has_header: bool = True
    sheet_name: str | None = None
    skip_rows: int = Field(default=0, ge=0)
    max_rows: int | None = Field(default=None, ge=1)
    date_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))

    @field_validator("file_type", mode="before")
    @classmethod
    def _normalize_file_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lstrip(".").lower() or None
        return value
