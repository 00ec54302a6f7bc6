"""
data_collection/domain/files.py

File upload outcome models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from data_collection.domain.columns import ColumnInfo


class FileType:
    CSV = "csv"
    XLSX = "xlsx"
    XLS = "xls"
    JSON = "json"


@dataclass(frozen=True)
class FilePreviewResult:
    """
    Preview rows plus column analysis for an uploaded file.

    ``total_rows`` counts every data row in the file, not just the preview.
    """

    success: bool
    columns: list[ColumnInfo] = field(default_factory=list)
    preview: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    error: str | None = None


@dataclass(frozen=True)
class FileParseResult:
    success: bool
    data: list[dict[str, Any]] = field(default_factory=list)
    columns: list[ColumnInfo] = field(default_factory=list)
    error: str | None = None
