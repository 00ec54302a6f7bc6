"""
data_collection/schemas/validation.py

Caller-supplied validation rules and cleaning options.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from data_collection.schemas.base import BoundaryModel

RuleKind = Literal["required", "type", "range", "format", "unique", "custom"]
SeverityLevel = Literal["error", "warning", "info"]


class ValidationRule(BoundaryModel):
    column: str
    type: RuleKind
    params: dict[str, Any] = Field(default_factory=dict)
    severity: SeverityLevel = "error"
    auto_fix: bool = False
    message: str | None = None


class CleaningOptions(BoundaryModel):
    """
    Cleaning stages run in a fixed order: trim, collapse spaces, de-duplicate,
    standardize dates, null handling, outlier flagging.
    """

    trim_strings: bool = True
    remove_extra_spaces: bool = True
    remove_duplicates: bool = False
    duplicate_columns: list[str] | None = None
    keep_duplicate: Literal["first", "last"] = "first"
    standardize_dates: bool = True
    target_date_format: str = "YYYY-MM-DD"
    handle_nulls: Literal["keep", "remove_row", "fill_default", "fill_previous", "fill_mean"] = "keep"
    default_values: dict[str, Any] = Field(default_factory=dict)
    remove_outliers: bool = False
    outlier_method: Literal["iqr", "zscore", "percentile"] = "iqr"
    outlier_threshold: float = Field(default=1.5, gt=0)
