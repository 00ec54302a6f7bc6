"""
data_collection/domain/validation.py

Validation issue and result models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from data_collection.domain.columns import ColumnInfo


class Severity:
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleType:
    REQUIRED = "required"
    TYPE = "type"
    RANGE = "range"
    FORMAT = "format"
    UNIQUE = "unique"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ValidationIssue:
    """
    One data-quality finding. Row-less issues describe dataset-wide cleaning.
    """

    rule: str
    severity: str
    message: str
    row: int | None = None
    column: str | None = None
    value: Any = None
    suggested_fix: Any = None
    fixed: bool | None = None


@dataclass(frozen=True)
class ValidationSummary:
    errors: int = 0
    warnings: int = 0
    infos: int = 0
    auto_fixed: int = 0


@dataclass(frozen=True)
class ValidationResult:
    """
    Aggregate outcome of ``ValidationPipeline.validate``.
    """

    is_valid: bool
    total_rows: int
    valid_rows: int
    issues: list[ValidationIssue] = field(default_factory=list)
    summary: ValidationSummary = field(default_factory=ValidationSummary)
    cleaned_data: list[dict[str, Any]] | None = None


@dataclass(frozen=True)
class QuickValidationResult:
    is_valid: bool
    error_count: int
    warning_count: int


@dataclass(frozen=True)
class PersistencePayload:
    """
    Handoff triple for the external storage collaborator.
    """

    columns: list[ColumnInfo]
    cleaned_data: list[dict[str, Any]]
    category: str
