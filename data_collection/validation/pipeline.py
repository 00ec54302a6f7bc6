"""
data_collection/validation/pipeline.py

Rule evaluation plus the ordered cleaning pass over one dataset.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from data_collection.config import ValidationSettings, get_validation_settings
from data_collection.domain.columns import ColumnInfo
from data_collection.domain.validation import (
    PersistencePayload,
    QuickValidationResult,
    RuleType,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)
from data_collection.logging_utils import log_event
from data_collection.schemas import CleaningOptions, ValidationRule, coerce_model
from data_collection.validation import cleaning
from data_collection.validation.rules import check_rule, check_type, generate_auto_rules, is_empty

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class _IssueCollector:
    """
    Keeps at most ``limit`` issues while counting every one by severity.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.issues: list[ValidationIssue] = []
        self.counts = {Severity.ERROR: 0, Severity.WARNING: 0, Severity.INFO: 0}
        self.row_errors = 0
        self.dropped = 0

    def add(self, issue: ValidationIssue) -> None:
        self.counts[issue.severity] = self.counts.get(issue.severity, 0) + 1
        if issue.severity == Severity.ERROR and issue.row is not None:
            self.row_errors += 1
        if len(self.issues) < self.limit:
            self.issues.append(issue)
        else:
            self.dropped += 1


class ValidationPipeline:
    """
    Validates rows against rules and produces a cleaned copy.

    Rules always see the original values; cleaning works on copies, so the
    caller's rows are never mutated.
    """

    def __init__(self, *, settings: ValidationSettings | None = None) -> None:
        self.settings = settings or get_validation_settings()

    def validate(
        self,
        data: Sequence[Row],
        columns: Sequence[ColumnInfo],
        rules: Sequence[ValidationRule | Mapping[str, Any]] | None = None,
        cleaning_options: CleaningOptions | Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        options = coerce_model(CleaningOptions, cleaning_options)
        active_rules = (
            [coerce_model(ValidationRule, rule) for rule in rules]
            if rules is not None
            else generate_auto_rules(columns)
        )
        collector = _IssueCollector(self.settings.max_issues)
        auto_fixed = 0

        for row_index, row in enumerate(data):
            for rule in active_rules:
                issue = check_rule(row.get(rule.column), rule, row_index)
                if issue is not None:
                    collector.add(issue)

        rows: list[dict[str, Any]] = [dict(row) for row in data]
        if options.trim_strings:
            rows = cleaning.trim_strings(rows)
        if options.remove_extra_spaces:
            rows = cleaning.collapse_spaces(rows)

        if options.remove_duplicates:
            rows, removed = cleaning.remove_duplicates(rows, options.duplicate_columns, options.keep_duplicate)
            if removed > 0:
                collector.add(
                    ValidationIssue(
                        rule=RuleType.UNIQUE,
                        severity=Severity.INFO,
                        message=f"{removed} duplicate row(s) removed",
                        fixed=True,
                    )
                )
                auto_fixed += removed

        if options.standardize_dates:
            rows = cleaning.standardize_dates(rows, columns, options.target_date_format)

        if options.handle_nulls != "keep":
            rows, fixed = cleaning.handle_nulls(rows, columns, options)
            auto_fixed += fixed

        if options.remove_outliers:
            # Outliers are flagged and counted; rows are kept.
            flagged = cleaning.flag_outliers(rows, columns, options.outlier_method, options.outlier_threshold)
            if flagged:
                collector.add(
                    ValidationIssue(
                        rule=RuleType.RANGE,
                        severity=Severity.WARNING,
                        message=f"{len(flagged)} row(s) contain outlier values ({options.outlier_method})",
                        value=flagged,
                        fixed=False,
                    )
                )

        if collector.dropped:
            log_event(
                logger,
                logging.WARNING,
                "validation_issues_truncated",
                kept=len(collector.issues),
                dropped=collector.dropped,
            )
        if self.settings.log_issues:
            for issue in collector.issues:
                log_event(
                    logger,
                    logging.DEBUG,
                    "validation_issue",
                    rule=issue.rule,
                    severity=issue.severity,
                    row=issue.row,
                    column=issue.column,
                    message=issue.message,
                )

        errors = collector.counts[Severity.ERROR]
        result = ValidationResult(
            is_valid=errors == 0,
            total_rows=len(data),
            # One deduction per row-level error issue, dropped ones included.
            valid_rows=max(0, len(data) - collector.row_errors),
            issues=collector.issues,
            summary=ValidationSummary(
                errors=errors,
                warnings=collector.counts[Severity.WARNING],
                infos=collector.counts[Severity.INFO],
                auto_fixed=auto_fixed,
            ),
            cleaned_data=rows,
        )
        log_event(
            logger,
            logging.INFO,
            "dataset_validated",
            total_rows=result.total_rows,
            valid_rows=result.valid_rows,
            errors=result.summary.errors,
            warnings=result.summary.warnings,
            auto_fixed=result.summary.auto_fixed,
        )
        return result

    def quick_validate(self, data: Sequence[Row], columns: Sequence[ColumnInfo]) -> QuickValidationResult:
        """
        Count required/type failures from auto rules without cleaning.
        """

        error_count = 0
        warning_count = 0
        rules = generate_auto_rules(columns)
        for row in data:
            for rule in rules:
                value = row.get(rule.column)
                if rule.type == RuleType.REQUIRED:
                    failed = is_empty(value)
                elif rule.type == RuleType.TYPE:
                    failed = not is_empty(value) and not check_type(value, rule.params.get("expected_type"))
                else:
                    failed = False
                if not failed:
                    continue
                if rule.severity == Severity.ERROR:
                    error_count += 1
                else:
                    warning_count += 1

        return QuickValidationResult(
            is_valid=error_count == 0,
            error_count=error_count,
            warning_count=warning_count,
        )

    @staticmethod
    def build_payload(
        result: ValidationResult,
        columns: Sequence[ColumnInfo],
        category: str,
    ) -> PersistencePayload:
        """
        Package cleaned rows for the storage collaborator.
        """

        cleaned = result.cleaned_data if result.cleaned_data is not None else []
        return PersistencePayload(columns=list(columns), cleaned_data=cleaned, category=category)
