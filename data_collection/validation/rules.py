"""
data_collection/validation/rules.py

Per-cell rule checks, type coercion helpers and auto-generated rules.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from data_collection.dates import parse_date, to_iso
from data_collection.domain.columns import ColumnInfo, InferredType
from data_collection.domain.validation import RuleType, Severity, ValidationIssue
from data_collection.schemas import ValidationRule

TRUE_TOKENS = {"true", "yes", "1", "evet"}
FALSE_TOKENS = {"false", "no", "0", "hayır"}
BOOLEAN_TOKENS = TRUE_TOKENS | FALSE_TOKENS

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def to_number(value: Any) -> float | None:
    """
    Loose numeric coercion: numbers pass through, numeric strings are parsed.

    Booleans and NaN are not numbers here.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def check_type(value: Any, expected_type: str | None) -> bool:
    if expected_type == InferredType.NUMBER:
        return to_number(value) is not None
    if expected_type == InferredType.STRING:
        return isinstance(value, str)
    if expected_type == InferredType.BOOLEAN:
        return isinstance(value, bool) or str(value).strip().lower() in BOOLEAN_TOKENS
    if expected_type == InferredType.DATE:
        return parse_date(value) is not None
    return True


def suggest_type_fix(value: Any, expected_type: str | None) -> Any:
    """
    Best-effort coercion offered alongside a type issue; never applied automatically.
    """

    if expected_type == InferredType.NUMBER:
        cleaned = _NON_NUMERIC.sub("", str(value))
        try:
            return float(cleaned) if cleaned else None
        except ValueError:
            return None
    if expected_type == InferredType.BOOLEAN:
        token = str(value).strip().lower()
        if token in TRUE_TOKENS:
            return True
        if token in FALSE_TOKENS:
            return False
        return None
    if expected_type == InferredType.DATE:
        parsed = parse_date(value)
        return to_iso(parsed) if parsed is not None else None
    return str(value)


@lru_cache(maxsize=256)
def _compiled_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"Invalid format pattern {pattern!r}: {exc}") from exc


def check_rule(value: Any, rule: ValidationRule, row_index: int) -> ValidationIssue | None:
    """
    Evaluate one rule against one cell. ``unique`` and ``custom`` never fire here.
    """

    if rule.type == RuleType.REQUIRED:
        if is_empty(value):
            return ValidationIssue(
                rule=RuleType.REQUIRED,
                severity=rule.severity,
                message=rule.message or f"{rule.column} is required",
                row=row_index,
                column=rule.column,
                value=value,
            )
        return None

    if rule.type == RuleType.TYPE:
        expected_type = rule.params.get("expected_type", rule.params.get("expectedType"))
        if not is_empty(value) and not check_type(value, expected_type):
            return ValidationIssue(
                rule=RuleType.TYPE,
                severity=rule.severity,
                message=rule.message or f"{rule.column} should be of type {expected_type}",
                row=row_index,
                column=rule.column,
                value=value,
                suggested_fix=suggest_type_fix(value, expected_type),
            )
        return None

    if rule.type == RuleType.RANGE:
        number = to_number(value)
        if number is None:
            return None
        # Bounds that do not coerce to a number are ignored.
        minimum = to_number(rule.params.get("min"))
        maximum = to_number(rule.params.get("max"))
        if (minimum is not None and number < minimum) or (maximum is not None and number > maximum):
            low = "-inf" if minimum is None else rule.params["min"]
            high = "inf" if maximum is None else rule.params["max"]
            return ValidationIssue(
                rule=RuleType.RANGE,
                severity=rule.severity,
                message=rule.message or f"{rule.column} must be between {low} and {high}",
                row=row_index,
                column=rule.column,
                value=value,
            )
        return None

    if rule.type == RuleType.FORMAT:
        pattern = rule.params.get("pattern")
        if pattern and isinstance(value, str) and not _compiled_pattern(str(pattern)).search(value):
            return ValidationIssue(
                rule=RuleType.FORMAT,
                severity=rule.severity,
                message=rule.message or f"{rule.column} has an invalid format",
                row=row_index,
                column=rule.column,
                value=value,
            )
    return None


def generate_auto_rules(columns: Sequence[ColumnInfo]) -> list[ValidationRule]:
    """
    One type rule per column, plus a required rule where the sample had no nulls.
    """

    rules: list[ValidationRule] = []
    for column in columns:
        rules.append(
            ValidationRule(
                column=column.name,
                type=RuleType.TYPE,
                params={"expected_type": column.inferred_type},
                severity=Severity.WARNING,
                auto_fix=True,
            )
        )
        if column.null_count == 0:
            rules.append(
                ValidationRule(
                    column=column.name,
                    type=RuleType.REQUIRED,
                    severity=Severity.ERROR,
                    auto_fix=False,
                )
            )
    return rules
