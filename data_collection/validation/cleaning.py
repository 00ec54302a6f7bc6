"""
data_collection/validation/cleaning.py

Cleaning stages. Every stage takes row dicts and returns new row dicts.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any

from data_collection.dates import format_date, parse_date
from data_collection.domain.columns import ColumnInfo, InferredType
from data_collection.schemas import CleaningOptions
from data_collection.validation.rules import is_empty, to_number

Row = dict[str, Any]

_WHITESPACE_RUN = re.compile(r"\s+")
MIN_OUTLIER_SAMPLE = 4


def trim_strings(rows: Sequence[Row]) -> list[Row]:
    return [{key: value.strip() if isinstance(value, str) else value for key, value in row.items()} for row in rows]


def collapse_spaces(rows: Sequence[Row]) -> list[Row]:
    return [
        {key: _WHITESPACE_RUN.sub(" ", value).strip() if isinstance(value, str) else value for key, value in row.items()}
        for row in rows
    ]


def remove_duplicates(
    rows: Sequence[Row],
    key_columns: Sequence[str] | None = None,
    keep: str = "first",
) -> tuple[list[Row], int]:
    """
    Keep one row per composite key; ``keep="last"`` keeps the final occurrence.

    Surviving rows stay in their original relative order.
    """

    ordered = list(reversed(rows)) if keep == "last" else list(rows)
    seen: set[str] = set()
    kept: list[Row] = []
    for row in ordered:
        if key_columns:
            parts = [_key_part(row.get(column)) for column in key_columns]
        else:
            parts = [_key_part(value) for value in row.values()]
        key = "|".join(parts)
        if key in seen:
            continue
        seen.add(key)
        kept.append(row)

    if keep == "last":
        kept.reverse()
    return kept, len(rows) - len(kept)


def _key_part(value: Any) -> str:
    return "" if value is None else str(value)


def standardize_dates(rows: Sequence[Row], columns: Sequence[ColumnInfo], target_format: str) -> list[Row]:
    date_columns = [column.name for column in columns if column.inferred_type == InferredType.DATE]
    if not date_columns:
        return [dict(row) for row in rows]

    standardized = []
    for row in rows:
        updated = dict(row)
        for name in date_columns:
            value = row.get(name)
            if not value:
                continue
            parsed = parse_date(value)
            if parsed is not None:
                updated[name] = format_date(parsed, target_format)
        standardized.append(updated)
    return standardized


def handle_nulls(
    rows: Sequence[Row],
    columns: Sequence[ColumnInfo],
    options: CleaningOptions,
) -> tuple[list[Row], int]:
    """
    Apply the null strategy and return ``(rows, fixed)``.

    For ``remove_row`` the fixed count is the number of rows dropped.
    """

    strategy = options.handle_nulls
    if strategy == "remove_row":
        kept = [dict(row) for row in rows if not any(is_empty(value) for value in row.values())]
        return kept, len(rows) - len(kept)

    if strategy == "fill_default":
        fixed = 0
        filled = []
        for row in rows:
            updated = dict(row)
            for key, value in row.items():
                if is_empty(value) and key in options.default_values:
                    updated[key] = options.default_values[key]
                    fixed += 1
            filled.append(updated)
        return filled, fixed

    if strategy == "fill_previous":
        fixed = 0
        carried: dict[str, Any] = {}
        filled = []
        for row in rows:
            updated = dict(row)
            for key, value in row.items():
                if not is_empty(value):
                    carried[key] = value
                elif key in carried:
                    updated[key] = carried[key]
                    fixed += 1
            filled.append(updated)
        return filled, fixed

    if strategy == "fill_mean":
        numeric_columns = [column.name for column in columns if column.inferred_type == InferredType.NUMBER]
        means: dict[str, float] = {}
        for name in numeric_columns:
            numbers = [number for number in (to_number(row.get(name)) for row in rows) if number is not None]
            if numbers:
                means[name] = sum(numbers) / len(numbers)

        fixed = 0
        filled = []
        for row in rows:
            updated = dict(row)
            for name, mean in means.items():
                if is_empty(row.get(name)):
                    updated[name] = mean
                    fixed += 1
            filled.append(updated)
        return filled, fixed

    return [dict(row) for row in rows], 0


def outlier_bounds(values: Sequence[float], method: str, threshold: float) -> tuple[float, float] | None:
    """
    Return ``(lower, upper)`` for the method, or None below four values.
    """

    ordered = sorted(values)
    count = len(ordered)
    if count < MIN_OUTLIER_SAMPLE:
        return None

    if method == "iqr":
        q1 = ordered[int(math.floor(count * 0.25))]
        q3 = ordered[int(math.floor(count * 0.75))]
        spread = q3 - q1
        return q1 - threshold * spread, q3 + threshold * spread
    if method == "zscore":
        mean = sum(ordered) / count
        std = math.sqrt(sum((value - mean) ** 2 for value in ordered) / count)
        return mean - threshold * std, mean + threshold * std
    if method == "percentile":
        lower_index = min(count - 1, int(math.floor(count * (threshold / 100))))
        upper_index = min(count - 1, max(0, int(math.floor(count * (1 - threshold / 100)))))
        return ordered[lower_index], ordered[upper_index]
    raise ValueError(f"Unknown outlier method: {method}")


def flag_outliers(
    rows: Sequence[Row],
    columns: Sequence[ColumnInfo],
    method: str,
    threshold: float,
) -> list[int]:
    """
    Return indexes of rows with at least one out-of-bounds numeric value.

    Rows are only flagged; callers keep every row.
    """

    bounds: dict[str, tuple[float, float]] = {}
    for column in columns:
        if column.inferred_type != InferredType.NUMBER:
            continue
        numbers = [number for number in (to_number(row.get(column.name)) for row in rows) if number is not None]
        column_bounds = outlier_bounds(numbers, method, threshold)
        if column_bounds is not None:
            bounds[column.name] = column_bounds

    flagged = []
    for index, row in enumerate(rows):
        for name, (lower, upper) in bounds.items():
            number = to_number(row.get(name))
            if number is not None and (number < lower or number > upper):
                flagged.append(index)
                break
    return flagged
