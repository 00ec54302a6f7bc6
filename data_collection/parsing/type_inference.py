"""
data_collection/parsing/type_inference.py

Column statistics and storage-type inference over sampled values.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from data_collection.dates import is_parseable_date
from data_collection.domain.columns import ColumnInfo, InferredType

BOOLEAN_TOKENS = {"true", "false", "yes", "no", "evet", "hayır", "1", "0"}
NUMBER_LITERAL = re.compile(r"^-?[0-9]+\.?[0-9]*$")
DATE_SHAPES = (
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{2}/\d{2}/\d{4}$"),
    re.compile(r"^\d{2}\.\d{2}\.\d{4}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}"),
)
DOMINANT_TYPE_RATIO = 0.8
SAMPLE_SIZE = 5


def is_null(value: Any) -> bool:
    return value is None or value == ""


def analyze_columns(headers: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> list[ColumnInfo]:
    """
    Build a ColumnInfo per header from the given rows.
    """

    materialized = list(rows)
    columns: list[ColumnInfo] = []
    for header in headers:
        values = [row.get(header) for row in materialized]
        present = [value for value in values if not is_null(value)]
        columns.append(
            ColumnInfo(
                name=header,
                inferred_type=infer_type(present),
                sample_values=tuple(present[:SAMPLE_SIZE]),
                null_count=len(values) - len(present),
                unique_count=len({str(value) for value in present}),
            )
        )
    return columns


def infer_type(values: Sequence[Any]) -> str:
    """
    Return the dominant value type, or ``mixed`` when it covers under 80% of values.
    """

    if not values:
        return InferredType.STRING

    counts = Counter(classify_value(value) for value in values)
    dominant, dominant_count = counts.most_common(1)[0]
    if len(counts) > 1 and dominant_count < len(values) * DOMINANT_TYPE_RATIO:
        return InferredType.MIXED
    return dominant


def classify_value(value: Any) -> str:
    if isinstance(value, bool):
        return InferredType.BOOLEAN
    if isinstance(value, (int, float)):
        return InferredType.NUMBER
    if isinstance(value, date):
        return InferredType.DATE
    if isinstance(value, (dict, list, tuple)):
        return InferredType.JSON

    text = str(value)
    if text.lower() in BOOLEAN_TOKENS:
        return InferredType.BOOLEAN
    if NUMBER_LITERAL.match(text):
        return InferredType.NUMBER
    if is_date_string(text):
        return InferredType.DATE
    return InferredType.STRING


def is_date_string(text: str) -> bool:
    return any(shape.match(text) for shape in DATE_SHAPES) and is_parseable_date(text)
