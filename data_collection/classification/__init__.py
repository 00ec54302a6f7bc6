"""
data_collection/classification package marker.
"""

from data_collection.classification.patterns import (
    CATEGORY_CHART_SUGGESTIONS,
    CATEGORY_WEIGHTS,
    COLUMN_PATTERNS,
    PATTERN_BUCKETS,
)
from data_collection.classification.service import ClassificationService

__all__ = [
    "CATEGORY_CHART_SUGGESTIONS",
    "CATEGORY_WEIGHTS",
    "COLUMN_PATTERNS",
    "ClassificationService",
    "PATTERN_BUCKETS",
]
