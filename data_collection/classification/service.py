"""
data_collection/classification/service.py

Rule-based semantic classification of columns and datasets.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from data_collection.classification.patterns import (
    BROWSER_KEYWORDS,
    CATEGORY_CHART_SUGGESTIONS,
    CATEGORY_LABELS,
    CATEGORY_WEIGHTS,
    COLUMN_PATTERNS,
    DEVICE_KEYWORDS,
    EMAIL_PATTERN,
    IPV4_PATTERN,
    NAME_MATCH_CONFIDENCE,
    OS_KEYWORDS,
    PATTERN_BUCKETS,
    PATTERN_DESCRIPTIONS,
    PHONE_PATTERN,
    URL_PATTERN,
)
from data_collection.domain.classification import (
    DATA_CATEGORIES,
    ClassificationResult,
    ColumnClassification,
    DataCategory,
    DetectedPattern,
    SemanticType,
)
from data_collection.domain.columns import ColumnInfo, InferredType
from data_collection.logging_utils import log_event
from data_collection.validation.rules import to_number

logger = logging.getLogger(__name__)

VALUE_ADOPTION_RATIO = 0.8
MAX_REASONING_COLUMNS = 5

Row = Mapping[str, Any]


@dataclass
class _Inference:
    semantic_type: str = SemanticType.UNKNOWN
    confidence: float = 0.0
    patterns: list[str] = field(default_factory=list)


class ClassificationService:
    """
    Stateless classifier; construct one wherever it is needed.
    """

    def classify_column(
        self,
        column: ColumnInfo,
        sample_data: Sequence[Row] | None = None,
    ) -> ColumnClassification:
        """
        Pick the strongest of the name, declared-type and value heuristics.
        """

        patterns: list[str] = []
        best_type = SemanticType.UNKNOWN
        best_confidence = 0.0

        for semantic_type, regexes in COLUMN_PATTERNS.items():
            for regex in regexes:
                if regex.search(column.name):
                    patterns.append(f"Name matched: {regex.pattern}")
                    if NAME_MATCH_CONFIDENCE > best_confidence:
                        best_type = semantic_type
                        best_confidence = NAME_MATCH_CONFIDENCE

        declared = self._infer_from_declared_type(column, sample_data)
        if declared.confidence > best_confidence:
            best_type = declared.semantic_type
            best_confidence = declared.confidence
            patterns.extend(declared.patterns)

        if sample_data:
            observed = self._infer_from_values(column.name, sample_data)
            if observed.confidence >= best_confidence * VALUE_ADOPTION_RATIO and observed.patterns:
                if observed.confidence > best_confidence:
                    best_type = observed.semantic_type
                    best_confidence = observed.confidence
                patterns.extend(observed.patterns)

        return ColumnClassification(
            column=column.name,
            semantic_type=best_type,
            confidence=best_confidence,
            patterns=patterns,
        )

    def classify(
        self,
        columns: Sequence[ColumnInfo],
        sample_data: Sequence[Row] | None = None,
    ) -> ClassificationResult:
        classifications = [self.classify_column(column, sample_data) for column in columns]
        scores = self.category_scores(classifications)

        total = sum(scores.values())
        if total <= 0:
            category = DataCategory.OTHER
            confidence = 0.0
        else:
            category = max(DATA_CATEGORIES, key=lambda name: scores[name])
            confidence = scores[category] / total

        result = ClassificationResult(
            category=category,
            confidence=round(confidence, 2),
            reasoning=self._build_reasoning(classifications, category, confidence),
            suggested_chart_types=list(CATEGORY_CHART_SUGGESTIONS[category]),
            detected_patterns=self.detect_patterns(classifications),
            column_classifications=classifications,
        )
        log_event(
            logger,
            logging.INFO,
            "dataset_classified",
            category=result.category,
            confidence=result.confidence,
            columns=len(classifications),
        )
        return result

    def quick_classify(self, columns: Sequence[ColumnInfo]) -> str:
        return self.classify(columns).category

    @staticmethod
    def category_scores(classifications: Sequence[ColumnClassification]) -> dict[str, float]:
        scores = {category: 0.0 for category in DATA_CATEGORIES}
        for classification in classifications:
            for category in DATA_CATEGORIES:
                weight = CATEGORY_WEIGHTS[category].get(classification.semantic_type, 0)
                scores[category] += weight * classification.confidence
        return scores

    @staticmethod
    def detect_patterns(classifications: Sequence[ColumnClassification]) -> list[DetectedPattern]:
        detected: list[DetectedPattern] = []
        for kind, semantic_types in PATTERN_BUCKETS.items():
            matching = [item.column for item in classifications if item.semantic_type in semantic_types]
            if matching:
                detected.append(
                    DetectedPattern(
                        type=kind,
                        columns=matching,
                        description=PATTERN_DESCRIPTIONS[kind].format(count=len(matching)),
                    )
                )
        return detected

    @staticmethod
    def _infer_from_declared_type(column: ColumnInfo, sample_data: Sequence[Row] | None) -> _Inference:
        if column.inferred_type == InferredType.DATE:
            return _Inference(SemanticType.DATE, 0.8, ["Declared type: date"])
        if column.inferred_type == InferredType.BOOLEAN:
            return _Inference(SemanticType.BOOLEAN, 0.9, ["Declared type: boolean"])
        if column.inferred_type == InferredType.STRING:
            return _Inference(SemanticType.TEXT, 0.3, ["Declared type: text"])
        if column.inferred_type != InferredType.NUMBER or not sample_data:
            return _Inference()

        raw_values = [row.get(column.name) for row in sample_data]
        numbers = [number for number in (to_number(value) for value in raw_values) if number is not None]
        if not numbers:
            return _Inference()

        all_integers = all(float(number).is_integer() for number in numbers)
        all_positive = all(number >= 0 for number in numbers)
        low, high = min(numbers), max(numbers)
        if all_integers and all_positive and low >= 1 and high <= 5:
            return _Inference(SemanticType.RATING, 0.6, ["Integers between 1 and 5 (possible rating)"])
        if all_integers and all_positive:
            return _Inference(SemanticType.COUNT, 0.5, ["Non-negative integers (possible count)"])
        if low >= 0 and high <= 100:
            return _Inference(SemanticType.PERCENTAGE, 0.4, ["Values between 0 and 100 (possible percentage)"])
        return _Inference(SemanticType.QUANTITY, 0.3, ["Numeric values"])

    @staticmethod
    def _infer_from_values(column_name: str, sample_data: Sequence[Row]) -> _Inference:
        values = [str(row.get(column_name)) for row in sample_data if row.get(column_name) is not None]
        values = [value for value in values if value != ""]
        if not values:
            return _Inference()

        inference = _Inference()

        def share(regex: Any) -> float:
            return sum(1 for value in values if regex.search(value)) / len(values)

        if share(EMAIL_PATTERN) >= 0.8:
            inference = _Inference(SemanticType.EMAIL, 0.9, ["Email format detected"])
        elif share(URL_PATTERN) >= 0.8:
            inference = _Inference(SemanticType.URL, 0.9, ["URL format detected"])
        elif share(IPV4_PATTERN) >= 0.8:
            inference = _Inference(SemanticType.IP_ADDRESS, 0.9, ["IP address format detected"])
        elif share(PHONE_PATTERN) >= 0.7:
            inference = _Inference(SemanticType.PHONE, 0.7, ["Phone number format detected"])

        if inference.semantic_type == SemanticType.UNKNOWN:
            if any(BROWSER_KEYWORDS.search(value) for value in values):
                inference = _Inference(SemanticType.BROWSER, 0.7, ["Browser names detected"])
            elif any(DEVICE_KEYWORDS.search(value) for value in values):
                inference = _Inference(SemanticType.DEVICE, 0.7, ["Device names detected"])
            elif any(OS_KEYWORDS.search(value) for value in values):
                inference = _Inference(SemanticType.OS, 0.6, ["Operating system names detected"])

        if inference.semantic_type == SemanticType.UNKNOWN:
            unique_ratio = len(set(values)) / len(values)
            if unique_ratio > 0.95 and len(values[0]) > 5:
                inference = _Inference(SemanticType.USER_ID, 0.5, ["High uniqueness ratio (possible identifier)"])
            elif unique_ratio < 0.1 and len(values) > 10:
                inference = _Inference(SemanticType.CATEGORY, 0.6, ["Low uniqueness ratio (possible category)"])

        return inference

    @staticmethod
    def _build_reasoning(
        classifications: Sequence[ColumnClassification],
        category: str,
        confidence: float,
    ) -> list[str]:
        reasons = [
            f'Dataset classified as "{CATEGORY_LABELS[category]}" (confidence: {_percent(confidence)}%)'
        ]

        important = sorted(
            (item for item in classifications if item.confidence > 0.5),
            key=lambda item: item.confidence,
            reverse=True,
        )[:MAX_REASONING_COLUMNS]
        if important:
            reasons.append("Key columns detected:")
            for item in important:
                reasons.append(f"  - {item.column}: {item.semantic_type} ({_percent(item.confidence)}%)")

        reasons.append(f"Suggested chart types: {', '.join(CATEGORY_CHART_SUGGESTIONS[category])}")
        return reasons


def _percent(value: float) -> int:
    return int(math.floor(value * 100 + 0.5))
