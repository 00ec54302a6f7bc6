"""
tests/test_classification.py

Unit tests for ClassificationService.

Coverage:
  - Column name, declared-type and value heuristics
  - Dataset category scoring and confidence
  - Detected patterns and reasoning text
  - Weight table shape
"""

from __future__ import annotations

import unittest

import pytest

from data_collection.classification import CATEGORY_WEIGHTS, COLUMN_PATTERNS, ClassificationService
from data_collection.domain.classification import DATA_CATEGORIES, SEMANTIC_TYPES, DataCategory, SemanticType
from data_collection.domain.columns import ColumnInfo, InferredType


def _column(name: str, inferred_type: str = InferredType.STRING, *samples: object) -> ColumnInfo:
    return ColumnInfo(name=name, inferred_type=inferred_type, sample_values=tuple(samples))


@pytest.fixture()
def classifier() -> ClassificationService:
    return ClassificationService()


# ---------------------------------------------------------------------------
# Dataset classification
# ---------------------------------------------------------------------------


class TestClassify:
    def test_session_dataset_is_behavioral(self, classifier: ClassificationService) -> None:
        columns = [_column("user_id"), _column("session_id"), _column("device")]

        result = classifier.classify(columns)

        assert result.category == DataCategory.BEHAVIORAL
        # behavioral 16.1 of a 35.0 total
        assert result.confidence == pytest.approx(0.46)
        assert [item.semantic_type for item in result.column_classifications] == [
            SemanticType.USER_ID,
            SemanticType.SESSION_ID,
            SemanticType.DEVICE,
        ]
        identifier = next(pattern for pattern in result.detected_patterns if pattern.type == "identifier")
        assert identifier.columns == ["user_id", "session_id"]
        assert identifier.description == "2 identifier column(s) detected"
        assert result.suggested_chart_types == ["bar", "pie", "scatter", "heatmap"]

    def test_empty_column_list_falls_back_to_other(self, classifier: ClassificationService) -> None:
        result = classifier.classify([])

        assert result.category == DataCategory.OTHER
        assert result.confidence == 0.0
        assert result.detected_patterns == []
        assert result.reasoning[0] == 'Dataset classified as "General" (confidence: 0%)'

    def test_time_series_dataset(self, classifier: ClassificationService) -> None:
        columns = [_column("date", InferredType.DATE), _column("revenue", InferredType.NUMBER, 120.5, 98.25)]

        result = classifier.classify(columns)

        assert result.category in {DataCategory.TIME_SERIES, DataCategory.FINANCIAL}
        assert 0.0 <= result.confidence <= 1.0
        temporal = next(pattern for pattern in result.detected_patterns if pattern.type == "temporal")
        assert temporal.columns == ["date"]

    def test_reasoning_lists_key_columns(self, classifier: ClassificationService) -> None:
        result = classifier.classify([_column("user_id"), _column("notes_blob")])

        assert result.reasoning[0].startswith('Dataset classified as "Behavioral" (confidence: ')
        assert "Key columns detected:" in result.reasoning
        assert "  - user_id: user_id (70%)" in result.reasoning
        assert result.reasoning[-1] == "Suggested chart types: bar, pie, scatter, heatmap"

    def test_quick_classify_returns_category_only(self, classifier: ClassificationService) -> None:
        columns = [_column("device"), _column("browser"), _column("os")]

        assert classifier.quick_classify(columns) == DataCategory.TECHNOLOGICAL


# ---------------------------------------------------------------------------
# Column heuristics
# ---------------------------------------------------------------------------


class TestClassifyColumn:
    def test_first_matching_type_keeps_name_match(self, classifier: ClassificationService) -> None:
        result = classifier.classify_column(_column("unit_price", InferredType.NUMBER))

        assert result.semantic_type == SemanticType.CURRENCY
        assert result.confidence == pytest.approx(0.7)
        assert any(pattern.startswith("Name matched:") for pattern in result.patterns)

    def test_turkish_names_are_recognized(self, classifier: ClassificationService) -> None:
        assert classifier.classify_column(_column("tarih")).semantic_type == SemanticType.DATE
        assert classifier.classify_column(_column("şehir")).semantic_type == SemanticType.CITY

    def test_small_integers_refine_to_rating(self, classifier: ClassificationService) -> None:
        column = _column("stars", InferredType.NUMBER, 1, 4, 5, 3)
        rows = [{"stars": 1}, {"stars": 4}, {"stars": 5}, {"stars": 3}]

        result = classifier.classify_column(column, rows)

        assert result.semantic_type == SemanticType.RATING
        assert result.confidence == pytest.approx(0.6)

    def test_number_column_without_rows_is_not_refined(self, classifier: ClassificationService) -> None:
        column = ColumnInfo(name="x", inferred_type=InferredType.NUMBER, sample_values=(1, 2, 3))

        result = classifier.classify_column(column)

        assert result.semantic_type == SemanticType.UNKNOWN
        assert result.confidence == 0.0
        assert classifier.quick_classify([column]) == DataCategory.OTHER

    def test_numeric_strings_in_sample_rows_are_coerced(self, classifier: ClassificationService) -> None:
        column = _column("visits", InferredType.NUMBER)
        rows = [{"visits": "12"}, {"visits": "40"}, {"visits": "1500"}]

        result = classifier.classify_column(column, rows)

        assert result.semantic_type == SemanticType.COUNT
        assert result.confidence == pytest.approx(0.5)

    def test_email_values_override_text_type(self, classifier: ClassificationService) -> None:
        rows = [{"contact": f"person{index}@example.com"} for index in range(5)]

        result = classifier.classify_column(_column("contact"), rows)

        assert result.semantic_type == SemanticType.EMAIL
        assert result.confidence == pytest.approx(0.9)
        assert "Email format detected" in result.patterns

    def test_browser_keywords_in_values(self, classifier: ClassificationService) -> None:
        rows = [{"agent": "Chrome 120"}, {"agent": "Firefox 119"}, {"agent": "Chrome 118"}]

        result = classifier.classify_column(_column("agent"), rows)

        assert result.semantic_type == SemanticType.BROWSER
        assert result.confidence == pytest.approx(0.7)

    def test_keywords_need_word_boundaries(self, classifier: ClassificationService) -> None:
        rows = [{"label": "pied piper"}, {"label": "fiedler"}, {"label": "pied piper"}]

        result = classifier.classify_column(_column("label"), rows)

        assert result.semantic_type == SemanticType.TEXT

    def test_unrecognized_name_without_type_is_unknown(self, classifier: ClassificationService) -> None:
        result = classifier.classify_column(_column("xyz", InferredType.MIXED))

        assert result.semantic_type == SemanticType.UNKNOWN
        assert result.confidence == 0.0


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------


class TestLookupTables(unittest.TestCase):
    def test_weight_table_covers_every_category_and_type(self) -> None:
        self.assertEqual(set(CATEGORY_WEIGHTS), set(DATA_CATEGORIES))
        for category in DATA_CATEGORIES:
            weights = CATEGORY_WEIGHTS[category]
            self.assertEqual(set(weights), set(SEMANTIC_TYPES))
            self.assertTrue(all(0 <= weight <= 10 for weight in weights.values()))

    def test_unknown_type_only_counts_toward_other(self) -> None:
        for category in DATA_CATEGORIES:
            expected = 1 if category == DataCategory.OTHER else 0
            self.assertEqual(CATEGORY_WEIGHTS[category][SemanticType.UNKNOWN], expected)

    def test_pattern_table_order_matches_semantic_types(self) -> None:
        self.assertEqual(tuple(COLUMN_PATTERNS), SEMANTIC_TYPES)
