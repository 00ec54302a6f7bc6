"""
data_collection/domain/classification.py

Semantic column types, dataset categories and classifier outputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class SemanticType:
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    YEAR = "year"
    MONTH = "month"
    QUARTER = "quarter"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    REVENUE = "revenue"
    COST = "cost"
    PRICE = "price"
    COUNT = "count"
    QUANTITY = "quantity"
    RATING = "rating"
    SCORE = "score"
    USER_ID = "user_id"
    SESSION_ID = "session_id"
    EMAIL = "email"
    PHONE = "phone"
    COUNTRY = "country"
    CITY = "city"
    URL = "url"
    IP_ADDRESS = "ip_address"
    DEVICE = "device"
    BROWSER = "browser"
    OS = "os"
    APP_VERSION = "app_version"
    CATEGORY = "category"
    STATUS = "status"
    BOOLEAN = "boolean"
    TEXT = "text"
    UNKNOWN = "unknown"


SEMANTIC_TYPES: tuple[str, ...] = (
    SemanticType.DATE,
    SemanticType.DATETIME,
    SemanticType.TIME,
    SemanticType.YEAR,
    SemanticType.MONTH,
    SemanticType.QUARTER,
    SemanticType.CURRENCY,
    SemanticType.PERCENTAGE,
    SemanticType.REVENUE,
    SemanticType.COST,
    SemanticType.PRICE,
    SemanticType.COUNT,
    SemanticType.QUANTITY,
    SemanticType.RATING,
    SemanticType.SCORE,
    SemanticType.USER_ID,
    SemanticType.SESSION_ID,
    SemanticType.EMAIL,
    SemanticType.PHONE,
    SemanticType.COUNTRY,
    SemanticType.CITY,
    SemanticType.URL,
    SemanticType.IP_ADDRESS,
    SemanticType.DEVICE,
    SemanticType.BROWSER,
    SemanticType.OS,
    SemanticType.APP_VERSION,
    SemanticType.CATEGORY,
    SemanticType.STATUS,
    SemanticType.BOOLEAN,
    SemanticType.TEXT,
    SemanticType.UNKNOWN,
)


class DataCategory:
    TIME_SERIES = "time_series"
    BEHAVIORAL = "behavioral"
    TECHNOLOGICAL = "technological"
    FINANCIAL = "financial"
    OTHER = "other"


DATA_CATEGORIES: tuple[str, ...] = (
    DataCategory.TIME_SERIES,
    DataCategory.BEHAVIORAL,
    DataCategory.TECHNOLOGICAL,
    DataCategory.FINANCIAL,
    DataCategory.OTHER,
)


class PatternKind:
    TEMPORAL = "temporal"
    CATEGORICAL = "categorical"
    NUMERICAL = "numerical"
    IDENTIFIER = "identifier"


@dataclass(frozen=True)
class ColumnClassification:
    """
    Semantic type assigned to one column with the heuristics that fired.
    """

    column: str
    semantic_type: str
    confidence: float
    patterns: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DetectedPattern:
    type: str
    columns: list[str]
    description: str


@dataclass(frozen=True)
class ClassificationResult:
    """
    Dataset-level category with an explainable confidence score.
    """

    category: str
    confidence: float
    reasoning: list[str] = field(default_factory=list)
    suggested_chart_types: list[str] = field(default_factory=list)
    detected_patterns: list[DetectedPattern] = field(default_factory=list)
    column_classifications: list[ColumnClassification] = field(default_factory=list)
