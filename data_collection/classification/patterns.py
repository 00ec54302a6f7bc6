"""
data_collection/classification/patterns.py

Lookup tables for semantic column classification.

Column-name patterns are bilingual (English/Turkish). Order matters: when a
name matches several types the first type listed keeps the match.
"""

from __future__ import annotations

import re

from data_collection.domain.classification import DataCategory, PatternKind, SemanticType

NAME_MATCH_CONFIDENCE = 0.7


def _compile(*patterns: str) -> list[re.Pattern[str]]:
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


COLUMN_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    SemanticType.DATE: _compile(r"^date$", r"^tarih$", r"created", r"updated", r"_at$", r"_date$"),
    SemanticType.DATETIME: _compile(r"datetime", r"timestamp", r"zaman"),
    SemanticType.TIME: _compile(r"^time$", r"^saat$", r"hour", r"minute"),
    SemanticType.YEAR: _compile(r"^year$", r"^yil$", r"^yıl$"),
    SemanticType.MONTH: _compile(r"^month$", r"^ay$"),
    SemanticType.QUARTER: _compile(r"^quarter$", r"^ceyrek$", r"^çeyrek$"),
    SemanticType.CURRENCY: _compile(r"price", r"fiyat", r"amount", r"tutar", r"total", r"toplam"),
    SemanticType.PERCENTAGE: _compile(r"percent", r"oran", r"rate$"),
    SemanticType.REVENUE: _compile(r"revenue", r"gelir", r"income", r"sales", r"satis", r"satış"),
    SemanticType.COST: _compile(r"cost", r"maliyet", r"expense", r"gider"),
    SemanticType.PRICE: _compile(r"price", r"fiyat", r"ucret", r"ücret"),
    SemanticType.COUNT: _compile(r"count", r"sayı", r"sayi", r"adet", r"num_", r"_num$"),
    SemanticType.QUANTITY: _compile(r"quantity", r"qty", r"miktar", r"amount"),
    SemanticType.RATING: _compile(r"rating", r"puan", r"score$", r"derece"),
    SemanticType.SCORE: _compile(r"score", r"skor", r"point"),
    SemanticType.USER_ID: _compile(r"user_?id", r"kullanici_?id", r"member_?id", r"customer_?id"),
    SemanticType.SESSION_ID: _compile(r"session", r"oturum"),
    SemanticType.EMAIL: _compile(r"email", r"e-?posta", r"mail"),
    SemanticType.PHONE: _compile(r"phone", r"tel", r"mobile", r"cep"),
    SemanticType.COUNTRY: _compile(r"country", r"ulke", r"ülke", r"nation"),
    SemanticType.CITY: _compile(r"city", r"sehir", r"şehir", r"il$"),
    SemanticType.URL: _compile(r"url", r"link", r"href", r"website"),
    SemanticType.IP_ADDRESS: _compile(r"ip_?address", r"ip$", r"client_ip"),
    SemanticType.DEVICE: _compile(r"device", r"cihaz", r"platform"),
    SemanticType.BROWSER: _compile(r"browser", r"tarayici", r"tarayıcı"),
    SemanticType.OS: _compile(r"^os$", r"operating", r"isletim", r"işletim"),
    SemanticType.APP_VERSION: _compile(r"version", r"versiyon", r"surum", r"sürüm"),
    SemanticType.CATEGORY: _compile(r"category", r"kategori", r"type$", r"tip$", r"tür$", r"tur$"),
    SemanticType.STATUS: _compile(r"status", r"durum", r"state$"),
    SemanticType.BOOLEAN: _compile(r"^is_", r"^has_", r"^can_", r"active", r"enabled", r"flag$"),
    SemanticType.TEXT: _compile(
        r"description", r"aciklama", r"açıklama", r"comment", r"yorum", r"note", r"not$"
    ),
    SemanticType.UNKNOWN: [],
}

# Columns: date datetime time year month quarter | currency percentage revenue
# cost price | count quantity rating score | user_id session_id email phone |
# country city | url ip_address device browser os app_version | category
# status boolean text unknown
_WEIGHT_ROWS: dict[str, tuple[int, ...]] = {
    DataCategory.TIME_SERIES: (
        10, 10, 8, 6, 6, 6, 3, 2, 4, 4, 3, 4, 3, 2, 2, 0,
        0, 0, 0, 1, 1, 0, 0, 0, 0, 0, 0, 1, 1, 0, 0, 0,
    ),
    DataCategory.BEHAVIORAL: (
        3, 4, 3, 1, 2, 1, 2, 3, 2, 1, 2, 5, 4, 6, 5, 10,
        8, 6, 4, 4, 4, 5, 4, 5, 5, 4, 3, 4, 4, 3, 2, 0,
    ),
    DataCategory.TECHNOLOGICAL: (
        2, 3, 2, 1, 1, 1, 1, 3, 1, 2, 1, 5, 3, 4, 4, 4,
        6, 2, 1, 2, 2, 6, 7, 10, 10, 10, 9, 4, 5, 4, 2, 0,
    ),
    DataCategory.FINANCIAL: (
        6, 5, 2, 4, 5, 6, 10, 8, 10, 10, 9, 4, 5, 1, 1, 2,
        1, 2, 2, 3, 2, 1, 1, 1, 1, 1, 1, 4, 4, 2, 2, 0,
    ),
    DataCategory.OTHER: (
        1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    ),
}


def _build_weights() -> dict[str, dict[str, int]]:
    ordered_types = list(COLUMN_PATTERNS)
    weights: dict[str, dict[str, int]] = {}
    for category, row in _WEIGHT_ROWS.items():
        if len(row) != len(ordered_types):
            raise ValueError(f"Weight row for {category} has {len(row)} entries, expected {len(ordered_types)}")
        weights[category] = dict(zip(ordered_types, row))
    return weights


# CATEGORY_WEIGHTS[category][semantic_type] -> integer weight in [0, 10]
CATEGORY_WEIGHTS: dict[str, dict[str, int]] = _build_weights()

CATEGORY_CHART_SUGGESTIONS: dict[str, list[str]] = {
    DataCategory.TIME_SERIES: ["line", "area", "bar", "combo"],
    DataCategory.BEHAVIORAL: ["bar", "pie", "scatter", "heatmap"],
    DataCategory.TECHNOLOGICAL: ["pie", "bar", "radar", "scatter"],
    DataCategory.FINANCIAL: ["line", "bar", "area", "combo"],
    DataCategory.OTHER: ["bar", "pie", "line"],
}

CATEGORY_LABELS: dict[str, str] = {
    DataCategory.TIME_SERIES: "Time Series",
    DataCategory.BEHAVIORAL: "Behavioral",
    DataCategory.TECHNOLOGICAL: "Technological",
    DataCategory.FINANCIAL: "Financial",
    DataCategory.OTHER: "General",
}

PATTERN_BUCKETS: dict[str, frozenset[str]] = {
    PatternKind.TEMPORAL: frozenset(
        {
            SemanticType.DATE,
            SemanticType.DATETIME,
            SemanticType.TIME,
            SemanticType.YEAR,
            SemanticType.MONTH,
            SemanticType.QUARTER,
        }
    ),
    PatternKind.CATEGORICAL: frozenset({SemanticType.CATEGORY, SemanticType.STATUS, SemanticType.BOOLEAN}),
    PatternKind.NUMERICAL: frozenset(
        {
            SemanticType.COUNT,
            SemanticType.QUANTITY,
            SemanticType.PRICE,
            SemanticType.REVENUE,
            SemanticType.COST,
            SemanticType.RATING,
            SemanticType.SCORE,
            SemanticType.PERCENTAGE,
            SemanticType.CURRENCY,
        }
    ),
    PatternKind.IDENTIFIER: frozenset(
        {SemanticType.USER_ID, SemanticType.SESSION_ID, SemanticType.EMAIL, SemanticType.PHONE}
    ),
}

PATTERN_DESCRIPTIONS: dict[str, str] = {
    PatternKind.TEMPORAL: "{count} time column(s) detected",
    PatternKind.CATEGORICAL: "{count} categorical column(s) detected",
    PatternKind.NUMERICAL: "{count} numeric metric column(s) detected",
    PatternKind.IDENTIFIER: "{count} identifier column(s) detected",
}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://")
IPV4_PATTERN = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]{10,}$")


def _keywords(*words: str) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(word) for word in words) + r")\b", re.IGNORECASE)


BROWSER_KEYWORDS = _keywords("chrome", "firefox", "safari", "edge", "opera", "ie")
DEVICE_KEYWORDS = _keywords("mobile", "desktop", "tablet", "ios", "android", "windows", "macos")
OS_KEYWORDS = _keywords("windows", "macos", "linux", "ios", "android")
