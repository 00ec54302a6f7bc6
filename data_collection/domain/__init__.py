"""
data_collection/domain package marker.
"""

from data_collection.domain.classification import (
    DATA_CATEGORIES,
    SEMANTIC_TYPES,
    ClassificationResult,
    ColumnClassification,
    DataCategory,
    DetectedPattern,
    PatternKind,
    SemanticType,
)
from data_collection.domain.columns import INFERRED_TYPES, ColumnInfo, InferredType
from data_collection.domain.files import FileParseResult, FilePreviewResult, FileType
from data_collection.domain.http import ApiResponse, ConnectionTestResult, PaginationOptions
from data_collection.domain.pipeline import (
    PIPELINE_STAGES,
    IngestionRunResult,
    PipelineStage,
    PipelineState,
    StageState,
    StageStatus,
)
from data_collection.domain.scraping import ScrapingEngine, ScrapingResult, UrlTestResult
from data_collection.domain.validation import (
    PersistencePayload,
    QuickValidationResult,
    RuleType,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)

__all__ = [
    "ApiResponse",
    "ClassificationResult",
    "ColumnClassification",
    "ColumnInfo",
    "ConnectionTestResult",
    "DATA_CATEGORIES",
    "DataCategory",
    "DetectedPattern",
    "FileParseResult",
    "FilePreviewResult",
    "FileType",
    "INFERRED_TYPES",
    "InferredType",
    "IngestionRunResult",
    "PIPELINE_STAGES",
    "PaginationOptions",
    "PatternKind",
    "PersistencePayload",
    "PipelineStage",
    "PipelineState",
    "QuickValidationResult",
    "RuleType",
    "SEMANTIC_TYPES",
    "ScrapingEngine",
    "ScrapingResult",
    "SemanticType",
    "Severity",
    "StageState",
    "StageStatus",
    "UrlTestResult",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
]
