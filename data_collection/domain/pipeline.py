"""
data_collection/domain/pipeline.py

Stage tracking for one end-to-end ingestion run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from data_collection.domain.classification import ClassificationResult
from data_collection.domain.validation import PersistencePayload, ValidationResult


class PipelineStage:
    UPLOAD = "upload"
    PREVIEW = "preview"
    VALIDATION = "validation"
    CLEANING = "cleaning"
    CLASSIFICATION = "classification"
    IMPORT = "import"
    COMPLETE = "complete"


PIPELINE_STAGES: tuple[str, ...] = (
    PipelineStage.UPLOAD,
    PipelineStage.PREVIEW,
    PipelineStage.VALIDATION,
    PipelineStage.CLEANING,
    PipelineStage.CLASSIFICATION,
    PipelineStage.IMPORT,
    PipelineStage.COMPLETE,
)


class StageStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StageState:
    status: str = StageStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None


@dataclass
class PipelineState:
    """
    Mutable progress record; one entry per stage in ``PIPELINE_STAGES``.
    """

    current_stage: str = PipelineStage.UPLOAD
    stages: dict[str, StageState] = field(
        default_factory=lambda: {stage: StageState() for stage in PIPELINE_STAGES}
    )

    @property
    def progress(self) -> int:
        completed = sum(
            1 for state in self.stages.values() if state.status == StageStatus.COMPLETED
        )
        return round(100 * completed / len(self.stages))


@dataclass(frozen=True)
class IngestionRunResult:
    success: bool
    state: PipelineState
    classification: ClassificationResult | None = None
    validation: ValidationResult | None = None
    payload: PersistencePayload | None = None
    error: str | None = None
