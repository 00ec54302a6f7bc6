"""
data_collection/services/ingestion_orchestrator.py

Runs one source through fetch/parse, validation, cleaning, classification and
the persistence handoff while tracking per-stage status.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from data_collection.classification import ClassificationService
from data_collection.domain.columns import ColumnInfo
from data_collection.domain.http import PaginationOptions
from data_collection.domain.pipeline import IngestionRunResult, PipelineStage, PipelineState, StageStatus
from data_collection.http import HttpClient
from data_collection.logging_utils import log_event
from data_collection.parsing import FileParserService, analyze_columns, normalize_records
from data_collection.schemas import ApiRequestConfig, CleaningOptions, FileUploadConfig, ScrapingConfig, ValidationRule
from data_collection.scraping import ScrapingService
from data_collection.validation import ValidationPipeline

logger = logging.getLogger(__name__)

CLASSIFICATION_SAMPLE_ROWS = 100

Rules = Sequence[ValidationRule | Mapping[str, Any]] | None
Cleaning = CleaningOptions | Mapping[str, Any] | None


class _StageFailed(Exception):
    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


class IngestionOrchestrator:
    """
    End-to-end ingestion for file, API and scrape sources.

    Collaborators are injected so callers (and tests) can swap transports.
    """

    def __init__(
        self,
        *,
        file_parser: FileParserService | None = None,
        http_client: HttpClient | None = None,
        scraping_service: ScrapingService | None = None,
        classifier: ClassificationService | None = None,
        validator: ValidationPipeline | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._file_parser = file_parser or FileParserService()
        self._http_client = http_client or HttpClient()
        self._scraping_service = scraping_service or ScrapingService()
        self._classifier = classifier or ClassificationService()
        self._validator = validator or ValidationPipeline()
        self._now = now or (lambda: datetime.now(timezone.utc))

    def ingest_file(
        self,
        content: bytes | str,
        filename: str,
        *,
        options: FileUploadConfig | Mapping[str, Any] | None = None,
        rules: Rules = None,
        cleaning_options: Cleaning = None,
    ) -> IngestionRunResult:
        def load() -> tuple[list[dict[str, Any]], list[ColumnInfo] | None]:
            parsed = self._file_parser.parse_file(content, filename, options)
            if not parsed.success:
                raise _StageFailed(PipelineStage.UPLOAD, parsed.error or "File could not be parsed")
            return parsed.data, parsed.columns

        return self._run("file", filename, load, rules, cleaning_options)

    def ingest_api(
        self,
        config: ApiRequestConfig | Mapping[str, Any],
        *,
        pagination: PaginationOptions | None = None,
        rules: Rules = None,
        cleaning_options: Cleaning = None,
    ) -> IngestionRunResult:
        def load() -> tuple[list[dict[str, Any]], list[ColumnInfo] | None]:
            if pagination is not None:
                response = self._http_client.fetch_paginated(config, pagination)
            else:
                response = self._http_client.request(config)
            if not response.success:
                raise _StageFailed(PipelineStage.UPLOAD, response.error or "API request failed")
            payload = response.data
            items = payload if isinstance(payload, list) else ([] if payload is None else [payload])
            return _records(items), None

        source = config.url if isinstance(config, ApiRequestConfig) else str(config.get("url", ""))
        return self._run("api", source, load, rules, cleaning_options)

    def ingest_scrape(
        self,
        config: ScrapingConfig | Mapping[str, Any],
        *,
        rules: Rules = None,
        cleaning_options: Cleaning = None,
    ) -> IngestionRunResult:
        def load() -> tuple[list[dict[str, Any]], list[ColumnInfo] | None]:
            result = self._scraping_service.scrape(config)
            if not result.success:
                raise _StageFailed(PipelineStage.UPLOAD, result.error or "Scrape failed")
            return _records(result.data), None

        source = config.url if isinstance(config, ScrapingConfig) else str(config.get("url", ""))
        return self._run("scrape", source, load, rules, cleaning_options)

    def _run(
        self,
        source_kind: str,
        source: str,
        load: Callable[[], tuple[list[dict[str, Any]], list[ColumnInfo] | None]],
        rules: Rules,
        cleaning_options: Cleaning,
    ) -> IngestionRunResult:
        state = PipelineState()
        classification = None
        validation = None
        try:
            self._start(state, PipelineStage.UPLOAD)
            rows, columns = load()
            self._complete(state, PipelineStage.UPLOAD)

            self._start(state, PipelineStage.PREVIEW)
            if columns is None:
                columns = analyze_columns(list(rows[0]) if rows else [], rows)
            self._complete(state, PipelineStage.PREVIEW)

            self._start(state, PipelineStage.VALIDATION)
            quick = self._validator.quick_validate(rows, columns)
            self._complete(state, PipelineStage.VALIDATION)

            self._start(state, PipelineStage.CLEANING)
            validation = self._validator.validate(rows, columns, rules, cleaning_options)
            self._complete(state, PipelineStage.CLEANING)

            self._start(state, PipelineStage.CLASSIFICATION)
            sample = (validation.cleaned_data or rows)[:CLASSIFICATION_SAMPLE_ROWS]
            classification = self._classifier.classify(columns, sample)
            self._complete(state, PipelineStage.CLASSIFICATION)

            self._start(state, PipelineStage.IMPORT)
            payload = self._validator.build_payload(validation, columns, classification.category)
            self._complete(state, PipelineStage.IMPORT)

            self._start(state, PipelineStage.COMPLETE)
            self._complete(state, PipelineStage.COMPLETE)
        except _StageFailed as exc:
            self._fail(state, exc.stage, str(exc))
            return self._failed(state, source_kind, source, str(exc), classification, validation)
        except ValueError as exc:
            self._fail(state, state.current_stage, str(exc))
            return self._failed(state, source_kind, source, str(exc), classification, validation)

        log_event(
            logger,
            logging.INFO,
            "ingestion_completed",
            source_kind=source_kind,
            source=source,
            rows=len(payload.cleaned_data),
            category=payload.category,
            quick_errors=quick.error_count,
            is_valid=validation.is_valid,
        )
        return IngestionRunResult(
            success=True,
            state=state,
            classification=classification,
            validation=validation,
            payload=payload,
        )

    def _start(self, state: PipelineState, stage: str) -> None:
        state.current_stage = stage
        stage_state = state.stages[stage]
        stage_state.status = StageStatus.RUNNING
        stage_state.started_at = self._now()

    def _complete(self, state: PipelineState, stage: str) -> None:
        stage_state = state.stages[stage]
        stage_state.status = StageStatus.COMPLETED
        stage_state.completed_at = self._now()
        log_event(logger, logging.DEBUG, "pipeline_stage_completed", stage=stage)

    def _fail(self, state: PipelineState, stage: str, error: str) -> None:
        state.current_stage = stage
        stage_state = state.stages[stage]
        stage_state.status = StageStatus.FAILED
        stage_state.completed_at = self._now()
        stage_state.error = error

    @staticmethod
    def _failed(
        state: PipelineState,
        source_kind: str,
        source: str,
        error: str,
        classification: Any,
        validation: Any,
    ) -> IngestionRunResult:
        log_event(
            logger,
            logging.ERROR,
            "ingestion_failed",
            source_kind=source_kind,
            source=source,
            stage=state.current_stage,
            error=error,
        )
        return IngestionRunResult(
            success=False,
            state=state,
            classification=classification,
            validation=validation,
            error=error,
        )


def _records(items: list[Any]) -> list[dict[str, Any]]:
    _, rows = normalize_records(items)
    return rows
