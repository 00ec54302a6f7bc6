"""
data_collection/parsing/file_parser.py

Preview and full parsing for CSV, Excel and JSON uploads.
"""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any

import numpy as np
import pandas as pd
from pydantic import ValidationError

from data_collection.config import FileParserSettings, get_file_parser_settings
from data_collection.domain.files import FileParseResult, FilePreviewResult, FileType
from data_collection.logging_utils import log_event
from data_collection.parsing.csv_reader import detect_delimiter, generate_headers, parse_line, split_lines
from data_collection.parsing.type_inference import analyze_columns
from data_collection.schemas import FileUploadConfig, coerce_model, format_validation_error

logger = logging.getLogger(__name__)

_EXTENSION_TYPES = {
    "csv": FileType.CSV,
    "xlsx": FileType.XLSX,
    "xls": FileType.XLS,
    "json": FileType.JSON,
}
_EXCEL_ENGINES = {FileType.XLSX: "openpyxl", FileType.XLS: "xlrd"}


class FileParseError(ValueError):
    """
    Raised for unreadable uploads: empty files, invalid JSON, missing sheets.
    """


class UnsupportedFileTypeError(FileParseError):
    """
    Raised when an explicit file type is not one of csv/xlsx/xls/json.
    """


class _ParsedTable:
    __slots__ = ("headers", "rows", "total_rows")

    def __init__(self, headers: list[str], rows: list[dict[str, Any]], total_rows: int) -> None:
        self.headers = headers
        self.rows = rows
        self.total_rows = total_rows


class FileParserService:
    """
    Converts uploaded bytes into row records plus a column analysis.
    """

    def __init__(self, *, settings: FileParserSettings | None = None) -> None:
        self.settings = settings or get_file_parser_settings()

    @staticmethod
    def detect_file_type(filename: str) -> str:
        """
        Map the file extension to a FileType; unknown extensions are treated as CSV.
        """

        extension = PurePath(filename).suffix.lstrip(".").lower()
        return _EXTENSION_TYPES.get(extension, FileType.CSV)

    def preview(
        self,
        content: bytes | str,
        filename: str,
        options: FileUploadConfig | Mapping[str, Any] | None = None,
        preview_rows: int | None = None,
    ) -> FilePreviewResult:
        limit = preview_rows if preview_rows is not None else self.settings.default_preview_rows
        try:
            config = self._resolve_options(options)
            table = self._read_table(content, filename, config, limit=max(0, limit))
        except ValidationError as exc:
            return FilePreviewResult(success=False, error=format_validation_error(exc))
        except (FileParseError, UnicodeDecodeError, LookupError) as exc:
            log_event(logger, logging.WARNING, "file_preview_failed", filename=filename, error=str(exc))
            return FilePreviewResult(success=False, error=str(exc))

        return FilePreviewResult(
            success=True,
            columns=analyze_columns(table.headers, table.rows),
            preview=table.rows,
            total_rows=table.total_rows,
        )

    def parse_file(
        self,
        content: bytes | str,
        filename: str,
        options: FileUploadConfig | Mapping[str, Any] | None = None,
    ) -> FileParseResult:
        """
        Parse every data row, honouring ``max_rows`` when set.
        """

        try:
            config = self._resolve_options(options)
            table = self._read_table(content, filename, config, limit=config.max_rows)
        except ValidationError as exc:
            return FileParseResult(success=False, error=format_validation_error(exc))
        except (FileParseError, UnicodeDecodeError, LookupError) as exc:
            log_event(logger, logging.WARNING, "file_parse_failed", filename=filename, error=str(exc))
            return FileParseResult(success=False, error=str(exc))

        log_event(
            logger,
            logging.INFO,
            "file_parsed",
            filename=filename,
            rows=len(table.rows),
            columns=len(table.headers),
        )
        return FileParseResult(
            success=True,
            data=table.rows,
            columns=analyze_columns(table.headers, table.rows),
        )

    def _resolve_options(self, options: FileUploadConfig | Mapping[str, Any] | None) -> FileUploadConfig:
        if options is None:
            return FileUploadConfig(
                delimiter=self.settings.default_delimiter,
                encoding=self.settings.default_encoding,
            )
        return coerce_model(FileUploadConfig, options)

    def _read_table(
        self,
        content: bytes | str,
        filename: str,
        config: FileUploadConfig,
        *,
        limit: int | None,
    ) -> _ParsedTable:
        file_type = config.file_type or self.detect_file_type(filename)
        if file_type == FileType.CSV:
            return self._read_csv(_decode(content, config.encoding), config, limit)
        if file_type in _EXCEL_ENGINES:
            return self._read_excel(content, file_type, config, limit)
        if file_type == FileType.JSON:
            return self._read_json(_decode(content, config.encoding), config, limit)
        raise UnsupportedFileTypeError(f"Unsupported file type: {file_type}")

    @staticmethod
    def _read_csv(text: str, config: FileUploadConfig, limit: int | None) -> _ParsedTable:
        lines = split_lines(text)[config.skip_rows :]
        if not lines:
            raise FileParseError("File is empty or has no readable rows")

        delimiter = detect_delimiter(lines[0], config.delimiter)
        first = parse_line(lines[0], delimiter)
        headers = first if config.has_header else generate_headers(len(first))
        data_lines = lines[1:] if config.has_header else lines
        selected = data_lines if limit is None else data_lines[:limit]

        rows = []
        for line in selected:
            values = parse_line(line, delimiter)
            rows.append(
                {header: values[index] if index < len(values) else None for index, header in enumerate(headers)}
            )
        return _ParsedTable(headers, rows, len(data_lines))

    @staticmethod
    def _read_excel(
        content: bytes | str,
        file_type: str,
        config: FileUploadConfig,
        limit: int | None,
    ) -> _ParsedTable:
        raw = content.encode("latin-1") if isinstance(content, str) else content
        try:
            workbook = pd.ExcelFile(io.BytesIO(raw), engine=_EXCEL_ENGINES[file_type])
        except Exception as exc:
            raise FileParseError(f"Could not read workbook: {exc}") from exc

        with workbook:
            if not workbook.sheet_names:
                raise FileParseError("Workbook has no sheets")
            sheet_name = config.sheet_name or workbook.sheet_names[0]
            if sheet_name not in workbook.sheet_names:
                raise FileParseError(f"Sheet not found: {sheet_name}")
            frame = workbook.parse(
                sheet_name,
                header=0 if config.has_header else None,
                skiprows=config.skip_rows,
                dtype=object,
            )

        if config.has_header:
            headers = [str(column) for column in frame.columns]
        else:
            headers = generate_headers(len(frame.columns))
        frame.columns = headers

        total_rows = len(frame)
        if limit is not None:
            frame = frame.head(limit)
        rows = [
            {header: _cell_value(value) for header, value in zip(headers, record)}
            for record in frame.itertuples(index=False, name=None)
        ]
        return _ParsedTable(headers, rows, total_rows)

    @staticmethod
    def _read_json(text: str, config: FileUploadConfig, limit: int | None) -> _ParsedTable:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FileParseError(f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc

        items = payload if isinstance(payload, list) else [payload]
        remaining = items[config.skip_rows :]
        selected = remaining if limit is None else remaining[:limit]
        headers, rows = normalize_records(selected)
        return _ParsedTable(headers, rows, len(remaining))


def normalize_records(items: list[Any]) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Give every record the same ordered key set.

    Headers are the union of keys in first-seen order; missing keys become
    None and non-object items are wrapped as ``{"value": item}``.
    """

    records = [item if isinstance(item, Mapping) else {"value": item} for item in items]
    headers: list[str] = []
    seen: set[str] = set()
    for record in records:
        for key in record:
            name = str(key)
            if name not in seen:
                seen.add(name)
                headers.append(name)

    rows = []
    for record in records:
        by_name = {str(key): value for key, value in record.items()}
        rows.append({header: by_name.get(header) for header in headers})
    return headers, rows


def _decode(content: bytes | str, encoding: str) -> str:
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    codec = "utf-8-sig" if encoding.replace("_", "-").lower() in {"utf-8", "utf8"} else encoding
    return content.decode(codec)


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, (list, dict)) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value
