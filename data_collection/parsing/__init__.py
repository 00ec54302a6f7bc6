"""
data_collection/parsing package marker.
"""

from data_collection.parsing.file_parser import (
    FileParseError,
    FileParserService,
    UnsupportedFileTypeError,
    normalize_records,
)
from data_collection.parsing.type_inference import analyze_columns, infer_type, is_date_string

__all__ = [
    "FileParseError",
    "FileParserService",
    "UnsupportedFileTypeError",
    "analyze_columns",
    "infer_type",
    "is_date_string",
    "normalize_records",
]
