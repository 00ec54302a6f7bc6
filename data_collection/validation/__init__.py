"""
data_collection/validation package marker.
"""

from data_collection.validation.pipeline import ValidationPipeline
from data_collection.validation.rules import check_type, generate_auto_rules, is_empty, to_number

__all__ = [
    "ValidationPipeline",
    "check_type",
    "generate_auto_rules",
    "is_empty",
    "to_number",
]
