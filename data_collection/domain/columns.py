"""
data_collection/domain/columns.py

Column schema produced by a parse pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class InferredType:
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"
    MIXED = "mixed"


INFERRED_TYPES: tuple[str, ...] = (
    InferredType.STRING,
    InferredType.NUMBER,
    InferredType.BOOLEAN,
    InferredType.DATE,
    InferredType.JSON,
    InferredType.MIXED,
)


@dataclass(frozen=True)
class ColumnInfo:
    """
    One column after parsing: storage type plus sample statistics.
    """

    name: str
    inferred_type: str
    sample_values: tuple[Any, ...] = field(default_factory=tuple)
    null_count: int = 0
    unique_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "inferred_type": self.inferred_type,
            "sample_values": list(self.sample_values),
            "null_count": self.null_count,
            "unique_count": self.unique_count,
        }
