"""Shared typed models for the projection pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

Record = dict[str, Any]


class TransformKind(Enum):
    """Normalization rule applied to one field's raw value."""

    PASSTHROUGH = "passthrough"
    TEXT_NORMALIZE = "text_normalize"
    DECIMAL = "decimal"
    DATE = "date"
    MONTH_YEAR_TOKEN = "month_year_token"


class ErrorCategory(Enum):
    ENRICHMENT = "enrichment"
    DUPLICATE_RECORD = "duplicate_record"
    GENERAL = "general"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One column of the source schema and the rule that normalizes it."""

    name: str
    required: bool
    kind: TransformKind
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass(frozen=True, slots=True)
class ErrorEntry:
    """One accumulated failure. index is the 1-based record position, None for run-level errors."""

    index: int | None
    message: str
    category: ErrorCategory = ErrorCategory.ENRICHMENT


@dataclass(slots=True)
class BuildResult:
    records: list[Record]
    dropped: int
    total_rows: int


@dataclass(slots=True)
class RunResult:
    """Outcome of one pipeline run."""

    records: list[Record] = field(default_factory=list)
    errors: list[ErrorEntry] = field(default_factory=list)
    dropped: int = 0
    report_path: Path | None = None
    published: bool = False
