"""Build normalized records from raw CSV rows using the field schema."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from field_rules import YEAR_FIELD
from models import BuildResult, FieldDescriptor, Record, TransformKind
from transformers import FormatError, MonthYear, apply_transform

LOGGER = logging.getLogger(__name__)


def build_record(raw_row: Mapping[str, str | None], schema: Sequence[FieldDescriptor]) -> Record | None:
    """Return the normalized record for one row, or None when the row must be dropped.

    A required field that is missing, empty or fails its transform drops the
    row. Optional fields that fail are left out of the record.
    """
    record: Record = {}

    for descriptor in schema:
        raw = raw_row.get(descriptor.name)
        if raw is None or raw == "":
            if descriptor.required:
                return None
            continue

        try:
            value = apply_transform(descriptor.kind, raw, descriptor.params)
        except FormatError as exc:
            if descriptor.required:
                LOGGER.debug("Dropping row: field %s rejected: %s", descriptor.name, exc)
                return None
            LOGGER.debug("Skipping optional field %s: %s", descriptor.name, exc)
            continue

        if descriptor.kind is TransformKind.MONTH_YEAR_TOKEN and isinstance(value, MonthYear):
            record[descriptor.name] = value.month
            record[descriptor.params.get("year_field", YEAR_FIELD)] = value.year
        else:
            record[descriptor.name] = value

    return record


def build_records(rows: Iterable[Mapping[str, str | None]], schema: Sequence[FieldDescriptor]) -> BuildResult:
    """Normalize a stream of rows, silently dropping the invalid ones."""
    records: list[Record] = []
    dropped = 0
    total = 0

    # Line 1 is the header.
    for line_number, row in enumerate(rows, start=2):
        total += 1
        record = build_record(row, schema)
        if record is None:
            dropped += 1
            LOGGER.debug("Row at line %s dropped: missing or invalid required field", line_number)
            continue
        records.append(record)

    LOGGER.info("Built records: total=%s valid=%s dropped=%s", total, len(records), dropped)
    return BuildResult(records=records, dropped=dropped, total_rows=total)
