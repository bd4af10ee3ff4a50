"""Report emitter: writes one worksheet per producer into a single .xlsx file.

Each sheet holds the records of one producer, in the order they appeared in
the source export:

  row 1     column headers (keys of the producer's first record)
  row 2..n  one enriched record per row, values in header order

Sheet names are capped at 31 characters by the xlsx format. Names that
collide after truncation get a "~2", "~3", ... suffix inside the same budget.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Sequence

from openpyxl import Workbook

from field_rules import GROUPING_FIELD
from models import Record

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Sheet naming
# ---------------------------------------------------------------------------

SHEET_NAME_LIMIT = 31
EMPTY_GROUP_NAME = "SIN_NOMBRE"
EMPTY_REPORT_SHEET = "SIN_DATOS"

_INVALID_SHEET_CHARS_RE = re.compile(r"[\[\]:*?/\\]")


def _clean_sheet_name(key: Any) -> str:
    text = _INVALID_SHEET_CHARS_RE.sub("_", str(key) if key is not None else "").strip()
    return text or EMPTY_GROUP_NAME


def sheet_names(keys: Iterable[Any], limit: int = SHEET_NAME_LIMIT) -> dict[Any, str]:
    """Map each group key to a unique sheet name no longer than `limit`.

    Excel compares sheet names case-insensitively, so collisions are too.
    """
    assigned: dict[Any, str] = {}
    taken: set[str] = set()

    for key in keys:
        base = _clean_sheet_name(key)[:limit]
        name = base
        counter = 2
        while name.lower() in taken:
            suffix = f"~{counter}"
            name = base[: limit - len(suffix)] + suffix
            counter += 1
        if name != base:
            LOGGER.warning("report: sheet name %r collides, using %r for key %r", base, name, key)
        taken.add(name.lower())
        assigned[key] = name

    return assigned


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def group_by(records: Iterable[Record], key: str = GROUPING_FIELD) -> dict[Any, list[Record]]:
    """Partition records by `key`, keeping first-seen order of groups and records."""
    groups: dict[Any, list[Record]] = {}
    for record in records:
        groups.setdefault(record.get(key), []).append(record)
    return groups


# ---------------------------------------------------------------------------
# Workbook builders
# ---------------------------------------------------------------------------


def _header_and_rows(partition: Sequence[Record]) -> tuple[list[str], list[list[Any]]]:
    headers = list(partition[0].keys())
    rows = [[record.get(column) for column in headers] for record in partition]
    return headers, rows


def build_workbook(records: Sequence[Record], group_field: str = GROUPING_FIELD) -> Workbook:
    """Build an in-memory workbook with one sheet per value of `group_field`."""
    workbook = Workbook()
    default_sheet = workbook.active

    groups = group_by(records, group_field)
    if not groups:
        default_sheet.title = EMPTY_REPORT_SHEET
        LOGGER.warning("report: no records to write, emitting empty %s sheet", EMPTY_REPORT_SHEET)
        return workbook

    workbook.remove(default_sheet)
    names = sheet_names(groups.keys())

    for key, partition in groups.items():
        sheet = workbook.create_sheet(title=names[key])
        headers, rows = _header_and_rows(partition)
        sheet.append(headers)
        for row in rows:
            sheet.append(row)

    return workbook


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def write_report(
    records: Sequence[Record],
    path: str | Path,
    group_field: str = GROUPING_FIELD,
) -> Path:
    """Write the grouped workbook to `path` and return the path."""
    output = Path(path)
    if output.parent and not output.parent.exists():
        output.parent.mkdir(parents=True, exist_ok=True)

    workbook = build_workbook(records, group_field)
    workbook.save(output)

    LOGGER.info(
        "report: %d records in %d sheets → %s",
        len(records),
        len(workbook.sheetnames),
        output,
    )
    return output
