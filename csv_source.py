"""CSV reader for the weekly projection export."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterator

LOGGER = logging.getLogger(__name__)

# utf-8-sig tolerates the BOM spreadsheet tools prepend to exports.
SOURCE_ENCODING = "utf-8-sig"


def iter_source_rows(path: str | Path) -> Iterator[dict[str, str | None]]:
    """Yield one raw row per CSV line, keyed by header name.

    Raises:
        FileNotFoundError: if the source file does not exist.
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Source CSV not found: {source}")

    LOGGER.info("Reading source rows from %s", source)
    with source.open(newline="", encoding=SOURCE_ENCODING) as fh:
        reader = csv.DictReader(fh)
        for row in reader:
            yield row
