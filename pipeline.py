"""Orchestrates one projection-vs-reception run: read, build, enrich, report, publish."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from config import PipelineConfig
from csv_source import iter_source_rows
from enrichment_client import DUPLICATE_RECORD_MARKER, ReceptionClient
from field_rules import (
    ORCHARD_FIELD,
    RECEPTION_ACCEPTED_FIELD,
    RECEPTION_TOTAL_FIELD,
    WEEK_FIELD,
    YEAR_FIELD,
)
from models import ErrorCategory, ErrorEntry, Record, RunResult
from record_builder import build_records
from report import write_report
from storage_sink import publish_report

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]
Uploader = Callable[..., None]


def run_pipeline(
    config: PipelineConfig,
    client_factory: ClientFactory = ReceptionClient,
    uploader: Uploader = publish_report,
) -> RunResult:
    """Run the full pipeline once.

    Per-record enrichment failures are collected in RunResult.errors and the
    run continues. Any failure outside the per-record loop aborts the run: no
    records are returned and a GENERAL error is appended after the entries
    collected so far.
    """
    result = RunResult()

    try:
        with client_factory(
            config.reception_api_url,
            api_key=config.reception_api_key,
            timeout=config.reception_api_timeout,
        ) as client:
            built = build_records(iter_source_rows(config.source_path), config.schema)
            result.dropped = built.dropped
            enriched = enrich_records(client, built.records, result.errors)

        result.report_path = write_report(enriched, config.report_path, config.group_field)

        if config.upload:
            uploader(
                result.report_path,
                config.s3_bucket,
                config.s3_key,
                region=config.aws_region,
                profile=config.aws_profile,
            )
            result.published = True
        else:
            LOGGER.info("Upload disabled; report kept at %s", result.report_path)

        result.records = enriched
    except Exception as exc:
        LOGGER.exception("General processing error")
        result.records = []
        result.errors.append(ErrorEntry(None, f"General processing error: {exc}", ErrorCategory.GENERAL))
        return result

    LOGGER.info(
        "Run complete. enriched=%s errors=%s dropped=%s published=%s",
        len(result.records),
        len(result.errors),
        result.dropped,
        result.published,
    )
    return result


def enrich_records(client: Any, records: Sequence[Record], errors: list[ErrorEntry]) -> list[Record]:
    """Attach reception totals to each record in order, one lookup at a time.

    Failed records are left out of the returned list and reported in `errors`.
    """
    enriched: list[Record] = []
    total = len(records)

    for position, record in enumerate(records, start=1):
        LOGGER.info("Processing entry %s out of %s", position, total)
        try:
            receptions = client.fetch_receptions(
                week=int(record[WEEK_FIELD]),
                year=int(record[YEAR_FIELD]),
                orchard_code=int(record[ORCHARD_FIELD]),
            )
            record[RECEPTION_TOTAL_FIELD] = receptions["reception_total"]
            record[RECEPTION_ACCEPTED_FIELD] = receptions["reception_accepted"]
        except Exception as exc:  # noqa: BLE001 - one bad record must not stop the run
            errors.append(_enrichment_error(position, exc))
            LOGGER.warning("Enrichment failed for entry %s: %s", position, exc)
            continue
        enriched.append(record)

    return enriched


def _enrichment_error(position: int, exc: Exception) -> ErrorEntry:
    message = str(exc)
    if DUPLICATE_RECORD_MARKER in message:
        return ErrorEntry(position, f"Entry {position}: {message}", ErrorCategory.DUPLICATE_RECORD)
    return ErrorEntry(position, f"Error processing entry {position}: {message}", ErrorCategory.ENRICHMENT)


def format_error_summary(errors: Sequence[ErrorEntry]) -> str:
    """Render accumulated errors as plain text for an external notification."""
    if not errors:
        return "Pipeline completed without errors."
    lines = [f"Pipeline completed with {len(errors)} error(s):"]
    lines.extend(f"- [{entry.category.value}] {entry.message}" for entry in errors)
    return "\n".join(lines)
