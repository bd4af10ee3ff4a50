"""Run configuration, read once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from field_rules import GROUPING_FIELD, PROJECTION_SCHEMA
from models import FieldDescriptor

DEFAULT_SOURCE_CSV = "proyeccion.csv"
DEFAULT_REPORT_FILENAME = "comparacion_proyeccion_vs_real_2022_2023.xlsx"
DEFAULT_S3_BUCKET = "proyecciones"
DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_API_TIMEOUT_SECONDS = 20.0

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Everything one pipeline run needs; passed explicitly to run_pipeline."""

    source_path: Path
    report_path: Path
    reception_api_url: str
    reception_api_key: str | None = None
    reception_api_timeout: float = DEFAULT_API_TIMEOUT_SECONDS
    s3_bucket: str = DEFAULT_S3_BUCKET
    s3_key: str = DEFAULT_REPORT_FILENAME
    aws_region: str | None = DEFAULT_AWS_REGION
    aws_profile: str | None = None
    upload: bool = True
    schema: tuple[FieldDescriptor, ...] = PROJECTION_SCHEMA
    group_field: str = GROUPING_FIELD


def load_config(**overrides: object) -> PipelineConfig:
    """Build a PipelineConfig from environment variables, then apply overrides.

    Raises:
        RuntimeError: if RECEPTION_API_URL is not set and not overridden.
    """
    api_url = overrides.pop("reception_api_url", None) or os.getenv("RECEPTION_API_URL")
    if not api_url:
        raise RuntimeError("RECEPTION_API_URL environment variable is required")

    report_path = Path(os.getenv("REPORT_OUTPUT_PATH", DEFAULT_REPORT_FILENAME))
    config = PipelineConfig(
        source_path=Path(os.getenv("SOURCE_CSV_PATH", DEFAULT_SOURCE_CSV)),
        report_path=report_path,
        reception_api_url=str(api_url),
        reception_api_key=os.getenv("RECEPTION_API_KEY") or None,
        reception_api_timeout=float(os.getenv("RECEPTION_API_TIMEOUT", str(DEFAULT_API_TIMEOUT_SECONDS))),
        s3_bucket=os.getenv("S3_BUCKET", DEFAULT_S3_BUCKET),
        s3_key=os.getenv("S3_KEY") or report_path.name,
        aws_region=os.getenv("AWS_REGION", DEFAULT_AWS_REGION) or None,
        aws_profile=os.getenv("AWS_PROFILE") or None,
        upload=os.getenv("REPORT_UPLOAD", "true").strip().lower() not in _FALSE_VALUES,
    )
    if "report_path" in overrides:
        overrides["report_path"] = Path(overrides["report_path"])  # type: ignore[arg-type]
        if "s3_key" not in overrides and not os.getenv("S3_KEY"):
            overrides["s3_key"] = overrides["report_path"].name  # type: ignore[attr-defined]
    if overrides:
        config = replace(config, **overrides)
    return config
