from pathlib import Path
from unittest.mock import patch

import pytest

from config import load_config
from field_rules import PROJECTION_SCHEMA


def test_load_config_defaults() -> None:
    with patch.dict("os.environ", {"RECEPTION_API_URL": "https://receptions.example.com"}, clear=True):
        config = load_config()

    assert config.source_path == Path("proyeccion.csv")
    assert config.report_path == Path("comparacion_proyeccion_vs_real_2022_2023.xlsx")
    assert config.s3_bucket == "proyecciones"
    assert config.s3_key == "comparacion_proyeccion_vs_real_2022_2023.xlsx"
    assert config.aws_region == "us-east-1"
    assert config.upload is True
    assert config.schema == PROJECTION_SCHEMA
    assert config.group_field == "Nombre_Productor"


def test_load_config_reads_environment() -> None:
    env = {
        "RECEPTION_API_URL": "https://receptions.example.com",
        "RECEPTION_API_KEY": "k",
        "RECEPTION_API_TIMEOUT": "5",
        "SOURCE_CSV_PATH": "/data/in.csv",
        "REPORT_OUTPUT_PATH": "/data/out.xlsx",
        "S3_BUCKET": "bucket",
        "REPORT_UPLOAD": "false",
    }
    with patch.dict("os.environ", env, clear=True):
        config = load_config()

    assert config.reception_api_key == "k"
    assert config.reception_api_timeout == 5.0
    assert config.source_path == Path("/data/in.csv")
    assert config.s3_key == "out.xlsx"
    assert config.s3_bucket == "bucket"
    assert config.upload is False


def test_load_config_overrides_report_path_and_key() -> None:
    with patch.dict("os.environ", {"RECEPTION_API_URL": "https://receptions.example.com"}, clear=True):
        config = load_config(report_path="out/weekly.xlsx", upload=False)

    assert config.report_path == Path("out/weekly.xlsx")
    assert config.s3_key == "weekly.xlsx"
    assert config.upload is False


def test_load_config_requires_api_url() -> None:
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(RuntimeError, match="RECEPTION_API_URL"):
            load_config()
