"""S3 publish step for the generated report."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import boto3

LOGGER = logging.getLogger(__name__)


class PublishError(RuntimeError):
    """Raised when the report cannot be uploaded."""


def create_s3_client(region: str | None = None, profile: str | None = None) -> Any:
    """Create a boto3 S3 client from an optional profile and region."""
    session_kwargs: dict[str, str] = {}
    if profile:
        session_kwargs["profile_name"] = profile
    if region:
        session_kwargs["region_name"] = region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def publish_report(
    path: str | Path,
    bucket: str,
    key: str,
    client: Any | None = None,
    region: str | None = None,
    profile: str | None = None,
) -> None:
    """Upload the report file to s3://bucket/key.

    A client created here is closed before returning.

    Raises:
        PublishError: if the file is missing or the upload fails.
    """
    local_file = Path(path)
    if not local_file.is_file():
        raise PublishError(f"Report file not found: {local_file}")

    owns_client = client is None
    s3_client = client if client is not None else create_s3_client(region=region, profile=profile)
    try:
        s3_client.upload_file(str(local_file), bucket, key)
    except Exception as exc:
        raise PublishError(f"Failed to upload {local_file} to s3://{bucket}/{key}: {exc}") from exc
    finally:
        if owns_client:
            s3_client.close()

    LOGGER.info("Uploaded report to s3://%s/%s", bucket, key)
