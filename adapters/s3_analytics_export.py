"""
S3-backed analytics export adapter.

Implements AnalyticsExportPort by writing one JSON object per transcript
under ``{bucket}/{prefix}/dt={YYYY-MM-DD}/{transcript_id}.json``.  The date
partition is the export date, so downstream lakehouse tables can load
incrementally.  Re-exporting a transcript on the same day overwrites its object.
"""

from __future__ import annotations

import json
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import AnalyticsRecord
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ExternalServiceError


logger = get_scoped_logger(LogScope.ADAPTER)


class S3AnalyticsExportAdapter:
    """Amazon S3 implementation of AnalyticsExportPort."""

    def __init__(
        self,
        bucket: str,
        prefix: str,
        region: str = Defaults.AWS_REGION,
        endpoint_url: str = "",
        timeout_seconds: float = 30.0,
        s3_client: Optional[object] = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        client_kwargs: dict = {
            "region_name": region,
            "config": Config(connect_timeout=timeout_seconds, read_timeout=timeout_seconds),
        }
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        self._s3 = s3_client or boto3.client("s3", **client_kwargs)

    def object_key(self, record: AnalyticsRecord) -> str:
        partition = record.exported_at.date().isoformat()
        return f"{self.prefix}/dt={partition}/{record.transcript_id}.json"

    # ------------------------------------------------------------------
    # AnalyticsExportPort implementation
    # ------------------------------------------------------------------

    def export(self, record: AnalyticsRecord) -> None:
        """Write the record as a JSON object."""
        key = self.object_key(record)
        body = json.dumps(record.to_json_dict()).encode("utf-8")
        try:
            self._s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType="application/json",
            )
        except ClientError as exc:
            logger.error(
                "s3_analytics_export_failed",
                transcript_id=record.transcript_id,
                error=str(exc),
            )
            raise ExternalServiceError("S3", f"Failed to export analytics record: {exc}") from exc
        logger.info(
            "analytics_record_exported",
            transcript_id=record.transcript_id,
            s3_uri=f"s3://{self.bucket}/{key}",
        )
