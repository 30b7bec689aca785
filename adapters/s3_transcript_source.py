"""
S3 inbox transcript source.

Implements TranscriptSourcePort by reading transcript documents (camelCase
JSON, one per object) that the meeting-platform export drops under
``{bucket}/{prefix}/``.  Objects are never moved or deleted; a transcript is
"new" when its id is not yet in the transcript store, so repeated calls
against the same bucket contents return the same set.
"""

from __future__ import annotations

import json
from typing import List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import Transcript, transcript_from_source
from ports.transcript_store import TranscriptStorePort
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import Defaults, LogScope, StorageConfig
from shared_utils.error_handler import ExternalServiceError


logger = get_scoped_logger(LogScope.ADAPTER)


class S3TranscriptSourceAdapter:
    """Amazon S3 implementation of TranscriptSourcePort."""

    def __init__(
        self,
        bucket: str,
        prefix: str,
        transcript_store: TranscriptStorePort,
        region: str = Defaults.AWS_REGION,
        endpoint_url: str = "",
        timeout_seconds: float = 30.0,
        s3_client: Optional[object] = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self._store = transcript_store
        client_kwargs: dict = {
            "region_name": region,
            "config": Config(connect_timeout=timeout_seconds, read_timeout=timeout_seconds),
        }
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        self._s3 = s3_client or boto3.client("s3", **client_kwargs)

    # ------------------------------------------------------------------
    # TranscriptSourcePort implementation
    # ------------------------------------------------------------------

    def retrieve_new_transcripts(self) -> List[Transcript]:
        keys = self._list_document_keys()
        transcripts: List[Transcript] = []
        seen = set()
        for key in keys:
            transcript = self._load(key)
            if transcript is None or transcript.id in seen:
                continue
            seen.add(transcript.id)
            if self._store.get_transcript(transcript.id) is not None:
                continue
            transcripts.append(transcript)

        logger.info(
            "s3_transcripts_retrieved",
            bucket=self.bucket,
            documents=len(keys),
            new=len(transcripts),
        )
        return transcripts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _list_document_keys(self) -> List[str]:
        keys: List[str] = []
        list_kwargs = {"Bucket": self.bucket, "Prefix": f"{self.prefix}/"}
        try:
            while True:
                response = self._s3.list_objects_v2(**list_kwargs)
                for obj in response.get("Contents", []):
                    if obj["Key"].endswith(StorageConfig.SOURCE_DOCUMENT_SUFFIX):
                        keys.append(obj["Key"])
                if not response.get("IsTruncated"):
                    break
                list_kwargs["ContinuationToken"] = response["NextContinuationToken"]
        except ClientError as exc:
            logger.error("s3_list_inbox_failed", bucket=self.bucket, error=str(exc))
            raise ExternalServiceError("S3", f"Failed to list transcript inbox: {exc}") from exc
        return sorted(keys)

    def _load(self, key: str) -> Optional[Transcript]:
        """Parse one document; malformed documents are skipped, not fatal."""
        try:
            response = self._s3.get_object(Bucket=self.bucket, Key=key)
            payload = json.loads(response["Body"].read())
        except ClientError as exc:
            logger.error("s3_get_document_failed", key=key, error=str(exc))
            raise ExternalServiceError("S3", f"Failed to read transcript document: {exc}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("s3_document_not_json", key=key, error=str(exc))
            return None

        try:
            return transcript_from_source(payload)
        except ValueError as exc:
            logger.warning("s3_document_invalid", key=key, error=str(exc))
            return None
