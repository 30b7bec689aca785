"""
DynamoDB-backed transcript store adapter.

Implements TranscriptStorePort using boto3 for the Transcripts table.

Item layout (partition key ``id``, no sort key)::

    id                  transcript id
    status              ProcessingStatus value (for console filtering)
    title_normalized    lower-cased title   (search filter)
    content_normalized  lower-cased content (search filter)
    created_date        ISO 8601
    document            full camelCase JSON of the transcript

The full record travels as a JSON string so floats inside the insights
never need converting to ``Decimal``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import Transcript
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ExternalServiceError


logger = get_scoped_logger(LogScope.ADAPTER)


class DynamoTranscriptStoreAdapter:
    """Amazon DynamoDB implementation of TranscriptStorePort."""

    def __init__(
        self,
        table_name: str,
        region: str = Defaults.AWS_REGION,
        endpoint_url: str = "",
        timeout_seconds: float = 30.0,
        dynamodb_resource: Optional[object] = None,
    ) -> None:
        self._table_name = table_name
        resource_kwargs: dict = {
            "region_name": region,
            "config": Config(
                connect_timeout=timeout_seconds,
                read_timeout=timeout_seconds,
                retries={"max_attempts": 3, "mode": "standard"},
            ),
        }
        if endpoint_url:
            resource_kwargs["endpoint_url"] = endpoint_url
        self._dynamo = dynamodb_resource or boto3.resource(
            "dynamodb", **resource_kwargs
        )
        self._table = self._dynamo.Table(table_name)

    # ------------------------------------------------------------------
    # TranscriptStorePort implementation
    # ------------------------------------------------------------------

    def get_all_transcripts(self) -> List[Transcript]:
        items = self._scan({}, "get_all_transcripts")
        logger.info("dynamo_get_all_transcripts", results=len(items))
        return self._sorted(items)

    def get_transcript(self, transcript_id: str) -> Optional[Transcript]:
        try:
            response = self._table.get_item(Key={"id": transcript_id})
        except ClientError as exc:
            logger.error(
                "dynamo_get_transcript_failed",
                transcript_id=transcript_id,
                error=str(exc),
            )
            raise ExternalServiceError(
                "DynamoDB", f"Failed to get transcript: {exc}"
            ) from exc
        item = response.get("Item")
        if item is None:
            return None
        return self._from_dynamo_item(item)

    def insert_transcript(self, transcript: Transcript) -> Transcript:
        self._put(transcript, "insert")
        return transcript

    def update_transcript(self, transcript: Transcript) -> Transcript:
        self._put(transcript, "update")
        return transcript

    def delete_transcript(self, transcript_id: str) -> bool:
        try:
            response = self._table.delete_item(
                Key={"id": transcript_id},
                ReturnValues="ALL_OLD",
            )
        except ClientError as exc:
            logger.error(
                "dynamo_delete_transcript_failed",
                transcript_id=transcript_id,
                error=str(exc),
            )
            raise ExternalServiceError(
                "DynamoDB", f"Failed to delete transcript: {exc}"
            ) from exc
        existed = "Attributes" in response
        logger.info(
            "dynamo_delete_transcript",
            transcript_id=transcript_id,
            existed=existed,
        )
        return existed

    def search_transcripts(self, search_term: str) -> List[Transcript]:
        """Scan with a contains filter (acceptable at this table's scale)."""
        term = search_term.lower()
        filter_expr = Attr("title_normalized").contains(term) | Attr(
            "content_normalized"
        ).contains(term)
        items = self._scan({"FilterExpression": filter_expr}, "search_transcripts")
        logger.info("dynamo_search_transcripts", results=len(items))
        return self._sorted(items)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _put(self, transcript: Transcript, operation: str) -> None:
        item = self._to_dynamo_item(transcript)
        try:
            self._table.put_item(Item=item)
        except ClientError as exc:
            logger.error(
                f"dynamo_{operation}_transcript_failed",
                transcript_id=transcript.id,
                error=str(exc),
            )
            raise ExternalServiceError(
                "DynamoDB", f"Failed to {operation} transcript: {exc}"
            ) from exc
        logger.info(
            f"dynamo_{operation}_transcript",
            transcript_id=transcript.id,
            status=transcript.status.value,
        )

    def _scan(self, scan_kwargs: Dict[str, Any], operation: str) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        try:
            # Handle pagination
            while True:
                response = self._table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if last_key is None:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as exc:
            logger.error(f"dynamo_{operation}_failed", error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to scan transcripts: {exc}"
            ) from exc
        return items

    def _sorted(self, items: List[Dict[str, Any]]) -> List[Transcript]:
        transcripts = [self._from_dynamo_item(item) for item in items]
        transcripts.sort(key=lambda t: t.created_date, reverse=True)
        return transcripts

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_dynamo_item(transcript: Transcript) -> Dict[str, Any]:
        """Convert domain Transcript → DynamoDB item dict."""
        return {
            "id": transcript.id,
            "status": transcript.status.value,
            "title_normalized": transcript.title.lower(),
            "content_normalized": transcript.content.lower(),
            "created_date": transcript.created_date.isoformat(),
            "document": json.dumps(transcript.to_json_dict()),
        }

    @staticmethod
    def _from_dynamo_item(item: Dict[str, Any]) -> Transcript:
        """Convert DynamoDB item dict → domain Transcript."""
        return Transcript.model_validate_json(item["document"])
