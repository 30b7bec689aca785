"""
Local JSON-file adapter for AnalyticsExportPort.

Keeps the latest analytics record per transcript in a single JSON file on
disk for local development; production swaps to the
S3 adapter behind the same port.
"""

from __future__ import annotations

import json
import os
import threading
from domain.models import AnalyticsRecord
from shared_utils.logging_utils import ContextualLogger
from shared_utils.constants import LogScope, StorageConfig


logger = ContextualLogger(scope=LogScope.ADAPTER)


class JsonAnalyticsExportAdapter:
    """Thread-safe JSON file sink, one entry per transcript id."""

    def __init__(self, path: str = StorageConfig.ANALYTICS_LOCAL_PATH) -> None:
        self._path = path
        self._lock = threading.Lock()
        # Ensure directory exists
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)

    # ------------------------------------------------------------------
    # AnalyticsExportPort implementation
    # ------------------------------------------------------------------

    def export(self, record: AnalyticsRecord) -> None:
        """Insert or replace the record for its transcript."""
        with self._lock:
            data = [
                d for d in self._read_all()
                if d.get("transcriptId") != record.transcript_id
            ]
            data.append(record.to_json_dict())
            self._write_all(data)
        logger.info(
            "analytics_record_exported",
            transcript_id=record.transcript_id,
            path=self._path,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_all(self) -> list:
        if not os.path.exists(self._path):
            return []
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError):
            logger.warning("analytics_store_corrupt_file", path=self._path)
            return []

    def _write_all(self, data: list) -> None:
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
