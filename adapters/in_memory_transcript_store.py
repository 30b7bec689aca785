"""
In-memory transcript store adapter for local development.

Implements TranscriptStorePort with a dict guarded by a lock.  Records are
deep-copied on the way in and out so callers never share state with the store.

NOT for production: no persistence across restarts.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from domain.models import Transcript
from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)


class InMemoryTranscriptStoreAdapter:
    """Dict-backed implementation of TranscriptStorePort."""

    def __init__(self) -> None:
        self._store: Dict[str, Transcript] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # TranscriptStorePort implementation
    # ------------------------------------------------------------------

    def get_all_transcripts(self) -> List[Transcript]:
        with self._lock:
            records = [t.model_copy(deep=True) for t in self._store.values()]
        records.sort(key=lambda t: t.created_date, reverse=True)
        return records

    def get_transcript(self, transcript_id: str) -> Optional[Transcript]:
        with self._lock:
            found = self._store.get(transcript_id)
            return found.model_copy(deep=True) if found is not None else None

    def insert_transcript(self, transcript: Transcript) -> Transcript:
        with self._lock:
            self._store[transcript.id] = transcript.model_copy(deep=True)
        logger.info("inmemory_transcript_inserted", transcript_id=transcript.id)
        return transcript

    def update_transcript(self, transcript: Transcript) -> Transcript:
        with self._lock:
            self._store[transcript.id] = transcript.model_copy(deep=True)
        logger.info(
            "inmemory_transcript_updated",
            transcript_id=transcript.id,
            status=transcript.status.value,
        )
        return transcript

    def delete_transcript(self, transcript_id: str) -> bool:
        with self._lock:
            removed = self._store.pop(transcript_id, None)
        logger.info(
            "inmemory_transcript_deleted",
            transcript_id=transcript_id,
            existed=removed is not None,
        )
        return removed is not None

    def search_transcripts(self, search_term: str) -> List[Transcript]:
        term = search_term.lower()
        return [
            t
            for t in self.get_all_transcripts()
            if term in t.title.lower() or term in t.content.lower()
        ]
