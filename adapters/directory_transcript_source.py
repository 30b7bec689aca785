"""
Local-directory transcript source for development.

Reads ``*.json`` transcript documents from a folder (same document format as
the S3 inbox).  Files are left in place; transcripts already in the store are
skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from domain.models import Transcript, transcript_from_source
from ports.transcript_store import TranscriptStorePort
from shared_utils.logging_utils import ContextualLogger
from shared_utils.constants import LogScope, StorageConfig


logger = ContextualLogger(scope=LogScope.ADAPTER)


class DirectoryTranscriptSourceAdapter:
    """Filesystem implementation of TranscriptSourcePort."""

    def __init__(self, directory: str, transcript_store: TranscriptStorePort) -> None:
        self._directory = Path(directory)
        self._store = transcript_store

    def retrieve_new_transcripts(self) -> List[Transcript]:
        if not self._directory.is_dir():
            logger.warning("inbox_directory_missing", directory=str(self._directory))
            return []

        paths = sorted(self._directory.glob(f"*{StorageConfig.SOURCE_DOCUMENT_SUFFIX}"))
        transcripts: List[Transcript] = []
        seen = set()
        for path in paths:
            try:
                payload = json.loads(path.read_text(encoding="utf-8"))
                transcript = transcript_from_source(payload)
            except ValueError as exc:
                # JSONDecodeError and pydantic's ValidationError are both ValueErrors
                logger.warning("inbox_document_invalid", path=str(path), error=str(exc))
                continue
            if transcript.id in seen:
                continue
            seen.add(transcript.id)
            if self._store.get_transcript(transcript.id) is None:
                transcripts.append(transcript)

        logger.info(
            "directory_transcripts_retrieved",
            directory=str(self._directory),
            documents=len(paths),
            new=len(transcripts),
        )
        return transcripts
