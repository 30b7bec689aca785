"""
Port interface for transcript persistence.

Implementations: DynamoTranscriptStoreAdapter, InMemoryTranscriptStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from domain.models import Transcript


@runtime_checkable
class TranscriptStorePort(Protocol):
    """Abstract interface for transcript CRUD and text search."""

    def get_all_transcripts(self) -> List[Transcript]:
        """Return every stored transcript."""
        ...

    def get_transcript(self, transcript_id: str) -> Optional[Transcript]:
        """Retrieve a single transcript by ID.

        Args:
            transcript_id: Primary key.

        Returns:
            Transcript if found, None otherwise.
        """
        ...

    def insert_transcript(self, transcript: Transcript) -> Transcript:
        """Store a new transcript.

        Raises:
            ExternalServiceError: If the store is unreachable.
        """
        ...

    def update_transcript(self, transcript: Transcript) -> Transcript:
        """Overwrite a transcript (last write wins).

        Raises:
            ExternalServiceError: If the store is unreachable.
        """
        ...

    def delete_transcript(self, transcript_id: str) -> bool:
        """Delete a transcript.

        Returns:
            True if a record existed and was removed, False otherwise.
        """
        ...

    def search_transcripts(self, search_term: str) -> List[Transcript]:
        """Case-insensitive substring match over title and content."""
        ...
