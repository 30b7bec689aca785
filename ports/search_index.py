"""
Port interface for the optional transcript search index.

Implementations: InMemorySearchIndexAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from domain.models import Transcript


@runtime_checkable
class SearchIndexPort(Protocol):
    """Abstract interface for indexing and querying transcripts."""

    def index_transcript(self, transcript: Transcript) -> None:
        """Insert or replace the index entry for *transcript*."""
        ...

    def delete_transcript(self, transcript_id: str) -> None:
        """Remove the index entry for *transcript_id* (no-op when absent)."""
        ...

    def search(self, query: str, max_results: int = 10) -> List[Transcript]:
        """Return at most *max_results* transcripts, most relevant first."""
        ...
