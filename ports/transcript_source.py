"""
Port interface for retrieving transcripts from the meeting platform.

Implementations: S3TranscriptSourceAdapter, DirectoryTranscriptSourceAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from domain.models import Transcript


@runtime_checkable
class TranscriptSourcePort(Protocol):
    """Pull newly available transcripts."""

    def retrieve_new_transcripts(self) -> List[Transcript]:
        """Return Pending transcripts not yet known to the pipeline.

        Repeated calls against an unchanged source return the same set.

        Raises:
            ExternalServiceError: If the source is unreachable.
        """
        ...
