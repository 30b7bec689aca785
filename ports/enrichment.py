"""Port interface for AI enrichment of transcript content."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from domain.models import AiInsights


@runtime_checkable
class EnrichmentPort(Protocol):
    """Derive insights from raw transcript text. Must be safe to retry."""

    def enrich(self, content: str) -> AiInsights:
        """Produce sentiment, themes, key points, action items and a summary.

        Raises:
            EnrichmentError: If no usable insights could be produced.
        """
        ...
