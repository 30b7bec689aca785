"""
Port interface for the analytics sink.

Implementations: S3AnalyticsExportAdapter, JsonAnalyticsExportAdapter (adapters/)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from domain.models import AnalyticsRecord


@runtime_checkable
class AnalyticsExportPort(Protocol):
    """Forward completed-transcript records to an external analytics store."""

    def export(self, record: AnalyticsRecord) -> None:
        """Persist one analytics record.

        Raises:
            ExternalServiceError: If the sink is unreachable.
        """
        ...
