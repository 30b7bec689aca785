"""
ProcessingOrchestrator: drives transcripts through the enrichment pipeline.

Flow per transcript:  Processing (persisted) → enrich → Completed (persisted)
→ optional search indexing → optional analytics export.

Status is the only durable record of an attempt's outcome:

* enrichment or the Completed write failing marks the transcript Failed
  (prior insights restored, so a partial enrichment is never stored) and
  raises ``TranscriptProcessingError`` to the trigger;
* indexing and export are best-effort; their failures are logged and never
  change the status;
* the search/export toggles are read per transcript, so flipping one takes
  effect mid-batch.

There is no per-transcript lock: two triggers for the same id can interleave
their writes (last write wins).

Depends only on ports, never on concrete adapters.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import List, Optional

from domain.models import (
    AiInsights,
    AnalyticsRecord,
    BatchReport,
    ProcessingStatus,
    Transcript,
    utc_now,
)
from ports.analytics_export import AnalyticsExportPort
from ports.enrichment import EnrichmentPort
from ports.search_index import SearchIndexPort
from ports.transcript_source import TranscriptSourcePort
from ports.transcript_store import TranscriptStorePort
from shared_utils.constants import LogScope
from shared_utils.error_handler import AppException, TranscriptProcessingError
from shared_utils.feature_flags import FeatureFlags
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.timeouts import call_with_timeout

logger = get_scoped_logger(LogScope.ORCHESTRATION)


class ProcessingOrchestrator:
    """Batch and single-item processing with per-item failure isolation."""

    def __init__(
        self,
        *,
        transcript_source: TranscriptSourcePort,
        enrichment: EnrichmentPort,
        transcript_store: TranscriptStorePort,
        search_index: Optional[SearchIndexPort] = None,
        analytics_exporter: Optional[AnalyticsExportPort] = None,
        feature_flags: Optional[FeatureFlags] = None,
        call_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._source = transcript_source
        self._enrichment = enrichment
        self._store = transcript_store
        self._index = search_index
        self._exporter = analytics_exporter
        self._flags = feature_flags or FeatureFlags()
        self._timeout = call_timeout_seconds

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def run_batch(self) -> BatchReport:
        """Retrieve new transcripts and process each one independently.

        Only a retrieval failure fails the batch; an item failure is recorded
        on that transcript (status=Failed) and in the report.

        Raises:
            TranscriptProcessingError: If retrieval fails.
        """
        started = time.time()
        started_at = utc_now()
        logger.info("batch_started")

        try:
            transcripts: List[Transcript] = call_with_timeout(
                "TranscriptSource",
                self._source.retrieve_new_transcripts,
                timeout=self._timeout,
            )
        except Exception as exc:
            logger.error("batch_retrieval_failed", error=f"{type(exc).__name__}: {exc}")
            raise TranscriptProcessingError(
                f"Transcript retrieval failed: {exc}"
            ) from exc

        logger.info("batch_retrieved", count=len(transcripts))

        completed: List[str] = []
        failed: List[str] = []
        for transcript in transcripts:
            try:
                self.process_one(transcript)
                completed.append(transcript.id)
            except Exception as exc:
                # process_one has already recorded Failed; keep going
                failed.append(transcript.id)
                logger.warning(
                    "batch_item_failed",
                    transcript_id=transcript.id,
                    error=f"{type(exc).__name__}: {exc}",
                )

        report = BatchReport(
            retrieved=len(transcripts),
            completed_ids=completed,
            failed_ids=failed,
            started_at=started_at.isoformat(),
            completed_at=utc_now().isoformat(),
            duration_ms=round((time.time() - started) * 1000, 1),
        )
        logger.info(
            "batch_finished",
            retrieved=report.retrieved,
            completed=len(completed),
            failed=len(failed),
            duration_ms=report.duration_ms,
        )
        return report

    def run_one(self, transcript_id: str) -> Optional[Transcript]:
        """Process a stored transcript by id.

        Returns ``None`` (after logging) when the id is unknown.  Processing
        failures propagate so the trigger's retry policy applies.
        """
        logger.info("single_run_started", transcript_id=transcript_id)
        transcript = call_with_timeout(
            "TranscriptStore",
            self._store.get_transcript,
            transcript_id,
            timeout=self._timeout,
        )
        if transcript is None:
            logger.warning("transcript_not_found", transcript_id=transcript_id)
            return None
        return self.process_one(transcript)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def process_one(self, transcript: Transcript) -> Transcript:
        """Run one processing attempt for *transcript* (mutated in place).

        Raises:
            TranscriptProcessingError: If enrichment or persistence fails;
                the transcript has been marked Failed first.
        """
        started = time.time()
        prior_insights: Optional[AiInsights] = transcript.ai_insights
        prior_processed_date: Optional[datetime] = transcript.processed_date

        logger.info(
            "transcript_processing_started",
            transcript_id=transcript.id,
            prior_status=transcript.status.value,
            content_len=len(transcript.content),
        )

        try:
            transcript.status = ProcessingStatus.PROCESSING
            self._persist(transcript)

            insights = call_with_timeout(
                "Enrichment",
                self._enrichment.enrich,
                transcript.content,
                timeout=self._timeout,
            )
            transcript.ai_insights = insights
            transcript.processed_date = utc_now()
            transcript.status = ProcessingStatus.COMPLETED
            self._persist(transcript)
        except Exception as exc:
            self._mark_failed(transcript, prior_insights, prior_processed_date, exc)
            message = exc.message if isinstance(exc, AppException) else str(exc)
            raise TranscriptProcessingError(
                f"Processing failed for transcript {transcript.id}: {message}",
                transcript_id=transcript.id,
            ) from exc

        self._index_if_enabled(transcript)
        self._export_if_enabled(transcript)

        logger.info(
            "transcript_processing_completed",
            transcript_id=transcript.id,
            themes=len(transcript.ai_insights.themes),
            action_items=len(transcript.ai_insights.action_items),
            latency_ms=round((time.time() - started) * 1000, 1),
        )
        return transcript

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(self, transcript: Transcript) -> None:
        call_with_timeout(
            "TranscriptStore",
            self._store.update_transcript,
            transcript,
            timeout=self._timeout,
        )

    def _mark_failed(
        self,
        transcript: Transcript,
        prior_insights: Optional[AiInsights],
        prior_processed_date: Optional[datetime],
        cause: Exception,
    ) -> None:
        """Record Failed, best-effort. A failing write here is only logged."""
        logger.error(
            "transcript_processing_failed",
            transcript_id=transcript.id,
            error=f"{type(cause).__name__}: {cause}",
        )
        transcript.ai_insights = prior_insights
        transcript.processed_date = prior_processed_date
        transcript.status = ProcessingStatus.FAILED
        try:
            self._persist(transcript)
        except Exception as exc:
            logger.error(
                "failed_status_persist_failed",
                transcript_id=transcript.id,
                error=f"{type(exc).__name__}: {exc}",
            )

    def _index_if_enabled(self, transcript: Transcript) -> None:
        if not self._flags.is_search_enabled():
            return
        if self._index is None:
            logger.warning("search_enabled_without_index", transcript_id=transcript.id)
            return
        try:
            call_with_timeout(
                "SearchIndex",
                self._index.index_transcript,
                transcript,
                timeout=self._timeout,
            )
            logger.info("transcript_indexed", transcript_id=transcript.id)
        except Exception as exc:
            logger.warning(
                "search_index_failed",
                transcript_id=transcript.id,
                error=f"{type(exc).__name__}: {exc}",
            )

    def _export_if_enabled(self, transcript: Transcript) -> None:
        if not self._flags.is_analytics_export_enabled():
            return
        if self._exporter is None:
            logger.warning("analytics_export_enabled_without_exporter", transcript_id=transcript.id)
            return
        try:
            call_with_timeout(
                "AnalyticsExport",
                self._exporter.export,
                AnalyticsRecord.from_transcript(transcript),
                timeout=self._timeout,
            )
            logger.info("transcript_exported", transcript_id=transcript.id)
        except Exception as exc:
            logger.warning(
                "analytics_export_failed",
                transcript_id=transcript.id,
                error=f"{type(exc).__name__}: {exc}",
            )
