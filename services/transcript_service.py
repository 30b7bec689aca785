"""
TranscriptService: read/write/search façade over the transcript store.

Writes go to the store first; the search index is then updated best-effort
(an index failure is logged, never raised).  Search asks the index first and
falls back to the store's own text search only when the index raises; a
genuinely empty index result is returned as-is.

Also serves the portfolio aggregates (top themes, insights summary).
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional

from domain.models import (
    ActionItemStatus,
    InsightsSummary,
    ProcessingStatus,
    ThemeSummary,
    Transcript,
)
from ports.search_index import SearchIndexPort
from ports.transcript_store import TranscriptStorePort
from shared_utils.constants import Defaults, LogScope
from shared_utils.feature_flags import FeatureFlags
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.TRANSCRIPTS)


class TranscriptService:
    """Façade combining the transcript store and the optional search index."""

    def __init__(
        self,
        transcript_store: TranscriptStorePort,
        search_index: Optional[SearchIndexPort] = None,
        feature_flags: Optional[FeatureFlags] = None,
    ) -> None:
        self._store = transcript_store
        self._index = search_index
        self._flags = feature_flags

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_transcripts(self) -> List[Transcript]:
        transcripts = self._store.get_all_transcripts()
        logger.info("transcripts_listed", count=len(transcripts))
        return transcripts

    def get_transcript(self, transcript_id: str) -> Optional[Transcript]:
        return self._store.get_transcript(transcript_id)

    def save_transcript(self, transcript: Transcript) -> Transcript:
        """Insert or update, then index best-effort."""
        existing = self._store.get_transcript(transcript.id)
        if existing is None:
            saved = self._store.insert_transcript(transcript)
            logger.info("transcript_inserted", transcript_id=transcript.id)
        else:
            saved = self._store.update_transcript(transcript)
            logger.info("transcript_updated", transcript_id=transcript.id)

        index = self._active_index()
        if index is not None:
            try:
                index.index_transcript(saved)
            except Exception as exc:
                logger.warning(
                    "search_index_failed",
                    transcript_id=transcript.id,
                    error=f"{type(exc).__name__}: {exc}",
                )
        return saved

    def delete_transcript(self, transcript_id: str) -> bool:
        """Returns whether the store held (and removed) the record."""
        deleted = self._store.delete_transcript(transcript_id)
        logger.info("transcript_delete", transcript_id=transcript_id, deleted=deleted)

        # Ignores the search flag: an entry indexed earlier must not outlive the record
        if deleted and self._index is not None:
            try:
                self._index.delete_transcript(transcript_id)
            except Exception as exc:
                logger.warning(
                    "search_index_delete_failed",
                    transcript_id=transcript_id,
                    error=f"{type(exc).__name__}: {exc}",
                )
        return deleted

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_transcripts(
        self, query: str, max_results: int = Defaults.MAX_SEARCH_RESULTS
    ) -> List[Transcript]:
        index = self._active_index()
        if index is not None:
            try:
                results = index.search(query, max_results)
                logger.info("transcript_search_index", results=len(results))
                return results
            except Exception as exc:
                logger.warning(
                    "search_index_unavailable_falling_back",
                    error=f"{type(exc).__name__}: {exc}",
                )

        results = self._store.search_transcripts(query)[:max_results]
        logger.info("transcript_search_store", results=len(results))
        return results

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def get_themes(self, limit: int = Defaults.TOP_THEMES) -> List[ThemeSummary]:
        """Themes across all enriched transcripts, most mentioned first."""
        return _aggregate_themes(self._store.get_all_transcripts(), limit)

    def get_insights_summary(self) -> InsightsSummary:
        transcripts = self._store.get_all_transcripts()
        enriched = [t for t in transcripts if t.ai_insights is not None]

        status_counts = Counter(t.status.value for t in transcripts)
        summary = InsightsSummary(
            total_transcripts=len(transcripts),
            status_counts={s.value: status_counts.get(s.value, 0) for s in ProcessingStatus},
            enriched_transcripts=len(enriched),
            open_action_items=sum(
                1
                for t in enriched
                for item in t.ai_insights.action_items
                if item.status in (ActionItemStatus.OPEN, ActionItemStatus.IN_PROGRESS)
            ),
            top_themes=_aggregate_themes(transcripts, Defaults.TOP_THEMES),
        )
        if enriched:
            summary.average_sentiment_score = round(
                sum(t.ai_insights.sentiment.score for t in enriched) / len(enriched), 4
            )
            summary.average_confidence = round(
                sum(t.ai_insights.confidence for t in enriched) / len(enriched), 4
            )
        logger.info(
            "insights_summary_built",
            total=summary.total_transcripts,
            enriched=summary.enriched_transcripts,
        )
        return summary

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _active_index(self) -> Optional[SearchIndexPort]:
        if self._index is None:
            return None
        if self._flags is not None and not self._flags.is_search_enabled():
            return None
        return self._index


def _aggregate_themes(transcripts: List[Transcript], limit: int) -> List[ThemeSummary]:
    buckets: Dict[str, dict] = {}
    for transcript in transcripts:
        if transcript.ai_insights is None:
            continue
        seen_here = set()
        for theme in transcript.ai_insights.themes:
            key = theme.name.strip().lower()
            if not key:
                continue
            bucket = buckets.setdefault(
                key,
                {"name": theme.name.strip(), "category": theme.category,
                 "mentions": 0, "relevance": [], "transcripts": 0},
            )
            bucket["mentions"] += theme.mentions
            bucket["relevance"].append(theme.relevance)
            if key not in seen_here:
                bucket["transcripts"] += 1
                seen_here.add(key)

    summaries = [
        ThemeSummary(
            name=b["name"],
            category=b["category"],
            mentions=b["mentions"],
            average_relevance=round(sum(b["relevance"]) / len(b["relevance"]), 4),
            transcript_count=b["transcripts"],
        )
        for b in buckets.values()
    ]
    summaries.sort(key=lambda s: (-s.mentions, -s.transcript_count, s.name.lower()))
    return summaries[:limit]
