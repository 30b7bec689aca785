"""
Pure domain models for the Meeting Insights pipeline.

These models contain NO AWS dependencies. They represent core business concepts
that flow through ports and services.

All models serialise with camelCase aliases so the persisted record and the
HTTP payloads share one JSON shape:
``{id, meetingId, title, content, participants[], createdDate, duration,
organizer, processedDate?, status, aiInsights?}``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-compatible dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProcessingStatus(str, Enum):
    """Transcript processing lifecycle.

    Pending -> Processing -> Completed | Failed.  ``RETRY`` is kept for
    forward compatibility; no transition assigns it.
    """

    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"
    RETRY = "Retry"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ActionItemStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# ---------------------------------------------------------------------------
# AI insights
# ---------------------------------------------------------------------------


class SentimentAnalysis(CamelModel):
    """Overall and per-aspect sentiment of a meeting."""

    overall: str = ""
    score: float = 0.0
    confidence: float = 0.0
    detailed: Dict[str, float] = {}


class Theme(CamelModel):
    """A recurring topic with supporting quotes."""

    name: str = ""
    category: str = ""
    relevance: float = 0.0
    mentions: int = 0
    quotes: List[str] = []


class ActionItem(CamelModel):
    """A follow-up task extracted from the meeting."""

    description: str = ""
    assigned_to: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    status: ActionItemStatus = ActionItemStatus.OPEN


class AiInsights(CamelModel):
    """Result of one successful enrichment. Replaced wholesale on re-processing."""

    sentiment: SentimentAnalysis = Field(default_factory=SentimentAnalysis)
    themes: List[Theme] = []
    key_points: List[str] = []
    action_items: List[ActionItem] = []
    summary: str = ""
    confidence: float = 0.0
    processed_date: datetime = Field(default_factory=utc_now)

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        """Keep confidence inside [0.0, 1.0]."""
        return min(max(v, 0.0), 1.0)


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class Participant(CamelModel):
    """Immutable snapshot of a meeting attendee."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    display_name: str = ""
    email: str = ""
    role: str = ""


class Transcript(CamelModel):
    """One meeting's content and processing state; the unit of work."""

    id: str = ""
    meeting_id: str = ""
    title: str = ""
    content: str = ""
    participants: List[Participant] = []
    created_date: datetime = Field(default_factory=utc_now)
    duration: timedelta = timedelta(0)
    organizer: str = ""
    processed_date: Optional[datetime] = None
    status: ProcessingStatus = ProcessingStatus.PENDING
    ai_insights: Optional[AiInsights] = None


class TranscriptCreate(CamelModel):
    """Client-supplied fields for a new transcript.

    ``id``, ``createdDate`` and ``status`` are always server-assigned.
    """

    model_config = ConfigDict(extra="ignore")

    meeting_id: str = ""
    title: str = ""
    content: str = ""
    participants: List[Participant] = []
    duration: timedelta = timedelta(0)
    organizer: str = ""

    def to_transcript(self) -> Transcript:
        """Build a new Pending transcript with a fresh id."""
        return Transcript(
            id=str(uuid.uuid4()),
            meeting_id=self.meeting_id,
            title=self.title,
            content=self.content,
            participants=list(self.participants),
            created_date=utc_now(),
            duration=self.duration,
            organizer=self.organizer,
            status=ProcessingStatus.PENDING,
        )


# Namespace for deterministic ids of retrieved transcripts.
SOURCE_ID_NAMESPACE = uuid.UUID("6f1c2a52-8d3e-4b7a-9a41-0f5d7c3e2b19")


def transcript_from_source(payload: Dict[str, Any]) -> Transcript:
    """Build a Pending transcript from a source-platform document.

    Documents without an ``id`` get one derived from ``meetingId`` so the
    same source document always maps to the same transcript.
    """
    transcript = Transcript.model_validate(payload)
    if not transcript.id:
        if not transcript.meeting_id:
            raise ValueError("source transcript needs an id or a meetingId")
        transcript.id = str(uuid.uuid5(SOURCE_ID_NAMESPACE, transcript.meeting_id))
    transcript.status = ProcessingStatus.PENDING
    transcript.processed_date = None
    transcript.ai_insights = None
    return transcript


# ---------------------------------------------------------------------------
# Analytics export
# ---------------------------------------------------------------------------


class AnalyticsRecord(CamelModel):
    """Flat schema forwarded to the analytics sink for a completed transcript."""

    transcript_id: str
    meeting_id: str = ""
    title: str = ""
    organizer: str = ""
    created_date: datetime
    processed_date: Optional[datetime] = None
    duration_seconds: float = 0.0
    participant_count: int = 0
    sentiment_overall: str = ""
    sentiment_score: float = 0.0
    theme_names: List[str] = []
    key_point_count: int = 0
    action_item_count: int = 0
    confidence: float = 0.0
    exported_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_transcript(cls, transcript: Transcript) -> "AnalyticsRecord":
        insights = transcript.ai_insights
        return cls(
            transcript_id=transcript.id,
            meeting_id=transcript.meeting_id,
            title=transcript.title,
            organizer=transcript.organizer,
            created_date=transcript.created_date,
            processed_date=transcript.processed_date,
            duration_seconds=transcript.duration.total_seconds(),
            participant_count=len(transcript.participants),
            sentiment_overall=insights.sentiment.overall if insights else "",
            sentiment_score=insights.sentiment.score if insights else 0.0,
            theme_names=[t.name for t in insights.themes] if insights else [],
            key_point_count=len(insights.key_points) if insights else 0,
            action_item_count=len(insights.action_items) if insights else 0,
            confidence=insights.confidence if insights else 0.0,
        )


# ---------------------------------------------------------------------------
# Reports and aggregates
# ---------------------------------------------------------------------------


class BatchReport(CamelModel):
    """Outcome of one batch run."""

    retrieved: int = 0
    completed_ids: List[str] = []
    failed_ids: List[str] = []
    started_at: str = ""  # ISO 8601
    completed_at: str = ""  # ISO 8601
    duration_ms: float = 0.0


class ThemeSummary(CamelModel):
    """A theme aggregated across transcripts."""

    name: str
    category: str = ""
    mentions: int = 0
    average_relevance: float = 0.0
    transcript_count: int = 0


class InsightsSummary(CamelModel):
    """Portfolio-level view over stored transcripts."""

    total_transcripts: int = 0
    status_counts: Dict[str, int] = {}
    enriched_transcripts: int = 0
    average_sentiment_score: Optional[float] = None
    average_confidence: Optional[float] = None
    open_action_items: int = 0
    top_themes: List[ThemeSummary] = []
