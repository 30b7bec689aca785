"""
Unit tests for domain models.

Validates pure domain types with no AWS dependencies.
"""

import uuid
from datetime import timedelta

import pytest

from conftest import make_insights, make_transcript
from domain.models import (
    SOURCE_ID_NAMESPACE,
    ActionItemStatus,
    AiInsights,
    AnalyticsRecord,
    Participant,
    Priority,
    ProcessingStatus,
    Transcript,
    TranscriptCreate,
    transcript_from_source,
)


class TestEnums:
    def test_processing_status_values(self) -> None:
        assert [s.value for s in ProcessingStatus] == [
            "Pending", "Processing", "Completed", "Failed", "Retry",
        ]

    def test_priority_and_action_status(self) -> None:
        assert Priority("High") is Priority.HIGH
        assert ActionItemStatus.IN_PROGRESS.value == "InProgress"


class TestSerialisation:
    def test_camel_case_wire_names(self) -> None:
        data = make_transcript(ai_insights=make_insights()).to_json_dict()

        assert {"meetingId", "createdDate", "processedDate", "aiInsights"} <= set(data)
        assert data["aiInsights"]["actionItems"][0]["assignedTo"] == "Bob"
        assert data["status"] == "Pending"

    def test_accepts_both_field_names(self) -> None:
        by_alias = Transcript.model_validate({"id": "a", "meetingId": "m"})
        by_name = Transcript(id="a", meeting_id="m")
        assert by_alias.meeting_id == by_name.meeting_id == "m"

    def test_json_round_trip_keeps_duration_and_insights(self) -> None:
        original = make_transcript(ai_insights=make_insights())
        restored = Transcript.model_validate(original.to_json_dict())
        assert restored.duration == timedelta(minutes=30)
        assert restored.ai_insights.themes[0].name == "Roadmap"

    def test_participant_is_frozen(self) -> None:
        participant = Participant(id="u1", display_name="Alice")
        with pytest.raises(Exception):
            participant.display_name = "Bob"


class TestAiInsights:
    @pytest.mark.parametrize("raw, expected", [(-0.5, 0.0), (0.42, 0.42), (3.0, 1.0)])
    def test_confidence_clamped(self, raw: float, expected: float) -> None:
        assert AiInsights(confidence=raw).confidence == expected

    def test_processed_date_defaults_to_now(self) -> None:
        assert AiInsights().processed_date.tzinfo is not None


class TestTranscriptCreate:
    def test_server_fields_assigned(self) -> None:
        created = TranscriptCreate.model_validate(
            {"id": "x", "status": "Completed", "meetingId": "m-1", "title": "T"}
        ).to_transcript()

        assert created.id and created.id != "x"
        uuid.UUID(created.id)
        assert created.status is ProcessingStatus.PENDING
        assert created.ai_insights is None


class TestTranscriptFromSource:
    def test_keeps_supplied_id_and_resets_state(self) -> None:
        transcript = transcript_from_source({
            "id": "src-1",
            "meetingId": "m-1",
            "status": "Completed",
            "aiInsights": {"summary": "stale"},
        })
        assert transcript.id == "src-1"
        assert transcript.status is ProcessingStatus.PENDING
        assert transcript.ai_insights is None
        assert transcript.processed_date is None

    def test_id_derived_from_meeting_id(self) -> None:
        first = transcript_from_source({"meetingId": "m-42"})
        second = transcript_from_source({"meetingId": "m-42"})
        assert first.id == second.id == str(uuid.uuid5(SOURCE_ID_NAMESPACE, "m-42"))

    def test_needs_id_or_meeting_id(self) -> None:
        with pytest.raises(ValueError):
            transcript_from_source({"title": "orphan"})


class TestAnalyticsRecord:
    def test_from_completed_transcript(self) -> None:
        transcript = make_transcript(
            status=ProcessingStatus.COMPLETED, ai_insights=make_insights(),
        )

        record = AnalyticsRecord.from_transcript(transcript)

        assert record.transcript_id == "t-1"
        assert record.duration_seconds == 1800.0
        assert record.theme_names == ["Roadmap", "Pricing"]
        assert record.action_item_count == 1
        assert record.sentiment_overall == "Positive"

    def test_without_insights(self) -> None:
        record = AnalyticsRecord.from_transcript(make_transcript())
        assert record.theme_names == []
        assert record.confidence == 0.0
