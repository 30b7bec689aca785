"""
Unit tests for adapter implementations.

Uses mocked boto3 clients/resources: no live AWS calls.
"""

import json
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from adapters.directory_transcript_source import DirectoryTranscriptSourceAdapter
from adapters.dynamo_transcript_store import DynamoTranscriptStoreAdapter
from adapters.in_memory_search_index import InMemorySearchIndexAdapter
from adapters.in_memory_transcript_store import InMemoryTranscriptStoreAdapter
from adapters.json_analytics_export import JsonAnalyticsExportAdapter
from adapters.s3_analytics_export import S3AnalyticsExportAdapter
from adapters.s3_transcript_source import S3TranscriptSourceAdapter
from conftest import make_insights, make_transcript
from domain.models import (
    SOURCE_ID_NAMESPACE,
    AnalyticsRecord,
    ProcessingStatus,
    Theme,
)
from ports.analytics_export import AnalyticsExportPort
from ports.search_index import SearchIndexPort
from ports.transcript_source import TranscriptSourcePort
from ports.transcript_store import TranscriptStorePort
from shared_utils.error_handler import ExternalServiceError


def _client_error(operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, operation)


# ======================================================================
# Port conformance
# ======================================================================

class TestPortConformance:
    def test_stores(self) -> None:
        assert isinstance(InMemoryTranscriptStoreAdapter(), TranscriptStorePort)
        dynamo = DynamoTranscriptStoreAdapter(table_name="t", dynamodb_resource=MagicMock())
        assert isinstance(dynamo, TranscriptStorePort)

    def test_index_and_exporters(self, tmp_path) -> None:
        assert isinstance(InMemorySearchIndexAdapter(), SearchIndexPort)
        assert isinstance(JsonAnalyticsExportAdapter(str(tmp_path / "a.json")), AnalyticsExportPort)
        assert isinstance(S3AnalyticsExportAdapter("b", "p", s3_client=MagicMock()), AnalyticsExportPort)

    def test_sources(self, tmp_path) -> None:
        store = InMemoryTranscriptStoreAdapter()
        assert isinstance(DirectoryTranscriptSourceAdapter(str(tmp_path), store), TranscriptSourcePort)
        s3 = S3TranscriptSourceAdapter("b", "inbox", store, s3_client=MagicMock())
        assert isinstance(s3, TranscriptSourcePort)


# ======================================================================
# InMemoryTranscriptStoreAdapter
# ======================================================================

class TestInMemoryTranscriptStore:
    def test_insert_get_roundtrip_is_a_copy(self) -> None:
        store = InMemoryTranscriptStoreAdapter()
        original = make_transcript()
        store.insert_transcript(original)

        fetched = store.get_transcript("t-1")
        fetched.title = "mutated"

        assert store.get_transcript("t-1").title == "Q3 roadmap sync"

    def test_get_all_newest_first(self) -> None:
        store = InMemoryTranscriptStoreAdapter()
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        store.insert_transcript(make_transcript("old", created_date=base))
        store.insert_transcript(make_transcript("new", created_date=base + timedelta(days=1)))

        assert [t.id for t in store.get_all_transcripts()] == ["new", "old"]

    def test_delete(self) -> None:
        store = InMemoryTranscriptStoreAdapter()
        store.insert_transcript(make_transcript())
        assert store.delete_transcript("t-1") is True
        assert store.delete_transcript("t-1") is False

    def test_search_case_insensitive_title_or_content(self) -> None:
        store = InMemoryTranscriptStoreAdapter()
        store.insert_transcript(make_transcript("a", title="Budget review", content="numbers"))
        store.insert_transcript(make_transcript("b", title="Standup", content="the BUDGET is tight"))
        store.insert_transcript(make_transcript("c", title="Retro", content="nothing"))

        assert sorted(t.id for t in store.search_transcripts("budget")) == ["a", "b"]


# ======================================================================
# DynamoTranscriptStoreAdapter
# ======================================================================

class TestDynamoTranscriptStore:
    @pytest.fixture()
    def mock_table(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture()
    def adapter(self, mock_table: MagicMock) -> DynamoTranscriptStoreAdapter:
        resource = MagicMock()
        resource.Table.return_value = mock_table
        return DynamoTranscriptStoreAdapter(table_name="Transcripts", dynamodb_resource=resource)

    def test_insert_writes_item(self, adapter, mock_table) -> None:
        transcript = make_transcript(ai_insights=make_insights())
        adapter.insert_transcript(transcript)

        item = mock_table.put_item.call_args[1]["Item"]
        assert item["id"] == "t-1"
        assert item["status"] == "Pending"
        assert item["title_normalized"] == "q3 roadmap sync"
        document = json.loads(item["document"])
        assert document["meetingId"] == "meeting-t-1"
        assert document["aiInsights"]["summary"] == "Roadmap review"

    def test_get_roundtrip(self, adapter, mock_table) -> None:
        transcript = make_transcript(ai_insights=make_insights())
        item = DynamoTranscriptStoreAdapter._to_dynamo_item(transcript)
        mock_table.get_item.return_value = {"Item": item}

        fetched = adapter.get_transcript("t-1")

        assert fetched == transcript
        mock_table.get_item.assert_called_once_with(Key={"id": "t-1"})

    def test_get_missing(self, adapter, mock_table) -> None:
        mock_table.get_item.return_value = {}
        assert adapter.get_transcript("nope") is None

    def test_get_client_error(self, adapter, mock_table) -> None:
        mock_table.get_item.side_effect = _client_error("GetItem")
        with pytest.raises(ExternalServiceError):
            adapter.get_transcript("t-1")

    def test_update_client_error(self, adapter, mock_table) -> None:
        mock_table.put_item.side_effect = _client_error("PutItem")
        with pytest.raises(ExternalServiceError) as exc_info:
            adapter.update_transcript(make_transcript())
        assert exc_info.value.context["service"] == "DynamoDB"

    def test_delete_existing_and_missing(self, adapter, mock_table) -> None:
        mock_table.delete_item.return_value = {"Attributes": {"id": "t-1"}}
        assert adapter.delete_transcript("t-1") is True
        mock_table.delete_item.return_value = {}
        assert adapter.delete_transcript("t-1") is False

    def test_get_all_paginates_and_sorts(self, adapter, mock_table) -> None:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        old = DynamoTranscriptStoreAdapter._to_dynamo_item(make_transcript("old", created_date=base))
        new = DynamoTranscriptStoreAdapter._to_dynamo_item(
            make_transcript("new", created_date=base + timedelta(hours=1))
        )
        mock_table.scan.side_effect = [
            {"Items": [old], "LastEvaluatedKey": {"id": "old"}},
            {"Items": [new]},
        ]

        results = adapter.get_all_transcripts()

        assert [t.id for t in results] == ["new", "old"]
        assert mock_table.scan.call_args_list[1][1]["ExclusiveStartKey"] == {"id": "old"}

    def test_search_uses_filter(self, adapter, mock_table) -> None:
        mock_table.scan.return_value = {"Items": []}
        adapter.search_transcripts("Roadmap")
        assert "FilterExpression" in mock_table.scan.call_args[1]

    def test_scan_client_error(self, adapter, mock_table) -> None:
        mock_table.scan.side_effect = _client_error("Scan")
        with pytest.raises(ExternalServiceError):
            adapter.get_all_transcripts()


# ======================================================================
# InMemorySearchIndexAdapter
# ======================================================================

class TestInMemorySearchIndex:
    def test_title_hits_rank_above_content_hits(self) -> None:
        index = InMemorySearchIndexAdapter()
        index.index_transcript(make_transcript("content-hit", title="Standup", content="budget talk"))
        index.index_transcript(make_transcript("title-hit", title="Budget review", content="numbers"))

        results = index.search("budget")

        assert [t.id for t in results] == ["title-hit", "content-hit"]

    def test_themes_and_summary_are_indexed(self) -> None:
        index = InMemorySearchIndexAdapter()
        insights = make_insights(
            summary="Hiring plan agreed",
            themes=[Theme(name="Recruitment")],
        )
        index.index_transcript(make_transcript(title="Sync", content="", ai_insights=insights))

        assert len(index.search("recruitment")) == 1
        assert len(index.search("hiring")) == 1

    def test_max_results_bounds_output(self) -> None:
        index = InMemorySearchIndexAdapter()
        for i in range(5):
            index.index_transcript(make_transcript(f"t-{i}", title="roadmap"))
        assert len(index.search("roadmap", max_results=2)) == 2

    def test_no_match_and_blank_query(self) -> None:
        index = InMemorySearchIndexAdapter()
        index.index_transcript(make_transcript())
        assert index.search("zebra") == []
        assert index.search("   ") == []

    def test_upsert_and_delete(self) -> None:
        index = InMemorySearchIndexAdapter()
        index.index_transcript(make_transcript(title="Budget"))
        index.index_transcript(make_transcript(title="Hiring"))
        assert index.search("budget") == []
        index.delete_transcript("t-1")
        assert index.search("hiring") == []


# ======================================================================
# Analytics exporters
# ======================================================================

def _record() -> AnalyticsRecord:
    transcript = make_transcript(
        status=ProcessingStatus.COMPLETED,
        ai_insights=make_insights(),
        processed_date=datetime(2026, 1, 15, 10, tzinfo=timezone.utc),
    )
    record = AnalyticsRecord.from_transcript(transcript)
    record.exported_at = datetime(2026, 1, 16, 8, tzinfo=timezone.utc)
    return record


class TestS3AnalyticsExport:
    def test_export_puts_partitioned_object(self) -> None:
        s3 = MagicMock()
        adapter = S3AnalyticsExportAdapter(bucket="lake", prefix="/analytics/transcripts/", s3_client=s3)

        adapter.export(_record())

        kwargs = s3.put_object.call_args[1]
        assert kwargs["Bucket"] == "lake"
        assert kwargs["Key"] == "analytics/transcripts/dt=2026-01-16/t-1.json"
        body = json.loads(kwargs["Body"])
        assert body["transcriptId"] == "t-1"
        assert body["themeNames"] == ["Roadmap", "Pricing"]
        assert body["durationSeconds"] == 1800.0

    def test_export_client_error(self) -> None:
        s3 = MagicMock()
        s3.put_object.side_effect = _client_error("PutObject")
        with pytest.raises(ExternalServiceError):
            S3AnalyticsExportAdapter("lake", "p", s3_client=s3).export(_record())


class TestJsonAnalyticsExport:
    def test_one_entry_per_transcript(self, tmp_path) -> None:
        adapter = JsonAnalyticsExportAdapter(str(tmp_path / "out" / "analytics.json"))
        first = _record()
        second = _record()
        second.sentiment_overall = "Negative"

        adapter.export(first)
        adapter.export(second)

        records = json.loads((tmp_path / "out" / "analytics.json").read_text())
        assert len(records) == 1
        assert records[0]["sentimentOverall"] == "Negative"

    def test_corrupt_file_starts_fresh(self, tmp_path) -> None:
        path = tmp_path / "analytics.json"
        path.write_text("{not json")
        adapter = JsonAnalyticsExportAdapter(str(path))

        adapter.export(_record())

        assert [r["transcriptId"] for r in json.loads(path.read_text())] == ["t-1"]


# ======================================================================
# Transcript sources
# ======================================================================

def _source_doc(meeting_id: str, **extra) -> dict:
    return {
        "meetingId": meeting_id,
        "title": f"Meeting {meeting_id}",
        "content": "Alice: hello",
        "organizer": "alice@example.com",
        "createdDate": "2026-01-15T09:00:00Z",
        "duration": "PT30M",
        **extra,
    }


class TestDirectoryTranscriptSource:
    def test_reads_json_documents(self, tmp_path) -> None:
        (tmp_path / "a.json").write_text(json.dumps(_source_doc("m-a")))
        (tmp_path / "b.json").write_text(json.dumps(_source_doc("m-b", id="explicit-id")))
        (tmp_path / "notes.txt").write_text("ignored")
        source = DirectoryTranscriptSourceAdapter(str(tmp_path), InMemoryTranscriptStoreAdapter())

        transcripts = source.retrieve_new_transcripts()

        ids = sorted(t.id for t in transcripts)
        assert "explicit-id" in ids
        assert all(t.status == ProcessingStatus.PENDING for t in transcripts)
        assert len(ids) == 2

    def test_derived_id_is_stable(self, tmp_path) -> None:
        (tmp_path / "a.json").write_text(json.dumps(_source_doc("m-a")))
        source = DirectoryTranscriptSourceAdapter(str(tmp_path), InMemoryTranscriptStoreAdapter())

        first = source.retrieve_new_transcripts()
        second = source.retrieve_new_transcripts()

        expected = str(uuid.uuid5(SOURCE_ID_NAMESPACE, "m-a"))
        assert [t.id for t in first] == [expected]
        assert [t.id for t in second] == [expected]

    def test_already_stored_are_excluded(self, tmp_path) -> None:
        (tmp_path / "a.json").write_text(json.dumps(_source_doc("m-a", id="known")))
        store = InMemoryTranscriptStoreAdapter()
        store.insert_transcript(make_transcript("known"))

        assert DirectoryTranscriptSourceAdapter(str(tmp_path), store).retrieve_new_transcripts() == []

    def test_invalid_documents_skipped(self, tmp_path) -> None:
        (tmp_path / "bad.json").write_text("{oops")
        (tmp_path / "no-ids.json").write_text(json.dumps({"title": "x"}))
        (tmp_path / "good.json").write_text(json.dumps(_source_doc("m-g")))
        source = DirectoryTranscriptSourceAdapter(str(tmp_path), InMemoryTranscriptStoreAdapter())

        assert len(source.retrieve_new_transcripts()) == 1

    def test_missing_directory(self, tmp_path) -> None:
        source = DirectoryTranscriptSourceAdapter(str(tmp_path / "nope"), InMemoryTranscriptStoreAdapter())
        assert source.retrieve_new_transcripts() == []


class TestS3TranscriptSource:
    def _s3(self, documents: dict) -> MagicMock:
        s3 = MagicMock()
        keys = list(documents)
        s3.list_objects_v2.side_effect = [
            {"Contents": [{"Key": keys[0]}], "IsTruncated": True, "NextContinuationToken": "tok"},
            {"Contents": [{"Key": k} for k in keys[1:]] + [{"Key": "inbox/readme.md"}], "IsTruncated": False},
        ]
        s3.get_object.side_effect = lambda Bucket, Key: {
            "Body": MagicMock(read=lambda: documents[Key])
        }
        return s3

    def test_lists_all_pages_and_parses(self) -> None:
        s3 = self._s3({
            "inbox/a.json": json.dumps(_source_doc("m-a")).encode(),
            "inbox/b.json": json.dumps(_source_doc("m-b")).encode(),
        })
        source = S3TranscriptSourceAdapter("bucket", "inbox", InMemoryTranscriptStoreAdapter(), s3_client=s3)

        transcripts = source.retrieve_new_transcripts()

        assert sorted(t.meeting_id for t in transcripts) == ["m-a", "m-b"]
        assert s3.list_objects_v2.call_args_list[1][1]["ContinuationToken"] == "tok"
        assert s3.get_object.call_count == 2

    def test_excludes_stored_and_skips_invalid(self) -> None:
        s3 = self._s3({
            "inbox/a.json": json.dumps(_source_doc("m-a", id="known")).encode(),
            "inbox/b.json": b"{oops",
        })
        store = InMemoryTranscriptStoreAdapter()
        store.insert_transcript(make_transcript("known"))

        assert S3TranscriptSourceAdapter("bucket", "inbox", store, s3_client=s3).retrieve_new_transcripts() == []

    def test_non_utf8_document_skipped(self) -> None:
        s3 = self._s3({
            "inbox/a.json": b'{"id": "\x80"}',
            "inbox/b.json": json.dumps(_source_doc("m-b", id="t-b")).encode(),
        })
        source = S3TranscriptSourceAdapter("bucket", "inbox", InMemoryTranscriptStoreAdapter(), s3_client=s3)

        assert [t.id for t in source.retrieve_new_transcripts()] == ["t-b"]

    def test_list_error_raises(self) -> None:
        s3 = MagicMock()
        s3.list_objects_v2.side_effect = _client_error("ListObjectsV2")
        source = S3TranscriptSourceAdapter("bucket", "inbox", InMemoryTranscriptStoreAdapter(), s3_client=s3)
        with pytest.raises(ExternalServiceError):
            source.retrieve_new_transcripts()
