"""
Root conftest.py: shared fixtures for the entire test suite.

Guidelines:
    • No __init__.py in test sub-directories (avoids shadowing root packages).
    • pytest.ini_options lives in pyproject.toml with pythonpath=["."].
    • Markers: integration.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from domain.models import (
    ActionItem,
    AiInsights,
    Participant,
    Priority,
    ProcessingStatus,
    SentimentAnalysis,
    Theme,
    Transcript,
)


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")


# ---------------------------------------------------------------------------
# Minimal required settings kwargs for Settings(**BASE_SETTINGS_KWARGS)
# ---------------------------------------------------------------------------

BASE_SETTINGS_KWARGS: Dict[str, str] = {
    "llm_provider": "bedrock",
    "bedrock_region": "eu-west-2",
    "bedrock_llm_model_id": "anthropic.claude-3-haiku-20240307-v1:0",
    "environment": "development",
}


@pytest.fixture()
def base_settings_kwargs() -> Dict[str, str]:
    """Provide the minimal kwargs needed to instantiate ``Settings``."""
    return {**BASE_SETTINGS_KWARGS}


@pytest.fixture(autouse=True)
def _clear_feature_flag_env(monkeypatch):
    """Feature flags read the process environment; keep tests hermetic."""
    monkeypatch.delenv("SEARCH_ENABLED", raising=False)
    monkeypatch.delenv("ANALYTICS_EXPORT_ENABLED", raising=False)


# ---------------------------------------------------------------------------
# Sample transcript fixtures
# ---------------------------------------------------------------------------

SAMPLE_TRANSCRIPT_TEXT = (
    "Alice: Welcome everyone, let's discuss the Q3 roadmap.\n"
    "Bob: The pricing page redesign is behind schedule.\n"
    "Alice: Can you own the launch checklist, Bob?\n"
    "Bob: Yes, I'll have it ready by Friday.\n"
)


def make_insights(summary: str = "Roadmap review", **overrides) -> AiInsights:
    """Build a realistic AiInsights object."""
    fields = dict(
        sentiment=SentimentAnalysis(overall="Positive", score=0.6, confidence=0.9),
        themes=[
            Theme(name="Roadmap", category="Planning", relevance=0.9, mentions=3),
            Theme(name="Pricing", category="Product", relevance=0.6, mentions=1),
        ],
        key_points=["Pricing redesign is late"],
        action_items=[
            ActionItem(description="Own launch checklist", assigned_to="Bob", priority=Priority.HIGH),
        ],
        summary=summary,
        confidence=0.8,
    )
    fields.update(overrides)
    return AiInsights(**fields)


def make_transcript(transcript_id: str = "t-1", **overrides) -> Transcript:
    """Build a Pending transcript with sensible defaults."""
    fields = dict(
        id=transcript_id,
        meeting_id=f"meeting-{transcript_id}",
        title="Q3 roadmap sync",
        content=SAMPLE_TRANSCRIPT_TEXT,
        participants=[Participant(id="u-1", display_name="Alice", email="alice@example.com")],
        created_date=datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc),
        duration=timedelta(minutes=30),
        organizer="alice@example.com",
        status=ProcessingStatus.PENDING,
    )
    fields.update(overrides)
    return Transcript(**fields)


@pytest.fixture()
def sample_transcript() -> Transcript:
    return make_transcript()


@pytest.fixture()
def sample_insights() -> AiInsights:
    return make_insights()


# ---------------------------------------------------------------------------
# Mock adapter factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def mock_transcript_store() -> MagicMock:
    """Transcript store mock whose writes echo the transcript back."""
    mock = MagicMock()
    mock.update_transcript.side_effect = lambda t: t
    mock.insert_transcript.side_effect = lambda t: t
    mock.get_transcript.return_value = None
    return mock


@pytest.fixture()
def mock_enrichment(sample_insights) -> MagicMock:
    mock = MagicMock()
    mock.enrich.return_value = sample_insights
    return mock


@pytest.fixture()
def sample_transcripts() -> List[Transcript]:
    return [make_transcript(f"t-{i}") for i in range(1, 4)]
