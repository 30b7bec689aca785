"""
Unit tests for BotActivityHandler.
"""

from unittest.mock import MagicMock

from conftest import make_insights, make_transcript
from services.bot_handler import (
    EMPTY_MESSAGE_TEXT,
    WELCOME_TEXT,
    BotActivityHandler,
)


def _handler(results=None) -> tuple:
    service = MagicMock()
    service.search_transcripts.return_value = results or []
    return BotActivityHandler(transcript_service=service, max_results=3), service


class TestBotActivityHandler:
    def test_message_searches_transcripts(self) -> None:
        hit = make_transcript(ai_insights=make_insights(summary="Roadmap agreed."))
        handler, service = _handler([hit])

        reply = handler.handle({"type": "message", "text": " roadmap ", "id": "a-1"})

        service.search_transcripts.assert_called_once_with("roadmap", 3)
        assert reply["type"] == "message"
        assert "Q3 roadmap sync" in reply["text"]
        assert "Roadmap agreed." in reply["text"]
        assert reply["replyToId"] == "a-1"

    def test_no_results_message(self) -> None:
        handler, _ = _handler([])
        reply = handler.handle({"type": "message", "text": "budget"})
        assert "budget" in reply["text"]

    def test_blank_message_does_not_search(self) -> None:
        handler, service = _handler()
        reply = handler.handle({"type": "message", "text": "   "})
        assert reply["text"] == EMPTY_MESSAGE_TEXT
        service.search_transcripts.assert_not_called()

    def test_members_added_gets_welcome(self) -> None:
        handler, _ = _handler()
        reply = handler.handle({"type": "conversationUpdate", "membersAdded": [{"id": "u"}]})
        assert reply["text"] == WELCOME_TEXT

    def test_other_activity_acknowledged(self) -> None:
        handler, _ = _handler()
        reply = handler.handle({"type": "typing"})
        assert reply["text"] == "Received typing activity."

    def test_reply_addresses_swapped(self) -> None:
        handler, _ = _handler()
        activity = {
            "type": "typing",
            "from": {"id": "user"},
            "recipient": {"id": "bot"},
            "conversation": {"id": "c-1"},
        }
        reply = handler.handle(activity)
        assert reply["from"] == {"id": "bot"}
        assert reply["recipient"] == {"id": "user"}
        assert reply["conversation"] == {"id": "c-1"}
