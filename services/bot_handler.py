"""
BotActivityHandler: thin chat front-end over TranscriptService.

Accepts a Bot Framework style activity (``{"type", "text", "from",
"conversation", ...}``) and returns the reply activity.  A message is treated
as a search query; anything else gets a short acknowledgement.
"""

from __future__ import annotations

from typing import Any, Dict, List

from domain.models import Transcript
from services.transcript_service import TranscriptService
from shared_utils.constants import LogScope
from shared_utils.logging_utils import ContextualLogger

logger = ContextualLogger(scope=LogScope.BOT)

WELCOME_TEXT = (
    "Hi! Send me a few words and I will find the meeting transcripts that mention them."
)
EMPTY_MESSAGE_TEXT = "Send me some keywords to search the meeting transcripts."
NO_RESULTS_TEXT = "I couldn't find any transcripts matching \"{query}\"."


class BotActivityHandler:
    """Routes inbound activities; all domain work is delegated."""

    def __init__(self, transcript_service: TranscriptService, max_results: int = 5) -> None:
        self._transcripts = transcript_service
        self._max_results = max_results

    def handle(self, activity: Dict[str, Any]) -> Dict[str, Any]:
        activity_type = str(activity.get("type") or "").strip()
        logger.info("bot_activity_received", activity_type=activity_type or "unknown")

        if activity_type == "message":
            text = self._handle_message(str(activity.get("text") or ""))
        elif activity_type == "conversationUpdate" and activity.get("membersAdded"):
            text = WELCOME_TEXT
        else:
            text = f"Received {activity_type or 'unknown'} activity."

        return _reply(activity, text)

    def _handle_message(self, text: str) -> str:
        query = text.strip()
        if not query:
            return EMPTY_MESSAGE_TEXT

        results = self._transcripts.search_transcripts(query, self._max_results)
        logger.info("bot_search_answered", results=len(results))
        if not results:
            return NO_RESULTS_TEXT.format(query=query)
        return _format_results(results)


def _format_results(results: List[Transcript]) -> str:
    lines = [f"Found {len(results)} matching transcript(s):"]
    for t in results:
        line = f"- {t.title or t.meeting_id or t.id} ({t.created_date.date().isoformat()}, {t.status.value})"
        if t.ai_insights is not None and t.ai_insights.summary:
            line += f": {t.ai_insights.summary}"
        lines.append(line)
    return "\n".join(lines)


def _reply(activity: Dict[str, Any], text: str) -> Dict[str, Any]:
    reply: Dict[str, Any] = {"type": "message", "text": text}
    if activity.get("conversation"):
        reply["conversation"] = activity["conversation"]
    if activity.get("recipient"):
        reply["from"] = activity["recipient"]
    if activity.get("from"):
        reply["recipient"] = activity["from"]
    if activity.get("id"):
        reply["replyToId"] = activity["id"]
    return reply
