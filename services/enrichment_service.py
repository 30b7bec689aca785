"""
EnrichmentService: LLM-backed implementation of EnrichmentPort.

Prompts the configured LLM provider for a single JSON object describing the
meeting (sentiment, themes, key points, action items, summary, confidence)
and validates it into ``AiInsights``.  Stateless, so safe to retry.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from domain.models import ActionItem, AiInsights, SentimentAnalysis, Theme, utc_now
from ports.llm_provider import LLMProviderPort
from shared_utils.constants import LogScope
from shared_utils.error_handler import EnrichmentError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.ENRICHMENT)

# Kept as a module constant so tests can inspect it.
ENRICHMENT_PROMPT = (
    "You are a meeting analyst. Read the meeting transcript below and reply "
    "with ONE JSON object and nothing else, using exactly these keys:\n"
    '  "sentiment": {{"overall": "Positive|Neutral|Negative|Mixed", '
    '"score": number from -1 to 1, "confidence": number from 0 to 1, '
    '"detailed": {{aspect: score}}}},\n'
    '  "themes": [{{"name": str, "category": str, "relevance": number from 0 to 1, '
    '"mentions": int, "quotes": [str]}}],\n'
    '  "keyPoints": [str],\n'
    '  "actionItems": [{{"description": str, "assignedTo": str, '
    '"priority": "Low|Medium|High|Critical", "dueDate": ISO-8601 date or null}}],\n'
    '  "summary": str (at most five sentences),\n'
    '  "confidence": number from 0 to 1\n\n'
    "TRANSCRIPT:\n{content}\n"
)

BLANK_CONTENT_SUMMARY = "No transcript content was available to analyse."

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _extract_json_object(raw: str) -> Dict[str, Any]:
    """Pull the JSON object out of an LLM reply (tolerates code fences and chatter)."""
    text = _FENCE_RE.sub("", raw.strip())
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        raise ValueError("no JSON object in model output")
    payload = json.loads(text[start:end + 1])
    if not isinstance(payload, dict):
        raise ValueError("model output is not a JSON object")
    return payload


class EnrichmentService:
    """Turns transcript text into AiInsights via an LLM provider."""

    def __init__(self, llm_provider: LLMProviderPort) -> None:
        self._llm = llm_provider

    # ------------------------------------------------------------------
    # EnrichmentPort implementation
    # ------------------------------------------------------------------

    def enrich(self, content: str) -> AiInsights:
        """Produce insights for *content*.

        Blank content short-circuits to neutral, zero-confidence insights.

        Raises:
            EnrichmentError: When the provider fails or its reply cannot be
                validated into AiInsights.
        """
        if not content or not content.strip():
            logger.warning("enrichment_blank_content")
            return AiInsights(
                sentiment=SentimentAnalysis(overall="Neutral"),
                summary=BLANK_CONTENT_SUMMARY,
                confidence=0.0,
                processed_date=utc_now(),
            )

        logger.info("enrichment_started", content_len=len(content))
        try:
            raw = self._llm.generate(ENRICHMENT_PROMPT.format(content=content))
        except Exception as exc:
            logger.error("enrichment_llm_failed", error=f"{type(exc).__name__}: {exc}")
            raise EnrichmentError(f"LLM call failed: {exc}") from exc

        try:
            payload = _extract_json_object(raw)
            payload.pop("processedDate", None)
            payload.pop("processed_date", None)
            insights = AiInsights.model_validate(payload)
        except (ValueError, PydanticValidationError) as exc:
            logger.error(
                "enrichment_output_invalid",
                error=str(exc),
                output_preview=raw[:200],
            )
            raise EnrichmentError(
                "LLM output could not be parsed into insights",
                context={"error": str(exc)},
            ) from exc

        insights.processed_date = utc_now()
        logger.info(
            "enrichment_completed",
            themes=len(insights.themes),
            key_points=len(insights.key_points),
            action_items=len(insights.action_items),
            confidence=insights.confidence,
        )
        return insights

    # ------------------------------------------------------------------
    # Single-facet accessors
    # ------------------------------------------------------------------
    # Each runs a full enrichment and returns one facet of it.

    def analyze_sentiment(self, content: str) -> SentimentAnalysis:
        return self.enrich(content).sentiment

    def extract_themes(self, content: str) -> List[Theme]:
        return self.enrich(content).themes

    def generate_summary(self, content: str) -> str:
        return self.enrich(content).summary

    def extract_action_items(self, content: str) -> List[ActionItem]:
        return self.enrich(content).action_items
