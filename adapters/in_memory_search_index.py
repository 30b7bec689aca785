"""
In-memory search index adapter.

Implements SearchIndexPort with a weighted term-frequency score over the
title, summary, theme names and content of each indexed transcript.

NOT for production: no persistence across restarts.
"""

from __future__ import annotations

import re
import threading
from typing import Dict, List, Tuple

from domain.models import Transcript
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope


logger = get_scoped_logger(LogScope.ADAPTER)

_TOKEN_RE = re.compile(r"[a-z0-9]+")

# Field weights: a hit in the title counts for more than one in the body.
_FIELD_WEIGHTS = {
    "title": 3.0,
    "summary": 2.0,
    "themes": 2.0,
    "content": 1.0,
}


def _tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall(text.lower())


class InMemorySearchIndexAdapter:
    """Brute-force keyword index keyed by transcript id."""

    def __init__(self) -> None:
        self._documents: Dict[str, Transcript] = {}
        self._fields: Dict[str, Dict[str, List[str]]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # SearchIndexPort implementation
    # ------------------------------------------------------------------

    def index_transcript(self, transcript: Transcript) -> None:
        fields = self._extract_fields(transcript)
        with self._lock:
            self._documents[transcript.id] = transcript.model_copy(deep=True)
            self._fields[transcript.id] = fields
            total = len(self._documents)
        logger.info("search_index_upsert", transcript_id=transcript.id, total=total)

    def delete_transcript(self, transcript_id: str) -> None:
        with self._lock:
            existed = self._documents.pop(transcript_id, None) is not None
            self._fields.pop(transcript_id, None)
        logger.info("search_index_delete", transcript_id=transcript_id, existed=existed)

    def search(self, query: str, max_results: int = 10) -> List[Transcript]:
        terms = set(_tokenize(query))
        if not terms or max_results <= 0:
            return []

        with self._lock:
            snapshot = list(self._fields.items())
            documents = dict(self._documents)

        scored: List[Tuple[float, str]] = []
        for transcript_id, fields in snapshot:
            score = self._score(terms, fields)
            if score > 0:
                scored.append((score, transcript_id))

        # Highest score first, id as a stable tie-breaker
        scored.sort(key=lambda x: (-x[0], x[1]))

        results = [
            documents[transcript_id].model_copy(deep=True)
            for _, transcript_id in scored[:max_results]
        ]
        logger.info(
            "search_index_query",
            terms=len(terms),
            candidates=len(snapshot),
            results=len(results),
        )
        return results

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_fields(transcript: Transcript) -> Dict[str, List[str]]:
        insights = transcript.ai_insights
        return {
            "title": _tokenize(transcript.title),
            "summary": _tokenize(insights.summary) if insights else [],
            "themes": _tokenize(" ".join(t.name for t in insights.themes)) if insights else [],
            "content": _tokenize(transcript.content),
        }

    @staticmethod
    def _score(terms: set, fields: Dict[str, List[str]]) -> float:
        score = 0.0
        for name, tokens in fields.items():
            if not tokens:
                continue
            hits = sum(1 for tok in tokens if tok in terms)
            score += _FIELD_WEIGHTS[name] * hits
        return score
