"""
Text-completion port consumed by the enrichment service.

Implemented by ``core_intelligence.providers.LLMProviderBase`` subclasses;
tests substitute a MagicMock whose ``generate`` returns canned JSON.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class LLMProviderPort(Protocol):
    """Anything that turns a prompt into completion text."""

    def generate(self, prompt: str, context: Optional[str] = None) -> str:
        """Return the model's completion; provider errors propagate."""
        ...
