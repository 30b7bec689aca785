"""
OpenAI completion provider.
"""

from llama_index.llms.openai import OpenAI

from core_intelligence.providers import LLMProviderBase


class OpenAILLMProvider(LLMProviderBase):
    """OpenAI chat model; the key comes from settings or Secrets Manager."""

    def __init__(self, model_id: str, api_key: str, timeout_seconds: float = 120.0):
        super().__init__(name="OpenAI", model_id=model_id, timeout_seconds=timeout_seconds)
        self._api_key = api_key

    def _create_client(self) -> OpenAI:
        return OpenAI(
            model=self.model_id,
            api_key=self._api_key,
            timeout=self.timeout_seconds,
            temperature=0.0,
        )
