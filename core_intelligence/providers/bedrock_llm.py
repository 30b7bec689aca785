"""
Amazon Bedrock completion provider.
"""

from llama_index.llms.bedrock import Bedrock

from core_intelligence.providers import LLMProviderBase


class BedrockLLMProvider(LLMProviderBase):
    """Bedrock-hosted model (Claude Haiku by default) in *region*."""

    def __init__(self, model_id: str, region: str, timeout_seconds: float = 120.0):
        super().__init__(name="Bedrock", model_id=model_id, timeout_seconds=timeout_seconds)
        self.region = region

    def _create_client(self) -> Bedrock:
        return Bedrock(
            model=self.model_id,
            region_name=self.region,
            timeout=self.timeout_seconds,
            temperature=0.0,
        )
