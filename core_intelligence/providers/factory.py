"""
Factory for creating the configured LLM provider.
"""

from typing import Optional

from core_intelligence.providers import LLMProviderBase
from core_intelligence.providers.bedrock_llm import BedrockLLMProvider
from core_intelligence.providers.openai_llm import OpenAILLMProvider
from shared_utils.config_loader import Settings, get_settings
from shared_utils.constants import LLMProvider, LogScope
from shared_utils.error_handler import ConfigurationError
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.CONFIG)


class LLMProviderFactory:
    """Factory for creating LLM providers."""

    @staticmethod
    def create(settings: Optional[Settings] = None) -> LLMProviderBase:
        """Create configured LLM provider.

        Returns:
            Initialized LLM provider.

        Raises:
            ConfigurationError: If the provider is unknown or under-configured.
        """
        settings = settings or get_settings()
        llm_provider = settings.llm_provider
        timeout = settings.external_call_timeout_seconds

        logger.info("creating_llm_provider", provider=llm_provider)

        try:
            if llm_provider == LLMProvider.OPENAI.value:
                if not settings.openai_api_key:
                    raise ConfigurationError("OPENAI_API_KEY not configured")
                provider = OpenAILLMProvider(
                    model_id=settings.openai_llm_model_id,
                    api_key=settings.openai_api_key,
                    timeout_seconds=timeout,
                )
            elif llm_provider == LLMProvider.BEDROCK.value:
                if not settings.bedrock_region or not settings.bedrock_llm_model_id:
                    raise ConfigurationError(
                        "BEDROCK_REGION or BEDROCK_LLM_MODEL_ID not configured"
                    )
                provider = BedrockLLMProvider(
                    model_id=settings.bedrock_llm_model_id,
                    region=settings.bedrock_region,
                    timeout_seconds=timeout,
                )
            else:
                raise ConfigurationError(f"Unknown LLM provider: {llm_provider}")

            provider.initialize()
            return provider

        except Exception as e:
            logger.error("llm_provider_create_failed", provider=llm_provider, error=str(e))
            raise
