"""
LLM providers used by the enrichment service.

A provider wraps one llama-index LLM client.  ``LLMProviderFactory`` picks
and initialises the configured one from settings.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope


class BaseProvider(ABC):
    """Base class for all providers."""

    def __init__(self, name: str):
        self.name = name
        self.logger = get_scoped_logger(LogScope.PROVIDER).bind(provider=name)

    @abstractmethod
    def initialize(self) -> None:
        """Initialize provider. Called after instantiation."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is ready to serve requests."""


class LLMProviderBase(BaseProvider):
    """Completion provider backed by a llama-index LLM.

    Subclasses only build the client; prompting and error logging live here.
    Completions run at temperature 0 so enrichment output is as repeatable as
    the model allows.
    """

    def __init__(self, name: str, model_id: str, timeout_seconds: float):
        super().__init__(name=name)
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds
        self._llm: Optional[Any] = None

    @abstractmethod
    def _create_client(self) -> Any:
        """Return the llama-index LLM instance."""

    def initialize(self) -> None:
        try:
            self._llm = self._create_client()
        except Exception as e:
            self.logger.error("llm_init_failed", model_id=self.model_id, error=str(e))
            raise
        self.logger.info(
            "llm_initialized",
            model_id=self.model_id,
            timeout_seconds=self.timeout_seconds,
        )

    def is_available(self) -> bool:
        return self._llm is not None

    def generate(self, prompt: str, context: Optional[str] = None) -> str:
        """Complete *prompt*, optionally preceded by *context*."""
        if not self.is_available():
            raise RuntimeError(f"{self.name} provider not initialized")

        try:
            return self._llm.complete(self.build_prompt(prompt, context)).text
        except Exception as e:
            self.logger.error("llm_generation_failed", model_id=self.model_id, error=str(e))
            raise

    @staticmethod
    def build_prompt(prompt: str, context: Optional[str] = None) -> str:
        return f"{context}\n\n{prompt}" if context else prompt
