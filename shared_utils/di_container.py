"""
Dependency injection container for managing application dependencies.
Centralizes adapter/service creation and lifecycle management.

Empty storage settings select the local adapters, so a development checkout
runs without AWS:

* ``DYNAMODB_TABLE_NAME``  empty -> InMemoryTranscriptStoreAdapter
* ``INBOX_BUCKET``         empty -> DirectoryTranscriptSourceAdapter
* ``ANALYTICS_BUCKET``     empty -> JsonAnalyticsExportAdapter
"""

from typing import Optional

from core_intelligence.providers import LLMProviderBase
from core_intelligence.providers.factory import LLMProviderFactory
from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.feature_flags import FeatureFlags
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.CONFIG)


class DIContainer:
    """Singleton dependency injection container."""

    _instance: Optional['DIContainer'] = None
    _llm_provider: Optional[LLMProviderBase] = None

    _transcript_store: Optional[object] = None
    _search_index: Optional[object] = None
    _analytics_exporter: Optional[object] = None
    _transcript_source: Optional[object] = None
    _feature_flags: Optional[FeatureFlags] = None
    _enrichment_service: Optional[object] = None
    _transcript_service: Optional[object] = None
    _orchestrator: Optional[object] = None
    _bot_handler: Optional[object] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def reset(self):
        """Reset container (useful for testing)."""
        self._llm_provider = None
        self._transcript_store = None
        self._search_index = None
        self._analytics_exporter = None
        self._transcript_source = None
        self._feature_flags = None
        self._enrichment_service = None
        self._transcript_service = None
        self._orchestrator = None
        self._bot_handler = None

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def get_llm_provider(self) -> LLMProviderBase:
        """Get or create LLM provider (lazy singleton).

        Raises:
            RuntimeError: If provider initialization fails.
        """
        if self._llm_provider is None:
            logger.info("initializing_llm_provider")
            try:
                self._llm_provider = LLMProviderFactory.create()
            except Exception as e:
                logger.error("llm_provider_init_failed", error=str(e))
                raise RuntimeError(f"LLM provider initialization failed: {e}") from e

        return self._llm_provider

    def validate_all_providers(self) -> bool:
        """Validate that all providers are available.

        Raises:
            RuntimeError: If any provider is unavailable.
        """
        logger.info("validating_providers")

        try:
            llm_ok = self.get_llm_provider().is_available()
            if not llm_ok:
                raise RuntimeError("Provider validation failed: LLM provider is not available")

            logger.info("providers_validated", llm=llm_ok)
            return True

        except Exception as e:
            logger.error("provider_validation_failed", error=str(e))
            raise

    def get_feature_flags(self) -> FeatureFlags:
        if self._feature_flags is None:
            settings = get_settings()
            self._feature_flags = FeatureFlags(
                search_default=settings.search_enabled,
                analytics_export_default=settings.analytics_export_enabled,
            )
        return self._feature_flags

    # ------------------------------------------------------------------
    # Adapter accessors
    # ------------------------------------------------------------------

    def get_transcript_store(self):
        """DynamoTranscriptStoreAdapter, or the in-memory store when no table is set."""
        if self._transcript_store is None:
            settings = get_settings()
            if not settings.dynamodb_table_name:
                from adapters.in_memory_transcript_store import InMemoryTranscriptStoreAdapter
                self._transcript_store = InMemoryTranscriptStoreAdapter()
                logger.info("transcript_store_initialized", adapter="in_memory")
            else:
                from adapters.dynamo_transcript_store import DynamoTranscriptStoreAdapter
                self._transcript_store = DynamoTranscriptStoreAdapter(
                    table_name=settings.dynamodb_table_name,
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url,
                    timeout_seconds=settings.external_call_timeout_seconds,
                )
                logger.info(
                    "transcript_store_initialized",
                    adapter="dynamodb",
                    table=settings.dynamodb_table_name,
                )
        return self._transcript_store

    def get_search_index(self):
        """Get or create InMemorySearchIndexAdapter (lazy singleton)."""
        if self._search_index is None:
            from adapters.in_memory_search_index import InMemorySearchIndexAdapter
            self._search_index = InMemorySearchIndexAdapter()
            logger.info("search_index_initialized", adapter="in_memory")
        return self._search_index

    def get_analytics_exporter(self):
        """S3AnalyticsExportAdapter, or a local JSON file when no bucket is set."""
        if self._analytics_exporter is None:
            settings = get_settings()
            if not settings.analytics_bucket:
                from adapters.json_analytics_export import JsonAnalyticsExportAdapter
                self._analytics_exporter = JsonAnalyticsExportAdapter(
                    path=settings.analytics_local_path,
                )
                logger.info("analytics_exporter_initialized", adapter="json_file")
            else:
                from adapters.s3_analytics_export import S3AnalyticsExportAdapter
                self._analytics_exporter = S3AnalyticsExportAdapter(
                    bucket=settings.analytics_bucket,
                    prefix=settings.analytics_prefix,
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url,
                    timeout_seconds=settings.external_call_timeout_seconds,
                )
                logger.info("analytics_exporter_initialized", adapter="s3")
        return self._analytics_exporter

    def get_transcript_source(self):
        """S3TranscriptSourceAdapter, or the local inbox directory when no bucket is set."""
        if self._transcript_source is None:
            settings = get_settings()
            if not settings.inbox_bucket:
                from adapters.directory_transcript_source import DirectoryTranscriptSourceAdapter
                self._transcript_source = DirectoryTranscriptSourceAdapter(
                    directory=settings.inbox_directory,
                    transcript_store=self.get_transcript_store(),
                )
                logger.info("transcript_source_initialized", adapter="directory")
            else:
                from adapters.s3_transcript_source import S3TranscriptSourceAdapter
                self._transcript_source = S3TranscriptSourceAdapter(
                    bucket=settings.inbox_bucket,
                    prefix=settings.inbox_prefix,
                    transcript_store=self.get_transcript_store(),
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url,
                    timeout_seconds=settings.external_call_timeout_seconds,
                )
                logger.info("transcript_source_initialized", adapter="s3")
        return self._transcript_source

    # ------------------------------------------------------------------
    # Service accessors
    # ------------------------------------------------------------------

    def get_enrichment_service(self):
        """Get or create EnrichmentService (lazy singleton)."""
        if self._enrichment_service is None:
            from services.enrichment_service import EnrichmentService

            self._enrichment_service = EnrichmentService(
                llm_provider=self.get_llm_provider(),
            )
            logger.info("enrichment_service_initialized")
        return self._enrichment_service

    def get_transcript_service(self):
        """Get or create TranscriptService (lazy singleton)."""
        if self._transcript_service is None:
            from services.transcript_service import TranscriptService

            self._transcript_service = TranscriptService(
                transcript_store=self.get_transcript_store(),
                search_index=self.get_search_index(),
                feature_flags=self.get_feature_flags(),
            )
            logger.info("transcript_service_initialized")
        return self._transcript_service

    def get_orchestrator(self):
        """Get or create ProcessingOrchestrator (lazy singleton)."""
        if self._orchestrator is None:
            from services.processing_orchestrator import ProcessingOrchestrator

            settings = get_settings()
            self._orchestrator = ProcessingOrchestrator(
                transcript_source=self.get_transcript_source(),
                enrichment=self.get_enrichment_service(),
                transcript_store=self.get_transcript_store(),
                search_index=self.get_search_index(),
                analytics_exporter=self.get_analytics_exporter(),
                feature_flags=self.get_feature_flags(),
                call_timeout_seconds=settings.external_call_timeout_seconds,
            )
            logger.info("orchestrator_initialized")
        return self._orchestrator

    def get_bot_handler(self):
        """Get or create BotActivityHandler (lazy singleton)."""
        if self._bot_handler is None:
            from services.bot_handler import BotActivityHandler

            self._bot_handler = BotActivityHandler(
                transcript_service=self.get_transcript_service(),
            )
            logger.info("bot_handler_initialized")
        return self._bot_handler


# Global singleton instance
_container = DIContainer()


def get_di_container() -> DIContainer:
    """Get global DI container instance."""
    return _container
