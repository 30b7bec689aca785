"""
Constants management.
Centralized configuration for all magic values, model IDs, and defaults.
"""

from enum import Enum
from typing import Final


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    # Short aliases (config accepts dev|stage|prod)
    DEV = "dev"
    STAGE = "stage"
    PROD = "prod"


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    BEDROCK = "bedrock"
    OPENAI = "openai"


# Model IDs
class ModelIDs:
    """Centralized model identifiers."""
    BEDROCK_CLAUDE_3_HAIKU: Final[str] = "anthropic.claude-3-haiku-20240307-v1:0"
    OPENAI_GPT_4O_MINI: Final[str] = "gpt-4o-mini"


# Default values
class Defaults:
    """Defaults shared by settings, services and adapters."""
    MAX_SEARCH_RESULTS: Final[int] = 10
    EXTERNAL_CALL_TIMEOUT: Final[float] = 120.0
    BATCH_INTERVAL_HOURS: Final[float] = 6.0
    LOG_LEVEL: Final[str] = "INFO"
    AWS_REGION: Final[str] = "eu-west-2"
    TOP_THEMES: Final[int] = 10


# Storage settings
class StorageConfig:
    """Names used by the storage and export adapters."""
    SOURCE_DOCUMENT_SUFFIX: Final[str] = ".json"
    ANALYTICS_LOCAL_PATH: Final[str] = "data/analytics/transcripts.json"


# Logging scopes
class LogScope:
    """Standardized logging scope names."""
    CONFIG = "config_loader"
    API = "api"
    ERROR_HANDLER = "error_handler"
    PROVIDER = "provider"
    ENRICHMENT = "enrichment"
    TRANSCRIPTS = "transcript_service"
    ORCHESTRATION = "orchestration"
    WORKER = "worker"
    ADAPTER = "adapter"
    BOT = "bot"


# API endpoints and paths
class APIEndpoints:
    """API route definitions."""
    HEALTH = "/health"
    TRANSCRIPTS = "/api/transcripts"
    TRANSCRIPT_SEARCH = "/api/transcripts/search"
    TRANSCRIPT_THEMES = "/api/transcripts/themes"
    TRANSCRIPT_INSIGHTS = "/api/transcripts/insights"
    TRANSCRIPT = "/api/transcripts/{transcript_id}"
    TRANSCRIPT_PROCESS = "/api/transcripts/{transcript_id}/process"
    BOT_MESSAGES = "/api/messages"


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes for consistency."""
    INVALID_CONFIG = "INVALID_CONFIG"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    ENRICHMENT_FAILED = "ENRICHMENT_FAILED"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Feature flags
class Features:
    """Environment variables that toggle the optional pipeline stages."""
    SEARCH_ENABLED_ENV: Final[str] = "SEARCH_ENABLED"
    ANALYTICS_EXPORT_ENABLED_ENV: Final[str] = "ANALYTICS_EXPORT_ENABLED"
