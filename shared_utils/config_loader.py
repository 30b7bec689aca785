from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict
from functools import lru_cache
from typing import Optional
import os
import json
import logging
import boto3

from shared_utils.constants import Defaults, Environment, ModelIDs, StorageConfig

logger = logging.getLogger(__name__)


def get_secret_from_aws(secret_name: str, region: str = Defaults.AWS_REGION) -> str:
    """Fetch the OpenAI key from AWS Secrets Manager.

    Args:
        secret_name: Name of the secret in Secrets Manager
        region: AWS region

    Returns:
        Secret value or empty string if fetch fails
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=secret_name)
        if "SecretString" in response:
            secret = json.loads(response["SecretString"])
            return secret.get("openai_api_key", "")
        return ""
    except Exception as e:
        logger.warning(f"Could not fetch secret from Secrets Manager: {e}")
        return ""


class Settings(BaseSettings):
    """Application configuration with environment variable precedence.

    Precedence: 1) Environment Variables > 2) .env file > 3) Class defaults

    Empty storage settings select the local adapters (in-memory store,
    local inbox directory, local analytics file) so a development checkout
    runs without AWS.
    """
    # Application metadata
    app_name: str = "Meeting Insights Pipeline"
    app_version: str = "1.0.0"
    app_description: str = "Meeting transcript ingestion and AI enrichment"

    # API
    api_host: str = "localhost"
    api_port: int = 8000
    api_protocol: str = "http"
    create_rate_limit: str = "60/minute"

    # LLM Configuration
    llm_provider: str = "bedrock"  # "bedrock" or "openai"
    bedrock_region: str = Defaults.AWS_REGION
    bedrock_llm_model_id: str = ModelIDs.BEDROCK_CLAUDE_3_HAIKU
    openai_llm_model_id: str = ModelIDs.OPENAI_GPT_4O_MINI
    openai_api_key: Optional[str] = None
    openai_secret_name: Optional[str] = None

    # AWS
    aws_region: str = Defaults.AWS_REGION
    aws_endpoint_url: str = ""  # LocalStack override

    # Transcript store (empty table name -> in-memory store)
    dynamodb_table_name: str = ""

    # Transcript retrieval (empty bucket -> local inbox directory)
    inbox_bucket: str = ""
    inbox_prefix: str = "inbox"
    inbox_directory: str = "data/inbox"

    # Optional stages
    search_enabled: bool = False
    search_max_results: int = Defaults.MAX_SEARCH_RESULTS
    analytics_export_enabled: bool = False
    analytics_bucket: str = ""  # empty -> local JSON file
    analytics_prefix: str = "analytics/transcripts"
    analytics_local_path: str = StorageConfig.ANALYTICS_LOCAL_PATH

    # Orchestration
    external_call_timeout_seconds: float = Defaults.EXTERNAL_CALL_TIMEOUT
    batch_interval_hours: float = Defaults.BATCH_INTERVAL_HOURS

    # ECS worker (empty cluster -> process in-process on a thread)
    ecs_cluster_name: str = ""
    ecs_worker_task_def: str = ""
    ecs_worker_container_name: str = "worker"
    ecs_worker_subnets: str = ""
    ecs_worker_security_group: str = ""

    # Environment
    environment: str = "development"
    log_level: str = Defaults.LOG_LEVEL

    model_config = ConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator('llm_provider')
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Validate LLM provider is supported."""
        valid_providers = {"openai", "bedrock"}
        if v.lower() not in valid_providers:
            raise ValueError(f"llm_provider must be one of {valid_providers}, got {v}")
        return v.lower()

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment, normalising the short aliases."""
        aliases = {
            Environment.DEV.value: Environment.DEVELOPMENT.value,
            Environment.STAGE.value: Environment.STAGING.value,
            Environment.PROD.value: Environment.PRODUCTION.value,
        }
        value = aliases.get(v.lower(), v.lower())
        valid_envs = set(aliases.values())
        if value not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}, got {v}")
        return value

    @field_validator('external_call_timeout_seconds', 'batch_interval_hours')
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    def get_api_base_url(self) -> str:
        """Get full API base URL constructed from host, port and protocol.

        Returns:
            Full API base URL (e.g., "http://localhost:8000")
        """
        # Don't add port if it's standard (80 for http, 443 for https)
        port_str = "" if (
            (self.api_protocol == "http" and self.api_port == 80) or
            (self.api_protocol == "https" and self.api_port == 443)
        ) else f":{self.api_port}"

        return f"{self.api_protocol}://{self.api_host}{port_str}"


@lru_cache()
def get_settings() -> Settings:
    """Load and cache application settings.

    If the OpenAI provider is configured and OPENAI_SECRET_NAME is provided,
    fetches the API key from AWS Secrets Manager.

    Returns:
        Validated Settings instance

    Raises:
        ValueError: If settings are invalid
    """
    settings = Settings()

    if settings.llm_provider == "openai" and not settings.openai_api_key and settings.openai_secret_name:
        secret_key = get_secret_from_aws(settings.openai_secret_name, settings.aws_region)
        if secret_key:
            settings.openai_api_key = secret_key
            os.environ["OPENAI_API_KEY"] = secret_key
            logger.debug("fetched_openai_key_from_secrets_manager")

    logger.info(
        "configuration_loaded environment=%s llm_provider=%s store=%s search_enabled=%s analytics_export_enabled=%s",
        settings.environment,
        settings.llm_provider,
        settings.dynamodb_table_name or "in-memory",
        settings.search_enabled,
        settings.analytics_export_enabled,
    )

    return settings
