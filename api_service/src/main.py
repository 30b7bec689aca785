"""
FastAPI backend for the Meeting Insights pipeline.

Endpoints:
    GET    /health  Health check
    GET    /api/transcripts  List transcripts (newest first)
    GET    /api/transcripts/search?q=  Search (index first, store fallback)
    GET    /api/transcripts/themes  Top themes across transcripts
    GET    /api/transcripts/insights  Portfolio insights summary
    GET    /api/transcripts/{transcript_id}  Fetch one transcript
    POST   /api/transcripts  Create (server assigns id/createdDate/status)
    DELETE /api/transcripts/{transcript_id}  Delete
    POST   /api/transcripts/{transcript_id}/process  Queue one processing attempt
    POST   /api/messages  Chat bot activity

Every handler answers: AppExceptions map to their status code, anything
else to a generic 500 body.
"""

import json
import threading
from contextlib import asynccontextmanager
from typing import Optional

import boto3
import uvicorn
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared_utils.config_loader import get_settings
from shared_utils.logging_utils import ContextualLogger, configure_logging
from shared_utils.constants import APIEndpoints, Defaults, ErrorCode, LogScope
from shared_utils.error_handler import (
    AppException,
    ExternalServiceError,
    ValidationError,
    error_body,
    internal_error_response,
)
from shared_utils.validation import InputValidator
from shared_utils.di_container import get_di_container


# ---------------------------------------------------------------------------
# Application bootstrap
# ---------------------------------------------------------------------------

settings = get_settings()
configure_logging(settings.environment, settings.log_level)
logger = ContextualLogger(scope=LogScope.API)

MAX_SEARCH_RESULTS_LIMIT = 100


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Validate providers once at startup so we fail fast."""
    try:
        get_di_container().validate_all_providers()
        logger.info("api_initialized", environment=settings.environment)
    except Exception as e:
        logger.error("api_initialization_failed", error=str(e))
        raise
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=settings.app_description,
    lifespan=lifespan,
)

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query/path parameters are client errors (400), not 422."""
    error = ValidationError(
        "Invalid request parameters",
        context={"errors": [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]},
    )
    logger.warning("request_validation_failed", path=request.url.path)
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


def _error_response(e: Exception, event: str) -> JSONResponse:
    if isinstance(e, AppException):
        logger.warning(event, error_code=e.error_code)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=internal_error_response(e, scope=LogScope.API),
    )


def _not_found(transcript_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_body(ErrorCode.NOT_FOUND.value, f"Transcript {transcript_id} not found"),
    )


async def _read_json_body(request: Request):
    raw = await request.body()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body must be valid JSON") from exc


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get(APIEndpoints.HEALTH)
def health_check() -> dict:
    """Health check endpoint."""
    logger.debug("health_check_requested")
    flags = get_di_container().get_feature_flags()
    return {
        "status": "healthy",
        "environment": settings.environment,
        "llm_provider": settings.llm_provider,
        "search_enabled": flags.is_search_enabled(),
        "analytics_export_enabled": flags.is_analytics_export_enabled(),
    }


# ======================================================================
# Transcript CRUD
# ======================================================================

@app.get(APIEndpoints.TRANSCRIPTS)
async def list_transcripts() -> JSONResponse:
    """List all transcripts, newest first."""
    try:
        transcripts = get_di_container().get_transcript_service().get_transcripts()
        return JSONResponse(content=[t.to_json_dict() for t in transcripts])
    except Exception as e:
        return _error_response(e, "list_transcripts_error")


# Fixed sub-paths are registered before /{transcript_id} so they win the match.

@app.get(APIEndpoints.TRANSCRIPT_SEARCH)
async def search_transcripts(
    q: Optional[str] = None,
    max_results: int = settings.search_max_results,
) -> JSONResponse:
    """Search transcripts by keywords."""
    try:
        query = InputValidator.validate_non_empty_string(q, "q")
        limit = InputValidator.validate_positive_int(
            max_results, "max_results", maximum=MAX_SEARCH_RESULTS_LIMIT
        )
        results = get_di_container().get_transcript_service().search_transcripts(query, limit)
        logger.info("transcripts_searched", results=len(results))
        return JSONResponse(content=[t.to_json_dict() for t in results])
    except Exception as e:
        return _error_response(e, "search_transcripts_error")


@app.get(APIEndpoints.TRANSCRIPT_THEMES)
async def get_themes(limit: int = Defaults.TOP_THEMES) -> JSONResponse:
    """Top themes aggregated across enriched transcripts."""
    try:
        limit = InputValidator.validate_positive_int(
            limit, "limit", maximum=MAX_SEARCH_RESULTS_LIMIT
        )
        themes = get_di_container().get_transcript_service().get_themes(limit)
        return JSONResponse(content=[t.to_json_dict() for t in themes])
    except Exception as e:
        return _error_response(e, "get_themes_error")


@app.get(APIEndpoints.TRANSCRIPT_INSIGHTS)
async def get_insights_summary() -> JSONResponse:
    """Portfolio-level insights over all stored transcripts."""
    try:
        summary = get_di_container().get_transcript_service().get_insights_summary()
        return JSONResponse(content=summary.to_json_dict())
    except Exception as e:
        return _error_response(e, "get_insights_error")


@app.get(APIEndpoints.TRANSCRIPT)
async def get_transcript(transcript_id: str) -> JSONResponse:
    """Fetch one transcript by id."""
    try:
        transcript = get_di_container().get_transcript_service().get_transcript(transcript_id)
        if transcript is None:
            return _not_found(transcript_id)
        return JSONResponse(content=transcript.to_json_dict())
    except Exception as e:
        return _error_response(e, "get_transcript_error")


@app.post(APIEndpoints.TRANSCRIPTS)
@limiter.limit(settings.create_rate_limit)
async def create_transcript(request: Request) -> JSONResponse:
    """Create a Pending transcript.

    ``id``, ``createdDate`` and ``status`` in the body are ignored; the
    server assigns them.
    """
    try:
        payload = await _read_json_body(request)
        create = InputValidator.parse_transcript_create(payload)
        transcript = create.to_transcript()

        saved = get_di_container().get_transcript_service().save_transcript(transcript)
        logger.info("transcript_created", transcript_id=saved.id)
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=saved.to_json_dict(),
            headers={
                "Location": APIEndpoints.TRANSCRIPT.format(transcript_id=saved.id)
            },
        )
    except Exception as e:
        return _error_response(e, "create_transcript_error")


@app.delete(APIEndpoints.TRANSCRIPT)
async def delete_transcript(transcript_id: str) -> Response:
    """Delete a transcript (204), or 404 when it does not exist."""
    try:
        deleted = get_di_container().get_transcript_service().delete_transcript(transcript_id)
        if not deleted:
            return _not_found(transcript_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        return _error_response(e, "delete_transcript_error")


# ======================================================================
# Single-item processing trigger
# ======================================================================

def _trigger_processing(transcript_id: str) -> None:
    """Fire-and-forget processing of one transcript.

    In local / dev mode (when ecs_cluster_name is empty) runs the
    orchestrator in-process on a background thread so in-memory adapters
    are shared with the API process.  Otherwise launches the worker task
    with TRANSCRIPT_ID set.
    """
    if not settings.ecs_cluster_name:
        logger.info("local_processing_triggered", transcript_id=transcript_id)

        def _run_local_processing() -> None:
            try:
                result = get_di_container().get_orchestrator().run_one(transcript_id)
                logger.info(
                    "local_processing_complete",
                    transcript_id=transcript_id,
                    status=result.status.value if result else None,
                )
            except Exception as exc:
                logger.error(
                    "local_processing_failed",
                    transcript_id=transcript_id,
                    error=str(exc),
                )

        threading.Thread(
            target=_run_local_processing,
            daemon=True,
            name=f"process-{transcript_id[:8]}",
        ).start()
        return

    ecs = boto3.client("ecs", region_name=settings.aws_region)
    subnets = [s.strip() for s in settings.ecs_worker_subnets.split(",") if s.strip()]

    try:
        ecs.run_task(
            cluster=settings.ecs_cluster_name,
            taskDefinition=settings.ecs_worker_task_def,
            launchType="FARGATE",
            networkConfiguration={
                "awsvpcConfiguration": {
                    "subnets": subnets,
                    "securityGroups": [settings.ecs_worker_security_group],
                    "assignPublicIp": "DISABLED",
                }
            },
            overrides={
                "containerOverrides": [
                    {
                        "name": settings.ecs_worker_container_name,
                        "environment": [
                            {"name": "TRANSCRIPT_ID", "value": transcript_id},
                        ],
                    }
                ]
            },
        )
    except (BotoCoreError, ClientError) as exc:
        raise ExternalServiceError("ECS", f"Failed to launch worker task: {exc}") from exc

    logger.info(
        "ecs_worker_triggered",
        transcript_id=transcript_id,
        cluster=settings.ecs_cluster_name,
    )


@app.post(APIEndpoints.TRANSCRIPT_PROCESS)
async def process_transcript(transcript_id: str) -> JSONResponse:
    """Queue one processing attempt; returns immediately."""
    try:
        transcript = get_di_container().get_transcript_service().get_transcript(transcript_id)
        if transcript is None:
            return _not_found(transcript_id)

        _trigger_processing(transcript_id)
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={
                "transcriptId": transcript_id,
                "status": transcript.status.value,
                "message": "Transcript accepted for processing",
            },
        )
    except Exception as e:
        return _error_response(e, "process_transcript_error")


# ======================================================================
# Bot
# ======================================================================

@app.post(APIEndpoints.BOT_MESSAGES)
async def bot_messages(request: Request) -> JSONResponse:
    """Inbound chat activity; the reply activity is returned in the body."""
    try:
        activity = await _read_json_body(request)
        if not isinstance(activity, dict):
            raise ValidationError("Activity must be a JSON object")
        reply = get_di_container().get_bot_handler().handle(activity)
        return JSONResponse(content=reply)
    except Exception as e:
        return _error_response(e, "bot_activity_error")


if __name__ == "__main__":
    logger.info("api_starting", base_url=settings.get_api_base_url())
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
