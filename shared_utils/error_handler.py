"""
Application exceptions and their JSON error bodies.

Every boundary (HTTP handler, worker, scheduler) renders failures as::

    {"error": {"code": "...", "message": "...", "context": {...}}}

``AppException`` subclasses carry their own code and HTTP status; anything
else is logged and rendered as the generic 500 body.
"""

from typing import Any, Dict, Optional
import logging

from shared_utils.constants import ErrorCode, LogScope
from shared_utils.logging_utils import get_scoped_logger


def error_body(code: str, message: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the standard error envelope."""
    body: Dict[str, Any] = {"code": code, "message": message}
    if context is not None:
        body["context"] = context
    return {"error": body}


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        http_status: int = 500
    ):
        self.error_code = error_code
        self.message = message
        self.context = context or {}
        self.http_status = http_status
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return error_body(self.error_code, self.message, self.context)


class ValidationError(AppException):
    """Client input rejected at the API boundary (400)."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_INPUT.value, message, context, http_status=400)


class ConfigurationError(AppException):
    """Settings are missing or inconsistent, e.g. an LLM provider without credentials."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_CONFIG.value, message, context, http_status=500)


class ExternalServiceError(AppException):
    """A collaborator (S3, DynamoDB, ECS, the LLM) failed or timed out."""

    def __init__(self, service: str, message: str, context: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(
            error_code=ErrorCode.EXTERNAL_SERVICE_ERROR.value,
            message=f"{service} unavailable: {message}",
            context={**(context or {}), "service": service},
            http_status=503,
        )


class EnrichmentError(AppException):
    """AI enrichment produced no usable insights."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.ENRICHMENT_FAILED.value, message, context, http_status=502)


class TranscriptProcessingError(AppException):
    """A transcript could not be driven to Completed.

    Raised after the transcript has been marked Failed; the original cause
    is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        transcript_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.transcript_id = transcript_id
        ctx = {**(context or {})}
        if transcript_id:
            ctx["transcript_id"] = transcript_id
        super().__init__(ErrorCode.PROCESSING_FAILED.value, message, ctx, http_status=500)


GENERIC_ERROR_BODY: Dict[str, Any] = error_body(
    ErrorCode.INTERNAL_ERROR.value, "Internal server error"
)


def log_exception(
    exc: Exception,
    scope: str = LogScope.ERROR_HANDLER,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log *exc* once, with its code and context when it is an AppException."""
    logger = logger or get_scoped_logger(scope)

    if isinstance(exc, AppException):
        logger.error(
            "app_exception",
            error_code=exc.error_code,
            message=exc.message,
            http_status=exc.http_status,
            context=exc.context,
        )
        return

    logger.error(
        "unexpected_exception",
        error_type=type(exc).__name__,
        message=str(exc),
        exc_info=exc,
    )


def internal_error_response(exc: Exception, scope: str = LogScope.API) -> Dict[str, Any]:
    """Log *exc* and return the generic 500 body (no internals leaked)."""
    log_exception(exc, scope)
    return {"error": dict(GENERIC_ERROR_BODY["error"])}
