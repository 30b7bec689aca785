"""
Tests for shared_utils.error_handler.

Covers the error envelope, every exception subclass, HTTP status codes,
log_exception() and internal_error_response().
"""

from unittest.mock import MagicMock

import pytest

from shared_utils.constants import ErrorCode
from shared_utils.error_handler import (
    GENERIC_ERROR_BODY,
    AppException,
    ConfigurationError,
    EnrichmentError,
    ExternalServiceError,
    TranscriptProcessingError,
    ValidationError,
    error_body,
    internal_error_response,
    log_exception,
)


# ---------------------------------------------------------------------------
# Envelope / base class
# ---------------------------------------------------------------------------


class TestErrorBody:
    def test_without_context(self) -> None:
        assert error_body("NOT_FOUND", "gone") == {"error": {"code": "NOT_FOUND", "message": "gone"}}

    def test_with_context(self) -> None:
        assert error_body("X", "m", {"a": 1})["error"]["context"] == {"a": 1}


class TestAppException:
    def test_defaults(self) -> None:
        exc = AppException(error_code="TEST", message="boom")
        assert exc.http_status == 500
        assert exc.context == {}
        assert str(exc) == "boom"

    def test_to_dict_structure(self) -> None:
        err = AppException("CODE", "msg", context={"a": 1}).to_dict()["error"]
        assert err == {"code": "CODE", "message": "msg", "context": {"a": 1}}


# ---------------------------------------------------------------------------
# Subclasses
# ---------------------------------------------------------------------------


class TestSubclasses:
    @pytest.mark.parametrize(
        "exc, code, status",
        [
            (ValidationError("bad"), ErrorCode.INVALID_INPUT, 400),
            (ConfigurationError("bad"), ErrorCode.INVALID_CONFIG, 500),
            (ExternalServiceError("S3", "bad"), ErrorCode.EXTERNAL_SERVICE_ERROR, 503),
            (EnrichmentError("bad"), ErrorCode.ENRICHMENT_FAILED, 502),
            (TranscriptProcessingError("bad"), ErrorCode.PROCESSING_FAILED, 500),
        ],
    )
    def test_codes_and_status(self, exc: AppException, code: ErrorCode, status: int) -> None:
        assert isinstance(exc, AppException)
        assert exc.error_code == code.value
        assert exc.http_status == status

    def test_external_service_message_and_context(self) -> None:
        exc = ExternalServiceError("DynamoDB", "throttled", context={"table": "T"})
        assert exc.message == "DynamoDB unavailable: throttled"
        assert exc.service == "DynamoDB"
        assert exc.context == {"table": "T", "service": "DynamoDB"}

    def test_processing_error_carries_transcript_id(self) -> None:
        exc = TranscriptProcessingError("x", transcript_id="t-1")
        assert exc.transcript_id == "t-1"
        assert exc.context == {"transcript_id": "t-1"}
        assert TranscriptProcessingError("x").context == {}


# ---------------------------------------------------------------------------
# Logging / generic body
# ---------------------------------------------------------------------------


class TestLogException:
    def test_app_exception_logged_with_code(self) -> None:
        logger = MagicMock()
        log_exception(ValidationError("bad"), logger=logger)
        assert logger.error.call_args[0][0] == "app_exception"
        assert logger.error.call_args[1]["error_code"] == ErrorCode.INVALID_INPUT.value

    def test_unexpected_exception(self) -> None:
        logger = MagicMock()
        log_exception(KeyError("k"), logger=logger)
        assert logger.error.call_args[0][0] == "unexpected_exception"
        assert logger.error.call_args[1]["error_type"] == "KeyError"


class TestInternalErrorResponse:
    def test_generic_body_hides_details(self) -> None:
        body = internal_error_response(RuntimeError("secret table name"))
        assert body == GENERIC_ERROR_BODY
        assert "secret" not in str(body)

    def test_returns_copy(self) -> None:
        body = internal_error_response(RuntimeError("x"))
        body["error"]["message"] = "changed"
        assert GENERIC_ERROR_BODY["error"]["message"] == "Internal server error"
