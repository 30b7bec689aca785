"""
Input validation and sanitization utilities for the API boundary.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from domain.models import TranscriptCreate
from shared_utils.error_handler import ValidationError


class InputValidator:
    """Utility class for input validation."""

    @staticmethod
    def validate_non_empty_string(value: Optional[str], field_name: str) -> str:
        """Validate non-empty string.

        Args:
            value: String to validate
            field_name: Name of field for error messages

        Returns:
            Validated string, stripped

        Raises:
            ValidationError: If validation fails
        """
        if value is None:
            raise ValidationError(f"{field_name} is required")

        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if not value or not value.strip():
            raise ValidationError(f"{field_name} cannot be empty")

        return value.strip()

    @staticmethod
    def validate_positive_int(
        value: int, field_name: str, allow_zero: bool = False, maximum: Optional[int] = None
    ) -> int:
        """Validate positive integer, optionally bounded above.

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(f"{field_name} must be an integer")

        min_val = 0 if allow_zero else 1
        if value < min_val:
            raise ValidationError(f"{field_name} must be >= {min_val}")

        if maximum is not None and value > maximum:
            raise ValidationError(f"{field_name} must be <= {maximum}")

        return value

    @staticmethod
    def parse_transcript_create(payload: Any) -> TranscriptCreate:
        """Validate a create-transcript request body.

        Raises:
            ValidationError: If the body is not an object or fails model validation
        """
        if not isinstance(payload, dict):
            raise ValidationError("Invalid transcript data: expected a JSON object")
        try:
            return TranscriptCreate.model_validate(payload)
        except PydanticValidationError as exc:
            details: Dict[str, Any] = {
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in exc.errors()
                ]
            }
            raise ValidationError("Invalid transcript data", context=details) from exc
