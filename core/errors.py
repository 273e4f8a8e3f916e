"""
Error Code Definitions and Classification.

Centralized error code management with retry classification and
consistent error responses across all HTTP endpoints.

Exports:
    ErrorCode: Standardized error codes enum
    ErrorClassification: Error category enum
    is_retryable: Helper to check if error should be retried
    get_http_status_code: Error code to HTTP status mapping
    error_code_for: Exception to error code mapping
    create_error_response: Standard error payload
"""

from enum import Enum
from typing import Dict, Any

from exceptions import (
    ValidationError,
    ResourceNotFoundError,
    InvalidStateError,
    ConflictError,
    UpstreamError,
    ConfigurationError,
)


class ErrorCode(str, Enum):
    """
    Standardized error codes for all application errors.

    Returned in the "error" field of API responses so clients can branch
    on the outcome without parsing messages.
    """

    # Client errors (HTTP 400/401/404, NOT RETRYABLE)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    INVALID_STATE = "INVALID_STATE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"

    # Concurrency (HTTP 409, RETRYABLE)
    CONFLICT = "CONFLICT"

    # Dependency failures (HTTP 502/503, RETRYABLE)
    STORAGE_ERROR = "STORAGE_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"

    # Service errors (HTTP 500)
    CONFIG_ERROR = "CONFIG_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ErrorClassification(str, Enum):
    """Error classification for retry logic."""

    PERMANENT = "PERMANENT"  # Never retry (client error, won't fix itself)
    TRANSIENT = "TRANSIENT"  # Retry after refreshing state


_ERROR_CLASSIFICATION: Dict[ErrorCode, ErrorClassification] = {
    ErrorCode.VALIDATION_ERROR: ErrorClassification.PERMANENT,
    ErrorCode.INVALID_PARAMETER: ErrorClassification.PERMANENT,
    ErrorCode.INVALID_STATE: ErrorClassification.PERMANENT,
    ErrorCode.RESOURCE_NOT_FOUND: ErrorClassification.PERMANENT,
    ErrorCode.UNAUTHENTICATED: ErrorClassification.PERMANENT,
    ErrorCode.FORBIDDEN: ErrorClassification.PERMANENT,
    ErrorCode.CONFIG_ERROR: ErrorClassification.PERMANENT,

    ErrorCode.CONFLICT: ErrorClassification.TRANSIENT,
    ErrorCode.STORAGE_ERROR: ErrorClassification.TRANSIENT,
    ErrorCode.UPSTREAM_ERROR: ErrorClassification.TRANSIENT,
    ErrorCode.UNEXPECTED_ERROR: ErrorClassification.TRANSIENT,
}

_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_PARAMETER: 400,
    ErrorCode.INVALID_STATE: 400,
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UPSTREAM_ERROR: 502,
    ErrorCode.STORAGE_ERROR: 503,
}


def is_retryable(error_code: ErrorCode) -> bool:
    """
    Determine if an error code should trigger a retry.

    Example:
        >>> is_retryable(ErrorCode.INVALID_STATE)
        False
        >>> is_retryable(ErrorCode.CONFLICT)
        True
    """
    classification = _ERROR_CLASSIFICATION.get(error_code, ErrorClassification.TRANSIENT)
    return classification != ErrorClassification.PERMANENT


def get_error_classification(error_code: ErrorCode) -> ErrorClassification:
    """Get the classification for an error code (TRANSIENT when unmapped)."""
    return _ERROR_CLASSIFICATION.get(error_code, ErrorClassification.TRANSIENT)


def get_http_status_code(error_code: ErrorCode) -> int:
    """
    Get the appropriate HTTP status code for an error code.

    Example:
        >>> get_http_status_code(ErrorCode.RESOURCE_NOT_FOUND)
        404
        >>> get_http_status_code(ErrorCode.CONFLICT)
        409
    """
    return _HTTP_STATUS.get(error_code, 500)


def error_code_for(exc: BaseException) -> ErrorCode:
    """Map an exception from the service layer to its error code."""
    if isinstance(exc, ValidationError):
        return ErrorCode.VALIDATION_ERROR
    if isinstance(exc, ResourceNotFoundError):
        return ErrorCode.RESOURCE_NOT_FOUND
    if isinstance(exc, InvalidStateError):
        return ErrorCode.INVALID_STATE
    if isinstance(exc, ConflictError):
        return ErrorCode.CONFLICT
    if isinstance(exc, UpstreamError):
        return ErrorCode.UPSTREAM_ERROR
    if isinstance(exc, ConfigurationError):
        return ErrorCode.CONFIG_ERROR
    return ErrorCode.UNEXPECTED_ERROR


def create_error_response(
    error_code: ErrorCode,
    message: str,
    **kwargs: Any
) -> Dict[str, Any]:
    """
    Create a standardized error response dictionary.

    Example:
        >>> create_error_response(ErrorCode.INVALID_STATE, "Check-in has already been acknowledged or resolved")
        {
            "success": False,
            "error": "INVALID_STATE",
            "message": "Check-in has already been acknowledged or resolved",
            "retryable": False,
            "http_status": 400
        }
    """
    return {
        "success": False,
        "error": error_code.value,
        "message": message,
        "retryable": is_retryable(error_code),
        "http_status": get_http_status_code(error_code),
        **kwargs
    }
