"""Structured error taxonomy for the content API.

Provides a canonical set of error codes that clients can switch on, ensuring
consistent error handling across all endpoints and middleware layers.

Usage::

    from earthride.api.errors import ErrorCode, error_response

    return JSONResponse(
        status_code=404,
        content=error_response(ErrorCode.NOT_FOUND, "Blog not found"),
    )
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Canonical error codes for API responses.

    Client applications should switch on ``error.code`` (not HTTP status)
    to differentiate error handling paths.
    """

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    VALIDATION_ERROR = "validation_error"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL_ERROR = "internal_error"


def error_response(code: ErrorCode, message: str) -> dict:
    """Build a structured error response body.

    Args:
        code: One of the ``ErrorCode`` enum values.
        message: Human-readable error description.

    Returns:
        Dict with ``success: False`` and an ``error`` object containing
        ``code`` and ``message``.
    """
    return {"success": False, "error": {"code": code.value, "message": message}}
