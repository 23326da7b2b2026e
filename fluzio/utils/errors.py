"""
JSON error bodies for the Fluzio API.

Every error response has the shape {"error": {"message": ..., "code": ...}}.
Limits, counts and storage details may be logged but are never returned.
"""
import logging
from enum import Enum
from flask import jsonify
from typing import Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes not carried by a FluzioError."""

    AUTH_REQUIRED = "AUTH_REQUIRED"            # admin routes without X-Admin-Id
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_LEVEL_TIER = "INVALID_LEVEL_TIER"
    NOT_FOUND = "NOT_FOUND"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    STATE_CONFLICT = "STATE_CONFLICT"
    DATA_ACCESS_ERROR = "DATA_ACCESS_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(message: str, code=ErrorCode.INTERNAL_ERROR, status_code: int = 500,
                   log_error: bool = True, details: Optional[dict] = None) -> tuple:
    """
    Build a (response, status) pair.

    Server errors log at ERROR and client errors at WARNING. details only
    go to the log.
    """
    code = code.value if isinstance(code, ErrorCode) else code
    if log_error:
        log = logger.error if status_code >= 500 else logger.warning
        log('%s %s: %s', status_code, code, message, extra={'details': details})

    return jsonify({'error': {'message': message, 'code': code}}), status_code


def bad_request(message: str, code=ErrorCode.INVALID_REQUEST) -> tuple:
    return error_response(message, code, 400, log_error=False)


def not_found(message: str, code=ErrorCode.NOT_FOUND) -> tuple:
    return error_response(message, code, 404, log_error=False)


def conflict(message: str, code=ErrorCode.STATE_CONFLICT) -> tuple:
    """Version conflict that outlived the retry budget."""
    return error_response(message, code, 409)


def unavailable(message: str = 'Storage temporarily unavailable', details: Optional[dict] = None) -> tuple:
    return error_response(message, ErrorCode.DATA_ACCESS_ERROR, 503, details=details)


def internal_error(message: str = 'An unexpected error occurred', details: Optional[dict] = None) -> tuple:
    return error_response(message, ErrorCode.INTERNAL_ERROR, 500, details=details)
