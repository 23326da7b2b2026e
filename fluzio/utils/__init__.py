"""
Utility modules for Fluzio.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    bad_request,
    not_found,
    conflict,
    unavailable,
    internal_error
)
from .exceptions import (
    FluzioError,
    NotFoundError,
    AccountNotFoundError,
    ValidationError,
    InvalidLevelTierError,
    ConflictError,
    DataAccessError,
    ConfigurationError
)
