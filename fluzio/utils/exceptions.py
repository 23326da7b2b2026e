"""
Custom exceptions for Fluzio business logic.

Expected business states (an upgrade that is not allowed yet, a redemption
over its limit) are returned as results, not raised. These exceptions cover
missing records, storage failures, conflicting writes and contract
violations.
"""


class FluzioError(Exception):
    """Base exception for all Fluzio business logic errors."""

    def __init__(self, message: str, code: str = "FLUZIO_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(FluzioError):
    """Resource not found."""

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class AccountNotFoundError(NotFoundError):
    """Account not found."""

    def __init__(self, identifier=None):
        super().__init__("Account", identifier)


class ValidationError(FluzioError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class InvalidLevelTierError(ValidationError):
    """A level or tier outside the declared domain reached the rule tables."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message, field)
        self.code = "INVALID_LEVEL_TIER"


class ConflictError(FluzioError):
    """A conditional write lost against a concurrent update."""

    def __init__(self, resource: str, identifier=None):
        self.identifier = identifier
        message = f"{resource} was modified concurrently"
        if identifier:
            message = f"{resource} {identifier} was modified concurrently"
        super().__init__(message, "STATE_CONFLICT")


class DataAccessError(FluzioError):
    """The backing store could not be read or written."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message, "DATA_ACCESS_ERROR")


class ConfigurationError(FluzioError):
    """Application configuration error."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")
