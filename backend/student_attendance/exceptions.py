"""Typed errors raised by the attendance services.

Every error carries the HTTP status the API layer answers with, so the
blueprints never translate errors by hand.
"""


class AttendanceError(Exception):
    """Base exception for all business and infrastructure failures."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AttendanceError):
    """Raised when request data is missing or malformed."""

    status_code = 400
    default_message = "Invalid request data"


class InvalidDate(ValidationError):
    """Raised when a date does not match the expected calendar format."""

    default_message = "Invalid date format. Use YYYY-MM-DD format."


class InvalidCredentials(AttendanceError):
    """Raised when an identity/password pair does not authenticate."""

    status_code = 401
    default_message = "Invalid credentials"


class AccountDeactivated(AttendanceError):
    """Raised when a correctly authenticated principal is inactive."""

    status_code = 401
    default_message = "Account is deactivated"


class Unauthorized(AttendanceError):
    """Raised when the caller may not act on the target resource."""

    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFound(AttendanceError):
    """Raised when a referenced record does not exist."""

    status_code = 404
    default_message = "Resource not found"


class AlreadyMarked(AttendanceError):
    """Raised when a student already has an attendance record for the day."""

    status_code = 409
    default_message = "Attendance already marked for today"


class NotPending(AttendanceError):
    """Raised when an absence request has already been decided."""

    status_code = 409
    default_message = "Only pending requests can be changed"


class ConfigurationError(AttendanceError):
    """Raised when required configuration (e.g. signing key) is missing."""

    default_message = "Server is not configured correctly"


class StorageError(AttendanceError):
    """Raised when the database or session cache fails. Safe to retry."""

    default_message = "Storage is temporarily unavailable"
