"""
Application error types.

Stores and services raise these; the handlers registered in ``poprev.main``
turn them into ``{"success": false, "message": ...}`` bodies.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(AppError):
    """Missing or invalid input."""
    status_code = 400


class ConflictError(AppError):
    """Duplicate unique field or a referential-integrity violation."""
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""
    status_code = 401


class PermissionDeniedError(AppError):
    """Valid identity without the right to perform the action."""
    status_code = 403
