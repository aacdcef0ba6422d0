"""
Application error hierarchy.

Services raise these; the handlers in middleware/error_handlers.py turn them
into ``{"error": message}`` JSON bodies with the matching status code.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource conflict"


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests"


class ServiceUnavailableError(AppError):
    status_code = 503
    default_message = "Service unavailable"


class DatabaseConnectionError(ServiceUnavailableError):
    default_message = "Database connection failed"

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(Exception):
    """Raised at startup when the environment cannot be turned into settings."""
