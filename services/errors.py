"""
Service-layer error taxonomy.

Every exception carries the HTTP status and the stable error code the API
layer answers with. Handlers in api/errors.py turn them into the uniform
error envelope.
"""
from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by the core components."""

    status_code: int = 400
    error_code: str = "BAD_REQUEST"
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None, *, details: Optional[dict] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(ServiceError):
    """Malformed or out-of-range client data."""
    status_code = 400
    error_code = "INVALID_INPUT"
    default_message = "Invalid input"


class ConflictError(ServiceError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Conflict"


class InvalidCredentialsError(ServiceError):
    """Unknown identifier or wrong password; never says which."""
    status_code = 401
    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class InvalidTokenError(ServiceError):
    status_code = 401
    error_code = "INVALID_TOKEN"
    default_message = "Invalid token"


class ExpiredTokenError(ServiceError):
    # Deliberately not an InvalidTokenError: callers tell the two apart.
    status_code = 401
    error_code = "EXPIRED_TOKEN"
    default_message = "Token has expired"


class UnauthenticatedError(ServiceError):
    status_code = 401
    error_code = "UNAUTHENTICATED"
    default_message = "Access token is required"


class ForbiddenError(ServiceError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Invalid or expired token"


class NotFoundError(ServiceError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class StorageError(ServiceError):
    """Persistence or payload storage failure. Reported to clients as a generic 500."""
    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"
