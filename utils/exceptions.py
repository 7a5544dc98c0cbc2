"""
Error taxonomy shared by the service layer and the HTTP layer.

Every failure the API reports is an ApiError tagged with an ErrorKind.
The kind alone decides the status code and error code in the response
envelope (see api.errors), so views and services never deal in status codes.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    AUTH = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL_ERROR"

    @property
    def status(self) -> int:
        return _STATUS[self]


_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class ApiError(Exception):
    """Base API exception; subclasses only pick a kind."""
    kind = ErrorKind.INTERNAL
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status(self) -> int:
        return self.kind.status


class ValidationError(ApiError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"


class AuthError(ApiError):
    kind = ErrorKind.AUTH
    default_message = "Unauthorized"


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class InternalError(ApiError):
    kind = ErrorKind.INTERNAL
