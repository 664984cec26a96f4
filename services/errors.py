"""Typed errors raised by the service layer.

Each error carries the HTTP status the API reports for it; the application
factory registers a single handler that renders them as JSON.
"""

from __future__ import annotations

from http import HTTPStatus


class ServiceError(Exception):
    """Base class for expected, user-visible service failures."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def reason(self) -> str:
        return HTTPStatus(self.status_code).phrase


class ValidationError(ServiceError):
    status_code = HTTPStatus.BAD_REQUEST


class ConflictError(ServiceError):
    # Duplicate resources are reported as 400 to API clients.
    status_code = HTTPStatus.BAD_REQUEST


class NotFoundError(ServiceError):
    status_code = HTTPStatus.NOT_FOUND


class AuthenticationError(ServiceError):
    status_code = HTTPStatus.UNAUTHORIZED


class MailDeliveryError(ServiceError):
    """Raised when an email cannot be delivered in production."""
