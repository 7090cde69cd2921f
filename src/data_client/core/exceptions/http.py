"""Failure taxonomy surfaced by every data client operation.

Status-carrying failures derive from HttpError. Payload (de)serialization
failures are reported as DataFormatError so callers can tell a malformed
response apart from a rejected request.
"""

from typing import Any, Dict, Optional

from .base import DataClientError


class HttpError(DataClientError):
    """Base class for failures reported by the remote side or the transport."""

    default_status_code: Optional[int] = None

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code if status_code is not None else self.default_status_code


class BadRequestError(HttpError):
    """Raised when an item, filter, sort, pagination or pipeline is rejected."""
    default_status_code = 400


class UnauthorizedError(HttpError):
    """Raised when authentication is required and missing or invalid."""
    default_status_code = 401


class ForbiddenError(HttpError):
    """Raised when the authenticated caller lacks permission."""
    default_status_code = 403


class NotFoundError(HttpError):
    """Raised when the requested id does not exist in the requested scope."""
    default_status_code = 404


class ServerError(HttpError):
    """Raised for remote-side failures (5xx)."""
    default_status_code = 500
    retryable = True


class NetworkError(HttpError):
    """Raised when the transport cannot complete the exchange."""
    retryable = True


class UnknownError(HttpError):
    """Raised for any other unexpected failure."""
    pass


class DataFormatError(DataClientError):
    """Raised when a payload cannot be serialized or deserialized."""
    pass
