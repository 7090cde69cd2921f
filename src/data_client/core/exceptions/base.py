"""Root of the data-client exception hierarchy.

Every failure a data client reports is a DataClientError carrying a stable
error code, structured details and a retry hint. Nothing retries on the
caller's behalf; ``retryable`` only says whether repeating the same call is
safe.
"""

from typing import Any, Dict, Optional


class DataClientError(Exception):
    """Base exception for all data-client errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return create_error_response(self)


def create_error_response(exception: DataClientError) -> Dict[str, Any]:
    """Render an exception in the ``{"error": {...}}`` envelope servers send.

    The envelope is the same shape HttpDataClient reads back from failed
    responses, so ``code``, ``message`` and ``details`` survive a round trip.
    """
    body: Dict[str, Any] = {
        "code": exception.error_code,
        "message": exception.message,
        "details": exception.details,
        "type": type(exception).__name__,
        "retryable": exception.retryable,
    }
    status_code = getattr(exception, "status_code", None)
    if status_code is not None:
        body["status"] = status_code
    return {"error": body}
