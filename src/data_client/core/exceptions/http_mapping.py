"""HTTP status code mapping for data-client exceptions.

Maps response status codes onto the failure taxonomy and back.
"""

from typing import Any, Dict, Optional, Type

from .base import DataClientError
from .http import (
    HttpError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    NetworkError,
    UnknownError,
    DataFormatError,
)


STATUS_EXCEPTION_MAP: Dict[int, Type[HttpError]] = {
    # 400 Bad Request
    400: BadRequestError,
    422: BadRequestError,

    # 401 Unauthorized
    401: UnauthorizedError,

    # 403 Forbidden
    403: ForbiddenError,

    # 404 Not Found
    404: NotFoundError,
}


HTTP_STATUS_MAP: Dict[Type[DataClientError], int] = {
    BadRequestError: 400,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ServerError: 500,
    NetworkError: 503,
    DataFormatError: 502,
    UnknownError: 500,
    DataClientError: 500,
}


def exception_class_for_status(status_code: int) -> Type[HttpError]:
    """Resolve the exception class for an error status code."""
    if status_code in STATUS_EXCEPTION_MAP:
        return STATUS_EXCEPTION_MAP[status_code]
    if 500 <= status_code < 600:
        return ServerError
    return UnknownError


def exception_for_status(
    status_code: int,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    error_code: Optional[str] = None,
) -> HttpError:
    """Build the typed failure for an unsuccessful response.

    Args:
        status_code: HTTP status code of the response
        message: Message reported by the server, if any
        details: Structured error details reported by the server
        error_code: Error code reported by the server

    Returns:
        HttpError subclass instance carrying the status code
    """
    exception_class = exception_class_for_status(status_code)
    return exception_class(
        message or f"Request failed with status {status_code}",
        status_code=status_code,
        error_code=error_code,
        details=details,
    )


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception.

    An explicit status code carried by the exception wins over the class
    mapping; inheritance is honoured for subclasses.
    """
    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    for exception_type in type(exception).__mro__:
        if exception_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exception_type]
    return 500
