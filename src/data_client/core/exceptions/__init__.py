"""Exceptions module for data-client.

This module provides the complete failure taxonomy shared by every
DataClient implementation.
"""

from .base import (
    DataClientError,
    create_error_response,
)

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

from .http_mapping import (
    STATUS_EXCEPTION_MAP,
    HTTP_STATUS_MAP,
    exception_class_for_status,
    exception_for_status,
    get_http_status_code,
)

__all__ = [
    # Base Exception
    "DataClientError",
    "create_error_response",

    # Failure Taxonomy
    "HttpError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "NetworkError",
    "UnknownError",
    "DataFormatError",

    # HTTP Mapping
    "STATUS_EXCEPTION_MAP",
    "HTTP_STATUS_MAP",
    "exception_class_for_status",
    "exception_for_status",
    "get_http_status_code",
]
