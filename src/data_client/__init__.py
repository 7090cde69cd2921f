"""Data-Client - generic data-access contract for remote resource collections.

This library defines the DataClient contract (CRUD plus count and aggregate,
scoped globally or per user), its response envelopes and failure taxonomy,
and ships an HTTP implementation and an in-memory reference implementation.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    DataClientSettings,
    get_settings,
    reset_settings,
)

from .core.exceptions import (
    # Base Exception
    DataClientError,

    # Failure Taxonomy
    HttpError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    NetworkError,
    UnknownError,
    DataFormatError,

    # Utility Functions
    exception_for_status,
    get_http_status_code,
    create_error_response,
)

from .core.value_objects import (
    GlobalScope,
    UserScope,
    Scope,
    GLOBAL,
    scope_from_user_id,
    Filter,
    Pipeline,
    SortOrder,
    SortOption,
    PaginationOptions,
)

from .models import (
    ResponseMetadata,
    SuccessApiResponse,
    PaginatedResponse,
)

from .protocols import (
    DataClient,
    JsonConverter,
    FromJson,
    ToJson,
)

from .clients import (
    HttpDataClient,
    InMemoryDataClient,
    build_query_params,
    parse_query_params,
)

from .pagination import iterate_all, collect_all

__all__ = [
    "__version__",

    # Configuration
    "DataClientSettings",
    "get_settings",
    "reset_settings",

    # Exceptions
    "DataClientError",
    "HttpError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "NetworkError",
    "UnknownError",
    "DataFormatError",
    "exception_for_status",
    "get_http_status_code",
    "create_error_response",

    # Value Objects
    "GlobalScope",
    "UserScope",
    "Scope",
    "GLOBAL",
    "scope_from_user_id",
    "Filter",
    "Pipeline",
    "SortOrder",
    "SortOption",
    "PaginationOptions",

    # Response Models
    "ResponseMetadata",
    "SuccessApiResponse",
    "PaginatedResponse",

    # Contract
    "DataClient",
    "JsonConverter",
    "FromJson",
    "ToJson",

    # Implementations
    "HttpDataClient",
    "InMemoryDataClient",
    "build_query_params",
    "parse_query_params",

    # Pagination
    "iterate_all",
    "collect_all",
]
