"""Value objects for data-client queries and scoping."""

from .scope import (
    GlobalScope,
    UserScope,
    Scope,
    GLOBAL,
    scope_from_user_id,
)

from .query import (
    Filter,
    PipelineStage,
    Pipeline,
    SortOrder,
    SortOption,
    PaginationOptions,
    format_sort,
    parse_sort,
)

__all__ = [
    # Scope
    "GlobalScope",
    "UserScope",
    "Scope",
    "GLOBAL",
    "scope_from_user_id",

    # Query
    "Filter",
    "PipelineStage",
    "Pipeline",
    "SortOrder",
    "SortOption",
    "PaginationOptions",
    "format_sort",
    "parse_sort",
]
