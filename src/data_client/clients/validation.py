"""Argument checks shared by DataClient implementations.

Each check raises BadRequestError before any I/O happens.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.exceptions import BadRequestError
from ..core.value_objects import GlobalScope, PaginationOptions, SortOption, UserScope

# Ids that URL normalization would collapse into a parent or self path
DOT_SEGMENTS = (".", "..")


def validate_id(id: Any) -> str:
    """Ensure a resource id is a non-blank string usable as a path segment."""
    if not isinstance(id, str) or not id.strip():
        raise BadRequestError(
            "Resource id must be a non-empty string",
            details={"id": repr(id)},
        )
    if id in DOT_SEGMENTS:
        raise BadRequestError(
            f"Resource id cannot be the path segment '{id}'",
            details={"id": id},
        )
    return id


def validate_scope(scope: Any) -> None:
    if not isinstance(scope, (GlobalScope, UserScope)):
        raise BadRequestError(
            f"Scope must be GlobalScope or UserScope, got {type(scope).__name__}",
        )


def validate_filter(filter: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Ensure a filter is a mapping with string keys; None becomes ``{}``."""
    if filter is None:
        return {}
    if not isinstance(filter, Mapping):
        raise BadRequestError(
            f"Filter must be a mapping, got {type(filter).__name__}",
        )
    for key in filter:
        if not isinstance(key, str) or not key:
            raise BadRequestError(
                "Filter keys must be non-empty strings",
                details={"key": repr(key)},
            )
    return dict(filter)


def validate_sort(sort: Optional[Sequence[SortOption]]) -> List[SortOption]:
    """Ensure sort is a sequence of SortOption; None becomes ``[]``."""
    if sort is None:
        return []
    if isinstance(sort, (str, bytes, Mapping)) or not isinstance(sort, Sequence):
        raise BadRequestError(
            f"Sort must be a sequence of SortOption, got {type(sort).__name__}",
        )
    options = list(sort)
    for option in options:
        if not isinstance(option, SortOption):
            raise BadRequestError(
                f"Sort entries must be SortOption, got {type(option).__name__}",
            )
    fields = [option.field for option in options]
    if len(set(fields)) != len(fields):
        raise BadRequestError(
            "Sort fields must be unique",
            details={"fields": fields},
        )
    return options


def validate_pagination(pagination: Any) -> Optional[PaginationOptions]:
    if pagination is not None and not isinstance(pagination, PaginationOptions):
        raise BadRequestError(
            f"Pagination must be PaginationOptions, got {type(pagination).__name__}",
        )
    return pagination


def validate_pipeline(pipeline: Any) -> List[Dict[str, Any]]:
    """Ensure a pipeline is a sequence of mapping stages."""
    if isinstance(pipeline, (str, bytes, Mapping)) or not isinstance(pipeline, Sequence):
        raise BadRequestError(
            f"Pipeline must be a sequence of stages, got {type(pipeline).__name__}",
        )
    stages = []
    for index, stage in enumerate(pipeline):
        if not isinstance(stage, Mapping):
            raise BadRequestError(
                f"Pipeline stage {index} must be a mapping",
                details={"stage_index": index},
            )
        stages.append(dict(stage))
    return stages
