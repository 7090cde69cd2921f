"""
Wire encoding of read_all/count parameters.

``filter`` travels as compact JSON, ``sort`` as a comma separated
``field:dir`` list, ``cursor`` and ``limit`` as plain values. The parser is
the exact inverse so servers and tests can decode what clients send.
"""
import json
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.exceptions import BadRequestError
from ..core.value_objects import PaginationOptions, SortOption, format_sort, parse_sort


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(value: Any) -> str:
    """Compact JSON with ISO-8601 datetimes."""
    return json.dumps(value, separators=(",", ":"), default=_json_default)


def encode_filter(filter: Mapping[str, Any]) -> str:
    try:
        return dumps(filter)
    except (TypeError, ValueError) as e:
        raise BadRequestError(f"Filter is not JSON serializable: {e}") from e


def encode_pipeline(stages: Sequence[Mapping[str, Any]]) -> str:
    """Request body for the aggregate endpoint."""
    try:
        return dumps({"pipeline": list(stages)})
    except (TypeError, ValueError) as e:
        raise BadRequestError(f"Pipeline is not JSON serializable: {e}") from e


def build_query_params(
    filter: Optional[Mapping[str, Any]] = None,
    pagination: Optional[PaginationOptions] = None,
    sort: Optional[Sequence[SortOption]] = None,
) -> Dict[str, str]:
    """Build query string parameters; absent or empty values are omitted."""
    params: Dict[str, str] = {}
    if filter:
        params["filter"] = encode_filter(filter)
    if sort:
        params["sort"] = format_sort(sort)
    if pagination is not None:
        if pagination.cursor:
            params["cursor"] = pagination.cursor
        if pagination.limit is not None:
            params["limit"] = str(pagination.limit)
    return params


def parse_query_params(
    params: Mapping[str, str],
) -> Tuple[Dict[str, Any], Optional[PaginationOptions], List[SortOption]]:
    """Decode parameters produced by build_query_params.

    Raises:
        BadRequestError: If any parameter is malformed
    """
    filter: Dict[str, Any] = {}
    raw_filter = params.get("filter")
    if raw_filter:
        try:
            filter = json.loads(raw_filter)
        except ValueError as e:
            raise BadRequestError("Filter is not valid JSON", details={"filter": raw_filter}) from e
        if not isinstance(filter, dict):
            raise BadRequestError("Filter must be a JSON object", details={"filter": raw_filter})

    try:
        sort = parse_sort(params.get("sort"))
    except ValueError as e:
        raise BadRequestError(f"Invalid sort: {e}", details={"sort": params.get("sort")}) from e

    pagination = None
    cursor = params.get("cursor") or None
    raw_limit = params.get("limit")
    if cursor is not None or raw_limit is not None:
        try:
            limit = int(raw_limit) if raw_limit is not None else None
            pagination = PaginationOptions(cursor=cursor, limit=limit)
        except ValueError as e:
            raise BadRequestError(f"Invalid pagination: {e}", details={"limit": raw_limit}) from e

    return filter, pagination, sort
