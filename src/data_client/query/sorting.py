"""Value ordering and multi-key document sorting.

Values of different kinds order by type bracket:
missing/null < numbers < strings < objects < arrays < booleans < datetimes.
Within a bracket values compare naturally; objects and arrays compare
element by element. Anything else (dates, UUIDs) sorts last by its
string form.
"""
from datetime import datetime
from decimal import Decimal
from functools import cmp_to_key
from typing import Any, List, Mapping, Optional, Sequence

from ..core.value_objects import SortOption
from ..utils import ensure_utc
from .fields import MISSING, get_value

NULL_RANK = 0
NUMBER_RANK = 1
STRING_RANK = 2
OBJECT_RANK = 3
ARRAY_RANK = 4
BOOLEAN_RANK = 5
DATETIME_RANK = 6
OTHER_RANK = 7


def type_rank(value: Any) -> int:
    if value is MISSING or value is None:
        return NULL_RANK
    # bool is a subclass of int
    if isinstance(value, bool):
        return BOOLEAN_RANK
    if isinstance(value, (int, float, Decimal)):
        return NUMBER_RANK
    if isinstance(value, str):
        return STRING_RANK
    if isinstance(value, Mapping):
        return OBJECT_RANK
    if isinstance(value, (list, tuple)):
        return ARRAY_RANK
    if isinstance(value, datetime):
        return DATETIME_RANK
    return OTHER_RANK


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison returning -1, 0 or 1."""
    left_rank, right_rank = type_rank(left), type_rank(right)
    if left_rank != right_rank:
        return -1 if left_rank < right_rank else 1

    if left_rank == NULL_RANK:
        return 0
    if left_rank == OBJECT_RANK:
        return _compare_sequences(
            [pair for item in left.items() for pair in item],
            [pair for item in right.items() for pair in item],
        )
    if left_rank == ARRAY_RANK:
        return _compare_sequences(list(left), list(right))
    if left_rank == DATETIME_RANK:
        # naive values are read as UTC
        left, right = ensure_utc(left), ensure_utc(right)
    if left_rank == OTHER_RANK:
        left, right = str(left), str(right)
    return (left > right) - (left < right)


def _compare_sequences(left: List[Any], right: List[Any]) -> int:
    for left_item, right_item in zip(left, right):
        result = compare_values(left_item, right_item)
        if result:
            return result
    return (len(left) > len(right)) - (len(left) < len(right))


def compare_keys(
    left_values: Sequence[Any],
    right_values: Sequence[Any],
    sort: Sequence[SortOption],
) -> int:
    """Compare two sort keys under ``sort``; earlier options take precedence."""
    for option, left, right in zip(sort, left_values, right_values):
        result = compare_values(left, right)
        if result:
            return -result if option.descending else result
    return 0


def sort_key_values(document: Any, sort: Sequence[SortOption]) -> List[Any]:
    """Extract the values ``sort`` orders a document by."""
    return [get_value(document, option.field) for option in sort]


def sort_documents(
    documents: Sequence[Any],
    sort: Sequence[SortOption],
    id_field: Optional[str] = None,
) -> List[Any]:
    """Sort documents by ``sort``, optionally breaking ties by ``id_field``.

    Without an id tiebreaker the sort is stable, so equal keys keep their
    input order.
    """
    def compare(left: Any, right: Any) -> int:
        result = compare_keys(sort_key_values(left, sort), sort_key_values(right, sort), sort)
        if result or id_field is None:
            return result
        return compare_values(get_value(left, id_field), get_value(right, id_field))

    return sorted(documents, key=cmp_to_key(compare))
