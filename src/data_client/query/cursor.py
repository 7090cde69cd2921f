"""
Keyset cursors for in-memory pagination.

A cursor records the sort values and id of the last item on a page together
with the sort it was issued under. The next page starts strictly after that
key, so a static collection is enumerated with no overlap and no gap.

Sort values are stored in a tagged JSON form so that each one decodes into
a value of the same type bracket it was read from:

- ``{"$date": iso}`` for datetimes
- ``{"$decimal": text}`` for decimals
- ``{"$other": text}`` for values that only order by their string form
- ``{"$obj": {...}}`` for objects, so user data never collides with a tag
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Mapping, Sequence

from ..core.exceptions import BadRequestError
from ..core.value_objects import SortOption, format_sort
from .fields import MISSING


def sort_signature(sort: Sequence[SortOption]) -> str:
    """Stable string identifying a sort specification."""
    return format_sort(sort)


@dataclass(frozen=True)
class OpaqueValue:
    """Decoded stand-in for a value that orders by its string form."""
    text: str

    def __str__(self) -> str:
        return self.text


def _encode_value(value: Any) -> Any:
    if value is MISSING or value is None:
        return None
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return {"$date": value.isoformat()}
    if isinstance(value, Decimal):
        return {"$decimal": str(value)}
    if isinstance(value, Mapping):
        return {"$obj": {str(key): _encode_value(item) for key, item in value.items()}}
    if isinstance(value, (list, tuple)):
        return [_encode_value(item) for item in value]
    return {"$other": str(value)}


def _decode_value(value: Any) -> Any:
    if isinstance(value, list):
        return [_decode_value(item) for item in value]
    if not isinstance(value, dict):
        return value
    if len(value) != 1:
        raise ValueError("cursor value tags hold exactly one key")
    tag, payload = next(iter(value.items()))
    if tag == "$obj" and isinstance(payload, dict):
        return {key: _decode_value(item) for key, item in payload.items()}
    if not isinstance(payload, str):
        raise ValueError(f"cursor value tag {tag} needs a string payload")
    if tag == "$date":
        return datetime.fromisoformat(payload)
    if tag == "$decimal":
        return Decimal(payload)
    if tag == "$other":
        return OpaqueValue(payload)
    raise ValueError(f"unknown cursor value tag {tag}")


@dataclass
class CursorInfo:
    """Position after which the next page starts."""
    last_id: str
    last_values: List[Any] = field(default_factory=list)
    sort: str = ""

    def encode(self) -> str:
        """Encode cursor information to a URL-safe base64 string."""
        cursor_data = {
            "id": self.last_id,
            "val": [_encode_value(value) for value in self.last_values],
            "sort": self.sort,
        }
        json_str = json.dumps(cursor_data, separators=(",", ":"))
        return base64.urlsafe_b64encode(json_str.encode()).decode().rstrip("=")

    @classmethod
    def decode(cls, cursor: str) -> "CursorInfo":
        """Decode a cursor string.

        Raises:
            BadRequestError: If the cursor is not one this module produced
        """
        try:
            padded = cursor + "=" * (-len(cursor) % 4)
            cursor_data = json.loads(base64.urlsafe_b64decode(padded.encode()).decode())
            last_id = cursor_data["id"]
            last_values = cursor_data["val"]
            sort = cursor_data["sort"]
            if not isinstance(last_id, str) or not isinstance(last_values, list) or not isinstance(sort, str):
                raise TypeError("unexpected cursor field types")
            return cls(
                last_id=last_id,
                last_values=[_decode_value(value) for value in last_values],
                sort=sort,
            )
        except (binascii.Error, UnicodeDecodeError, ValueError, ArithmeticError, KeyError, TypeError, AttributeError) as e:
            raise BadRequestError("Malformed pagination cursor", details={"cursor": cursor}) from e

    def check_sort(self, sort: Sequence[SortOption]) -> None:
        """Reject a cursor reused under a different sort."""
        if self.sort != sort_signature(sort) or len(self.last_values) != len(sort):
            raise BadRequestError(
                "Pagination cursor was issued for a different sort",
                details={"cursor_sort": self.sort, "requested_sort": sort_signature(sort)},
            )
