"""Query value objects for read_all/count/aggregate.

Filters and pipelines are opaque JSON-like structures interpreted by the
backing server; sort and pagination are typed here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence

Filter = Mapping[str, Any]
PipelineStage = Mapping[str, Any]
Pipeline = Sequence[PipelineStage]


class SortOrder(str, Enum):
    """Sort order for queries."""
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str) -> "SortOrder":
        """Parse a direction, accepting asc/desc and ascending/descending."""
        normalized = str(value).strip().lower()
        aliases = {"ascending": "asc", "descending": "desc", "1": "asc", "-1": "desc"}
        normalized = aliases.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid sort order: {value!r}")


@dataclass(frozen=True)
class SortOption:
    """Sort by a single field; lists of options sort by precedence."""
    field: str
    order: SortOrder = SortOrder.ASC

    def __post_init__(self):
        if not isinstance(self.field, str) or not self.field.strip():
            raise ValueError(f"Sort field must be a non-empty string, got: {self.field!r}")
        if not isinstance(self.order, SortOrder):
            object.__setattr__(self, 'order', SortOrder.parse(self.order))

    @classmethod
    def parse(cls, value: str) -> "SortOption":
        """Parse the wire form ``field`` or ``field:asc|desc``."""
        field, _, order = str(value).partition(":")
        return cls(field.strip(), SortOrder.parse(order) if order else SortOrder.ASC)

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DESC

    def __str__(self) -> str:
        return f"{self.field}:{self.order.value}"


def format_sort(sort: Sequence[SortOption]) -> str:
    """Render sort options as a comma separated ``field:dir`` list."""
    return ",".join(str(option) for option in sort)


def parse_sort(value: Optional[str]) -> List[SortOption]:
    """Parse a comma separated ``field:dir`` list."""
    if not value:
        return []
    return [SortOption.parse(part) for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class PaginationOptions:
    """Cursor pagination parameters.

    Attributes:
        cursor: Opaque token meaning "resume after this position"; None for the first page
        limit: Maximum number of items per page; None for the server default
    """
    cursor: Optional[str] = None
    limit: Optional[int] = None

    def __post_init__(self):
        if self.cursor is not None and (not isinstance(self.cursor, str) or not self.cursor):
            raise ValueError("Pagination cursor must be a non-empty string")
        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
                raise ValueError(f"Pagination limit must be a positive integer, got: {self.limit!r}")

    def next(self, cursor: str) -> "PaginationOptions":
        """Options for the page after this one, keeping the same limit."""
        return PaginationOptions(cursor=cursor, limit=self.limit)
