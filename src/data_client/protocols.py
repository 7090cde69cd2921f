"""
The DataClient contract and its converter dependency.

A DataClient performs CRUD-style operations plus ``count`` and ``aggregate``
against one resource collection. Every operation is scoped: ``GLOBAL`` targets
the admin-managed collection, ``UserScope(user_id)`` targets the collection
owned by that user. Scope is part of identity for lookups, so an item stored
under another scope is reported as not found.

Implementations handle the transport and use the bound JsonConverter for
(de)serialization. Every failure surfaces as a DataClientError subclass:

- BadRequestError: malformed item, filter, sort, pagination or pipeline
- UnauthorizedError / ForbiddenError: authentication or permission failure
- NotFoundError: id absent in the requested scope
- ServerError / NetworkError: remote or transport failure, safe to retry
- UnknownError: anything else
- DataFormatError: a payload could not be converted

Implementations never retry internally.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .core.exceptions import DataFormatError
from .core.value_objects import (
    Filter,
    GLOBAL,
    PaginationOptions,
    Pipeline,
    Scope,
    SortOption,
)
from .models import PaginatedResponse, SuccessApiResponse

T = TypeVar('T')
M = TypeVar('M', bound=BaseModel)

FromJson = Callable[[Dict[str, Any]], T]
ToJson = Callable[[T], Dict[str, Any]]

# Errors a converter may raise when the payload shape is wrong
CONVERSION_ERRORS = (ValidationError, KeyError, TypeError, ValueError, AttributeError)


@dataclass(frozen=True)
class JsonConverter(Generic[T]):
    """Pair of functions mapping JSON-like dicts to ``T`` and back."""
    from_json: FromJson
    to_json: ToJson

    @classmethod
    def for_model(cls, model: Type[M]) -> "JsonConverter[M]":
        """Build a converter for a pydantic model class."""
        return cls(
            from_json=model.model_validate,
            to_json=lambda item: item.model_dump(mode="json", by_alias=True),
        )

    def decode(self, payload: Any) -> T:
        """Convert a JSON-like payload to ``T``, raising DataFormatError on failure."""
        if not isinstance(payload, dict):
            raise DataFormatError(
                f"Expected a JSON object, got {type(payload).__name__}",
                details={"payload_type": type(payload).__name__},
            )
        try:
            return self.from_json(payload)
        except CONVERSION_ERRORS as e:
            raise DataFormatError(f"Could not deserialize item: {e}") from e

    def encode(self, item: T) -> Dict[str, Any]:
        """Convert ``T`` to a JSON-like dict, raising DataFormatError on failure."""
        try:
            payload = self.to_json(item)
        except CONVERSION_ERRORS as e:
            raise DataFormatError(f"Could not serialize item: {e}") from e
        if not isinstance(payload, dict):
            raise DataFormatError(
                f"Converter returned {type(payload).__name__}, expected a dict",
                details={"payload_type": type(payload).__name__},
            )
        return payload


class DataClient(ABC, Generic[T]):
    """Generic client for a collection of resources of type ``T``."""

    @abstractmethod
    async def create(self, item: T, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        """Create a new item.

        The returned item reflects server state, including server-assigned
        identity and default fields.

        Raises:
            BadRequestError: If the item fails validation
            UnauthorizedError, ForbiddenError: On authentication failures
            ServerError, NetworkError, UnknownError: On transport or server failures
        """

    @abstractmethod
    async def read(self, id: str, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        """Read exactly one item by id within ``scope``.

        Raises:
            NotFoundError: If no item with ``id`` exists in ``scope``
        """

    @abstractmethod
    async def read_all(
        self,
        *,
        scope: Scope = GLOBAL,
        filter: Optional[Filter] = None,
        pagination: Optional[PaginationOptions] = None,
        sort: Optional[Sequence[SortOption]] = None,
    ) -> SuccessApiResponse[PaginatedResponse[T]]:
        """Read one page of items matching ``filter``.

        Args:
            scope: Collection to read from
            filter: MongoDB-style query; None or empty matches everything in scope
            pagination: Cursor and limit; no cursor means the first page
            sort: Sort keys in precedence order; None leaves ordering to the implementation

        Example filter::

            {
                "status": "published",
                "tags": {"$in": ["tech", "python"]},
                "publishDate": {"$gte": "2024-01-01T00:00:00.000Z"},
            }

        A cursor is only meaningful with the filter and sort it was issued for.

        Raises:
            BadRequestError: For malformed filter, sort or pagination
        """

    @abstractmethod
    async def update(self, id: str, item: T, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        """Update an existing item and return the server-confirmed state.

        Implementations document whether this is a full or partial replace.

        Raises:
            NotFoundError: If no item with ``id`` exists in ``scope``
            BadRequestError: If the item fails validation
        """

    @abstractmethod
    async def delete(self, id: str, *, scope: Scope = GLOBAL) -> None:
        """Delete an item. Not idempotent: a second call raises NotFoundError.

        Raises:
            NotFoundError: If no item with ``id`` exists in ``scope``
        """

    @abstractmethod
    async def count(
        self,
        *,
        scope: Scope = GLOBAL,
        filter: Optional[Filter] = None,
    ) -> SuccessApiResponse[int]:
        """Count items matching ``filter`` without fetching them.

        Agrees with an exhaustive, fully paginated ``read_all`` over the same
        filter when the collection is not concurrently mutated.

        Raises:
            BadRequestError: For a malformed filter
        """

    @abstractmethod
    async def aggregate(
        self,
        pipeline: Pipeline,
        *,
        scope: Scope = GLOBAL,
    ) -> SuccessApiResponse[List[Dict[str, Any]]]:
        """Run an aggregation pipeline and return the raw result documents.

        Stages are passed through to the server uninterpreted.

        Raises:
            BadRequestError: If the server rejects the pipeline
        """
