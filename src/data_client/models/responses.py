"""
Response envelopes returned by every DataClient operation.
"""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import Field, computed_field, field_validator

from ..utils import utc_now, ensure_utc
from .base import BaseSchema

T = TypeVar('T')
R = TypeVar('R')


class ResponseMetadata(BaseSchema):
    """Metadata attached to a successful response."""
    request_id: Optional[str] = Field(None, description="Server-assigned request identifier")
    timestamp: datetime = Field(default_factory=utc_now, description="Time the response was produced")

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class SuccessApiResponse(BaseSchema, Generic[R]):
    """Envelope wrapping a successful result payload."""
    data: R = Field(description="Result payload")
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata, description="Response metadata")

    @classmethod
    def create(
        cls,
        data: R,
        request_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> "SuccessApiResponse[R]":
        """Create a success envelope with fresh metadata."""
        metadata = ResponseMetadata(request_id=request_id, timestamp=timestamp or utc_now())
        return cls(data=data, metadata=metadata)


class PaginatedResponse(BaseSchema, Generic[T]):
    """One page of a cursor-paginated listing.

    ``next_cursor`` is present exactly when more pages exist.
    """
    items: List[T] = Field(default_factory=list, description="Items for the current page")
    next_cursor: Optional[str] = Field(None, description="Cursor for the next page")
    total: Optional[int] = Field(None, ge=0, description="Total number of matching items, if known")

    @computed_field(alias="hasMore")
    @property
    def has_more(self) -> bool:
        """Whether there is a next page."""
        return self.next_cursor is not None

    @classmethod
    def create(
        cls,
        items: List[T],
        next_cursor: Optional[str] = None,
        total: Optional[int] = None,
    ) -> "PaginatedResponse[T]":
        """Create a page of items."""
        return cls(items=items, next_cursor=next_cursor, total=total)
