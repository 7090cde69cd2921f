"""Pydantic models shared by data clients."""

from .base import BaseSchema
from .responses import ResponseMetadata, SuccessApiResponse, PaginatedResponse

__all__ = [
    "BaseSchema",
    "ResponseMetadata",
    "SuccessApiResponse",
    "PaginatedResponse",
]
