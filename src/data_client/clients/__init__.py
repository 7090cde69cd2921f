"""Concrete DataClient implementations."""

from .http_client import HttpDataClient
from .memory_client import InMemoryDataClient
from .query_params import build_query_params, parse_query_params

__all__ = [
    "HttpDataClient",
    "InMemoryDataClient",
    "build_query_params",
    "parse_query_params",
]
