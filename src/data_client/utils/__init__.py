"""Utilities module for data-client.

This module provides utility functions and helpers used throughout
the data-client library.
"""

from .timezone import utc_now, ensure_utc
from .uuid import generate_uuid_v7

__all__ = [
    # Timezone Utilities
    "utc_now",
    "ensure_utc",
    # UUID Generation
    "generate_uuid_v7",
]
