"""Timezone helpers.

Response timestamps are always UTC-aware; servers that send naive
timestamps are taken to mean UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize ``dt`` to UTC.

    Naive values are tagged as UTC; aware values in another zone are
    converted.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
