"""UUIDv7 identifiers for created items and response request ids."""

import time
import uuid

_TIMESTAMP_MASK = (1 << 48) - 1


def generate_uuid_v7() -> str:
    """
    Generate a time-ordered UUIDv7 string.

    The leading 48 bits hold the Unix time in milliseconds, so ids generated
    in different milliseconds sort in creation order.
    """
    timestamp_ms = time.time_ns() // 1_000_000
    random_bits = uuid.uuid4().int

    value = (timestamp_ms & _TIMESTAMP_MASK) << 80
    value |= 0x7 << 76                                  # version
    value |= ((random_bits >> 64) & 0xFFF) << 64        # rand_a
    value |= 0b10 << 62                                 # variant
    value |= random_bits & ((1 << 62) - 1)              # rand_b
    return str(uuid.UUID(int=value))
