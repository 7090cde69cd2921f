"""Tests for timezone and UUID helpers."""

import uuid
from datetime import datetime, timedelta, timezone

from data_client.utils import ensure_utc, generate_uuid_v7, utc_now


def test_utc_now_is_aware():
    assert utc_now().utcoffset() == timedelta(0)


def test_ensure_utc_tags_naive_values():
    naive = datetime(2024, 3, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_ensure_utc_converts_other_zones():
    plus_two = datetime(2024, 3, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    converted = ensure_utc(plus_two)
    assert converted.tzinfo == timezone.utc
    assert converted.hour == 12


def test_uuid_v7_layout():
    value = uuid.UUID(generate_uuid_v7())
    assert value.version == 7
    assert value.variant == uuid.RFC_4122


def test_uuid_v7_embeds_current_time():
    before = int(datetime.now(timezone.utc).timestamp() * 1000)
    value = uuid.UUID(generate_uuid_v7())
    after = int(datetime.now(timezone.utc).timestamp() * 1000)
    assert before - 1 <= value.int >> 80 <= after + 1


def test_uuid_v7_is_unique():
    assert len({generate_uuid_v7() for _ in range(100)}) == 100
