"""Tests for response envelopes and converters."""

from datetime import datetime, timezone

import pytest

from data_client import (
    DataFormatError,
    JsonConverter,
    PaginatedResponse,
    ResponseMetadata,
    SuccessApiResponse,
)
from conftest import Article


class TestEnvelopes:
    """Test SuccessApiResponse and PaginatedResponse."""

    def test_success_response_create(self):
        response = SuccessApiResponse.create({"id": "a1"}, request_id="req-1")
        assert response.data == {"id": "a1"}
        assert response.metadata.request_id == "req-1"
        assert response.metadata.timestamp.tzinfo is not None

    def test_metadata_normalizes_naive_timestamps_to_utc(self):
        metadata = ResponseMetadata(timestamp=datetime(2024, 1, 1, 12, 0))
        assert metadata.timestamp == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_metadata_parses_wire_names(self):
        metadata = ResponseMetadata.model_validate(
            {"requestId": "abc", "timestamp": "2024-06-01T10:00:00Z"}
        )
        assert metadata.request_id == "abc"
        assert metadata.timestamp.year == 2024

    def test_has_more_follows_next_cursor(self):
        assert PaginatedResponse.create([1, 2], next_cursor="c1").has_more is True
        assert PaginatedResponse.create([1, 2]).has_more is False

    def test_paginated_wire_shape(self):
        page = PaginatedResponse.create(["a"], next_cursor="c1", total=3)
        assert page.to_wire() == {
            "items": ["a"],
            "nextCursor": "c1",
            "total": 3,
            "hasMore": True,
        }

    def test_paginated_parses_wire_shape(self):
        page = PaginatedResponse.model_validate(
            {"items": [{"id": "a"}], "nextCursor": None, "hasMore": False}
        )
        assert page.items == [{"id": "a"}]
        assert page.next_cursor is None
        assert page.total is None

    def test_nested_envelope(self):
        response = SuccessApiResponse.create(PaginatedResponse.create(["x"]))
        assert response.data.items == ["x"]
        wire = response.to_wire()
        assert wire["data"]["hasMore"] is False
        assert "requestId" in wire["metadata"]


class TestJsonConverter:
    """Test converter binding and format failures."""

    def test_for_model_round_trip(self):
        converter = JsonConverter.for_model(Article)
        article = Article(id="a1", title="Hello", publish_date="2024-01-01")
        payload = converter.encode(article)
        assert payload["publishDate"] == "2024-01-01"
        assert converter.decode(payload) == article

    def test_decode_invalid_shape_raises_format_error(self):
        converter = JsonConverter.for_model(Article)
        with pytest.raises(DataFormatError):
            converter.decode({"views": "many"})

    def test_decode_non_object_raises_format_error(self):
        converter = JsonConverter.for_model(Article)
        with pytest.raises(DataFormatError) as exc_info:
            converter.decode(["not", "an", "object"])
        assert exc_info.value.details["payload_type"] == "list"

    def test_plain_function_converter(self):
        converter = JsonConverter(
            from_json=lambda payload: (payload["id"], payload["name"]),
            to_json=lambda item: {"id": item[0], "name": item[1]},
        )
        assert converter.encode(("1", "x")) == {"id": "1", "name": "x"}
        with pytest.raises(DataFormatError):
            converter.decode({"id": "1"})

    def test_encode_must_return_dict(self):
        converter = JsonConverter(from_json=dict, to_json=lambda item: [item])
        with pytest.raises(DataFormatError):
            converter.encode("x")
