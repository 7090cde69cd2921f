"""Tests for iterate_all and collect_all."""

from unittest.mock import AsyncMock

import pytest

from data_client import (
    GLOBAL,
    PaginatedResponse,
    PaginationOptions,
    ServerError,
    SortOption,
    SuccessApiResponse,
    UserScope,
    collect_all,
    iterate_all,
)


def page(items, next_cursor=None):
    return SuccessApiResponse.create(PaginatedResponse.create(items, next_cursor=next_cursor))


@pytest.fixture
def paged_client():
    client = AsyncMock()
    client.read_all.side_effect = [
        page([1, 2], next_cursor="c1"),
        page([3, 4], next_cursor="c2"),
        page([5]),
    ]
    return client


@pytest.mark.asyncio
async def test_iterate_all_follows_cursors(paged_client):
    sort = [SortOption("title")]
    items = [item async for item in iterate_all(
        paged_client, scope=UserScope("u1"), filter={"status": "draft"}, sort=sort, page_size=2
    )]

    assert items == [1, 2, 3, 4, 5]
    assert paged_client.read_all.await_count == 3

    paginations = [call.kwargs["pagination"] for call in paged_client.read_all.await_args_list]
    assert paginations == [
        PaginationOptions(limit=2),
        PaginationOptions(cursor="c1", limit=2),
        PaginationOptions(cursor="c2", limit=2),
    ]
    for call in paged_client.read_all.await_args_list:
        assert call.kwargs["scope"] == UserScope("u1")
        assert call.kwargs["filter"] == {"status": "draft"}
        assert call.kwargs["sort"] == sort


@pytest.mark.asyncio
async def test_collect_all_single_page():
    client = AsyncMock()
    client.read_all.return_value = page(["only"])

    assert await collect_all(client) == ["only"]
    client.read_all.assert_awaited_once_with(
        scope=GLOBAL, filter=None, pagination=PaginationOptions(), sort=None
    )


@pytest.mark.asyncio
async def test_collect_all_empty():
    client = AsyncMock()
    client.read_all.return_value = page([])
    assert await collect_all(client) == []


@pytest.mark.asyncio
async def test_errors_propagate(paged_client):
    paged_client.read_all.side_effect = [page([1], next_cursor="c1"), ServerError("boom")]

    seen = []
    with pytest.raises(ServerError):
        async for item in iterate_all(paged_client):
            seen.append(item)
    assert seen == [1]
