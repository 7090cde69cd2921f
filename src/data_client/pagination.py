"""
Helpers for walking every page of a read_all listing.
"""
from typing import AsyncIterator, List, Optional, Sequence

from .core.value_objects import Filter, GLOBAL, PaginationOptions, Scope, SortOption
from .protocols import DataClient, T


async def iterate_all(
    client: DataClient[T],
    *,
    scope: Scope = GLOBAL,
    filter: Optional[Filter] = None,
    sort: Optional[Sequence[SortOption]] = None,
    page_size: Optional[int] = None,
) -> AsyncIterator[T]:
    """Yield every matching item, following ``next_cursor`` until it is absent.

    The filter and sort are held fixed across pages so each cursor is
    resubmitted under the query it was issued for.
    """
    pagination = PaginationOptions(limit=page_size)
    while True:
        response = await client.read_all(scope=scope, filter=filter, pagination=pagination, sort=sort)
        page = response.data
        for item in page.items:
            yield item
        if page.next_cursor is None:
            return
        pagination = pagination.next(page.next_cursor)


async def collect_all(
    client: DataClient[T],
    *,
    scope: Scope = GLOBAL,
    filter: Optional[Filter] = None,
    sort: Optional[Sequence[SortOption]] = None,
    page_size: Optional[int] = None,
) -> List[T]:
    """Collect every matching item into a list."""
    return [
        item async for item in iterate_all(
            client, scope=scope, filter=filter, sort=sort, page_size=page_size
        )
    ]
