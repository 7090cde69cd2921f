"""
In-memory DataClient.

Keeps JSON documents per scope and evaluates filters, sorts, cursors and
aggregation pipelines in process. Behaves like a conforming backing server,
which makes it the reference implementation and the test double for code
written against DataClient.
"""
import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import DataClientSettings, get_settings
from ..core.exceptions import BadRequestError, NotFoundError
from ..core.value_objects import (
    Filter,
    GLOBAL,
    PaginationOptions,
    Pipeline,
    Scope,
    SortOption,
)
from ..models import PaginatedResponse, SuccessApiResponse
from ..protocols import DataClient, JsonConverter, T
from ..query import (
    CursorInfo,
    compare_keys,
    compare_values,
    compile_filter,
    run_pipeline,
    sort_documents,
    sort_key_values,
    sort_signature,
)
from ..utils import generate_uuid_v7
from .validation import (
    validate_filter,
    validate_id,
    validate_pagination,
    validate_pipeline,
    validate_scope,
    validate_sort,
)

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class InMemoryDataClient(DataClient[T]):
    """DataClient backed by in-process dictionaries.

    - Items without an id get a UUIDv7; creating a duplicate id in the same
      scope is a BadRequestError.
    - ``update`` is a full replace. An id in the body must match the path id.
    - Without a sort, items are returned in identity (id) order.
    - ``limit`` is capped at ``settings.max_page_size``; pages report ``total``.
    """

    def __init__(
        self,
        converter: JsonConverter[T],
        *,
        id_field: str = "id",
        settings: Optional[DataClientSettings] = None,
        id_factory: Callable[[], str] = generate_uuid_v7,
        initial_data: Optional[Mapping[Scope, Iterable[Document]]] = None,
    ):
        """
        Initialize the in-memory client.

        Args:
            converter: Converter between ``T`` and JSON-like documents
            id_field: Document field holding the item id
            settings: Paging defaults; falls back to get_settings()
            id_factory: Generates ids for items created without one
            initial_data: Documents to preload, keyed by scope
        """
        self._converter = converter
        self._id_field = id_field
        self._settings = settings or get_settings()
        self._id_factory = id_factory
        self._collections: Dict[Scope, Dict[str, Document]] = {}

        for scope, documents in (initial_data or {}).items():
            validate_scope(scope)
            collection = self._collections.setdefault(scope, {})
            for document in documents:
                item_id = validate_id(document.get(id_field))
                collection[item_id] = copy.deepcopy(dict(document))

    def _collection(self, scope: Scope) -> Dict[str, Document]:
        validate_scope(scope)
        return self._collections.setdefault(scope, {})

    def _decode(self, document: Document) -> T:
        return self._converter.decode(copy.deepcopy(document))

    def _encode(self, item: T) -> Document:
        return copy.deepcopy(self._converter.encode(item))

    def _respond(self, data: Any) -> SuccessApiResponse:
        return SuccessApiResponse.create(data, request_id=generate_uuid_v7())

    def _require(self, collection: Dict[str, Document], id: str, scope: Scope) -> Document:
        document = collection.get(id)
        if document is None:
            raise NotFoundError(
                f"Item '{id}' not found",
                details={"id": id, "scope": str(scope)},
            )
        return document

    async def create(self, item: T, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        collection = self._collection(scope)
        document = self._encode(item)

        item_id = document.get(self._id_field)
        if item_id is None or item_id == "":
            item_id = self._id_factory()
            document[self._id_field] = item_id
        else:
            validate_id(item_id)

        if item_id in collection:
            raise BadRequestError(
                f"Item '{item_id}' already exists",
                details={"id": item_id, "scope": str(scope)},
            )

        collection[item_id] = document
        logger.debug("Created %s in %s", item_id, scope)
        return self._respond(self._decode(document))

    async def read(self, id: str, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        validate_id(id)
        document = self._require(self._collection(scope), id, scope)
        return self._respond(self._decode(document))

    def _query(self, scope: Scope, filter: Optional[Filter]) -> List[Document]:
        predicate = compile_filter(validate_filter(filter))
        return [document for document in self._collection(scope).values() if predicate(document)]

    def _after_cursor(self, document: Document, cursor: CursorInfo, sort: Sequence[SortOption]) -> bool:
        result = compare_keys(sort_key_values(document, sort), cursor.last_values, sort)
        if result == 0:
            result = compare_values(document.get(self._id_field), cursor.last_id)
        return result > 0

    def _page_size(self, pagination: Optional[PaginationOptions]) -> int:
        if pagination is None or pagination.limit is None:
            return self._settings.default_page_size
        return min(pagination.limit, self._settings.max_page_size)

    async def read_all(
        self,
        *,
        scope: Scope = GLOBAL,
        filter: Optional[Filter] = None,
        pagination: Optional[PaginationOptions] = None,
        sort: Optional[Sequence[SortOption]] = None,
    ) -> SuccessApiResponse[PaginatedResponse[T]]:
        sort_options = validate_sort(sort)
        pagination = validate_pagination(pagination)

        documents = sort_documents(self._query(scope, filter), sort_options, self._id_field)
        total = len(documents)

        if pagination is not None and pagination.cursor:
            cursor = CursorInfo.decode(pagination.cursor)
            cursor.check_sort(sort_options)
            documents = [
                document for document in documents
                if self._after_cursor(document, cursor, sort_options)
            ]

        limit = self._page_size(pagination)
        page = documents[:limit]

        next_cursor = None
        if len(documents) > limit:
            last = page[-1]
            next_cursor = CursorInfo(
                last_id=last[self._id_field],
                last_values=sort_key_values(last, sort_options),
                sort=sort_signature(sort_options),
            ).encode()

        logger.debug(
            "read_all in %s returned %d of %d items (more=%s)",
            scope, len(page), total, next_cursor is not None,
        )
        items = [self._decode(document) for document in page]
        return self._respond(PaginatedResponse.create(items, next_cursor=next_cursor, total=total))

    async def update(self, id: str, item: T, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        validate_id(id)
        collection = self._collection(scope)
        self._require(collection, id, scope)

        document = self._encode(item)
        body_id = document.get(self._id_field)
        if body_id not in (None, "", id):
            raise BadRequestError(
                f"Item id '{body_id}' does not match path id '{id}'",
                details={"id": id, "body_id": body_id},
            )
        document[self._id_field] = id

        collection[id] = document
        logger.debug("Updated %s in %s", id, scope)
        return self._respond(self._decode(document))

    async def delete(self, id: str, *, scope: Scope = GLOBAL) -> None:
        validate_id(id)
        collection = self._collection(scope)
        self._require(collection, id, scope)
        del collection[id]
        logger.debug("Deleted %s from %s", id, scope)

    async def count(
        self,
        *,
        scope: Scope = GLOBAL,
        filter: Optional[Filter] = None,
    ) -> SuccessApiResponse[int]:
        return self._respond(len(self._query(scope, filter)))

    async def aggregate(
        self,
        pipeline: Pipeline,
        *,
        scope: Scope = GLOBAL,
    ) -> SuccessApiResponse[List[Dict[str, Any]]]:
        stages = validate_pipeline(pipeline)
        documents = list(self._collection(scope).values())
        results = run_pipeline(documents, stages)
        logger.debug("aggregate in %s ran %d stages, %d results", scope, len(stages), len(results))
        return self._respond(results)
