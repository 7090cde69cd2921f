"""
HTTP DataClient implementation.

Maps the DataClient contract onto a JSON REST API:

- ``POST   {base}``            create
- ``GET    {base}/{id}``       read
- ``GET    {base}``            read_all (filter, sort, cursor, limit query params)
- ``PUT    {base}/{id}``       update (full replace)
- ``DELETE {base}/{id}``       delete
- ``GET    {base}/count``      count (filter query param)
- ``POST   {base}/aggregate``  aggregate (``{"pipeline": [...]}`` body)

``{base}`` is ``{api_prefix}/{resource}`` for the global scope and
``{api_prefix}/{user_namespace}/{user_id}/{resource}`` for a user scope.
Successful responses are ``{"data": ..., "metadata": {...}}`` envelopes.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import DataClientSettings, get_settings
from ..core.exceptions import (
    DataClientError,
    DataFormatError,
    NetworkError,
    UnknownError,
    exception_for_status,
)
from ..core.value_objects import (
    Filter,
    GLOBAL,
    PaginationOptions,
    Pipeline,
    Scope,
    SortOption,
    UserScope,
)
from ..models import PaginatedResponse, ResponseMetadata, SuccessApiResponse
from ..protocols import DataClient, JsonConverter, T
from .query_params import build_query_params, dumps, encode_filter, encode_pipeline
from .validation import (
    validate_filter,
    validate_id,
    validate_pagination,
    validate_pipeline,
    validate_scope,
    validate_sort,
)

logger = logging.getLogger(__name__)


class HttpDataClient(DataClient[T]):
    """DataClient talking to a REST API through ``httpx.AsyncClient``.

    The client either owns its ``httpx.AsyncClient`` (built from settings and
    closed by ``aclose``) or borrows one supplied by the caller, which stays
    the caller's to close. Timeouts and cancellation are the transport's.
    """

    def __init__(
        self,
        resource: str,
        converter: JsonConverter[T],
        *,
        settings: Optional[DataClientSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            resource: Resource collection name, e.g. ``"headlines"``
            converter: Converter between ``T`` and JSON objects
            settings: Transport settings; falls back to get_settings()
            http_client: Optional pre-configured httpx client to borrow
            headers: Extra headers sent with every request
        """
        resource = (resource or "").strip("/")
        if not resource:
            raise ValueError("resource must be a non-empty path segment")

        self._resource = resource
        self._converter = converter
        self._settings = settings or get_settings()
        self._headers = self._default_headers()
        self._headers.update(headers or {})

        if http_client is None:
            self._http = httpx.AsyncClient(
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                verify=self._settings.verify_ssl,
            )
            self._owns_client = True
        else:
            self._http = http_client
            self._owns_client = False

    def _default_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self._settings.user_agent,
        }
        if self._settings.auth_token:
            headers["Authorization"] = f"Bearer {self._settings.auth_token}"
        return headers

    @property
    def resource(self) -> str:
        return self._resource

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "HttpDataClient[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def resource_path(self, scope: Scope, id: Optional[str] = None, action: Optional[str] = None) -> str:
        """Build the request path for a scope, optional item id and sub-resource."""
        validate_scope(scope)
        prefix = self._settings.api_prefix
        if isinstance(scope, UserScope):
            user_id = quote(scope.user_id, safe="")
            path = f"{prefix}/{self._settings.user_namespace}/{user_id}/{self._resource}"
        else:
            path = f"{prefix}/{self._resource}"
        if id is not None:
            path = f"{path}/{quote(id, safe='')}"
        if action is not None:
            path = f"{path}/{action}"
        return path

    # Transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty)."""
        headers = dict(self._headers)
        if body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s params=%s", method, path, params or {})
        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                content=body,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(
                f"{method} {path} failed: {e}",
                details={"method": method, "path": path, "error_type": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            raise UnknownError(
                f"{method} {path} failed: {e}",
                details={"method": method, "path": path, "error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            error = self._error_from_response(response)
            logger.warning(
                "%s %s returned %d: %s", method, path, response.status_code, error.message
            )
            raise error

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DataFormatError(
                "Response body is not valid JSON",
                details={"method": method, "path": path, "status_code": response.status_code},
            ) from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> DataClientError:
        """Translate an unsuccessful response into the failure taxonomy.

        Reads ``{"error": {"code", "message", "details"}}`` bodies when present.
        """
        message = None
        error_code = None
        details: Dict[str, Any] = {}
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            error = payload["error"]
            message = error.get("message")
            error_code = error.get("code")
            if isinstance(error.get("details"), dict):
                details = dict(error["details"])
        elif response.text:
            message = response.text[:500]

        return exception_for_status(
            response.status_code,
            message=message,
            details=details,
            error_code=error_code,
        )

    # Envelopes

    @staticmethod
    def _unwrap(payload: Any) -> Tuple[Any, ResponseMetadata]:
        if not isinstance(payload, dict) or "data" not in payload:
            raise DataFormatError("Response is not a success envelope")
        try:
            metadata = ResponseMetadata.model_validate(payload.get("metadata") or {})
        except ValidationError as e:
            raise DataFormatError(f"Invalid response metadata: {e}") from e
        return payload["data"], metadata

    def _item_response(self, payload: Any) -> SuccessApiResponse[T]:
        data, metadata = self._unwrap(payload)
        return SuccessApiResponse(data=self._converter.decode(data), metadata=metadata)

    def _encode_item(self, item: T) -> str:
        document = self._converter.encode(item)
        try:
            return dumps(document)
        except (TypeError, ValueError) as e:
            raise DataFormatError(f"Could not serialize item: {e}") from e

    # Operations

    async def create(self, item: T, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        path = self.resource_path(scope)
        payload = await self._request("POST", path, body=self._encode_item(item))
        return self._item_response(payload)

    async def read(self, id: str, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        path = self.resource_path(scope, validate_id(id))
        payload = await self._request("GET", path)
        return self._item_response(payload)

    async def read_all(
        self,
        *,
        scope: Scope = GLOBAL,
        filter: Optional[Filter] = None,
        pagination: Optional[PaginationOptions] = None,
        sort: Optional[Sequence[SortOption]] = None,
    ) -> SuccessApiResponse[PaginatedResponse[T]]:
        params = build_query_params(
            filter=validate_filter(filter),
            pagination=validate_pagination(pagination),
            sort=validate_sort(sort),
        )
        payload = await self._request("GET", self.resource_path(scope), params=params)
        data, metadata = self._unwrap(payload)

        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise DataFormatError("Paginated response is missing an items list")
        try:
            page = PaginatedResponse.model_validate(data)
        except ValidationError as e:
            raise DataFormatError(f"Invalid paginated response: {e}") from e

        items = [self._converter.decode(item) for item in page.items]
        return SuccessApiResponse(
            data=PaginatedResponse.create(items, next_cursor=page.next_cursor, total=page.total),
            metadata=metadata,
        )

    async def update(self, id: str, item: T, *, scope: Scope = GLOBAL) -> SuccessApiResponse[T]:
        path = self.resource_path(scope, validate_id(id))
        payload = await self._request("PUT", path, body=self._encode_item(item))
        return self._item_response(payload)

    async def delete(self, id: str, *, scope: Scope = GLOBAL) -> None:
        path = self.resource_path(scope, validate_id(id))
        await self._request("DELETE", path)

    async def count(
        self,
        *,
        scope: Scope = GLOBAL,
        filter: Optional[Filter] = None,
    ) -> SuccessApiResponse[int]:
        filter = validate_filter(filter)
        params = {"filter": encode_filter(filter)} if filter else None
        payload = await self._request("GET", self.resource_path(scope, action="count"), params=params)
        data, metadata = self._unwrap(payload)
        if isinstance(data, bool) or not isinstance(data, int) or data < 0:
            raise DataFormatError("Count response must be a non-negative integer")
        return SuccessApiResponse(data=data, metadata=metadata)

    async def aggregate(
        self,
        pipeline: Pipeline,
        *,
        scope: Scope = GLOBAL,
    ) -> SuccessApiResponse[List[Dict[str, Any]]]:
        stages = validate_pipeline(pipeline)
        body = encode_pipeline(stages)
        payload = await self._request("POST", self.resource_path(scope, action="aggregate"), body=body)
        data, metadata = self._unwrap(payload)
        if not isinstance(data, list) or not all(isinstance(result, dict) for result in data):
            raise DataFormatError("Aggregate response must be a list of objects")
        return SuccessApiResponse(data=data, metadata=metadata)
