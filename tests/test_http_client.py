"""Tests for the HTTP DataClient using httpx.MockTransport."""

import json

import httpx
import pytest

from data_client import (
    BadRequestError,
    DataFormatError,
    ForbiddenError,
    GLOBAL,
    HttpDataClient,
    NetworkError,
    NotFoundError,
    PaginationOptions,
    ServerError,
    SortOption,
    SortOrder,
    UnauthorizedError,
    UnknownError,
    UserScope,
    parse_query_params,
)

from conftest import make_article


def envelope(data, request_id="req-1"):
    return {"data": data, "metadata": {"requestId": request_id, "timestamp": "2024-06-01T12:00:00Z"}}


ARTICLE_JSON = {
    "id": "a1",
    "title": "Hello",
    "status": "published",
    "publishDate": "2024-03-01",
    "tags": ["python"],
    "views": 7,
}


class Recorder:
    """Mock transport handler that records requests and replays a response."""

    def __init__(self, status_code=200, json_body=None, content=None, exc=None):
        self.status_code = status_code
        self.json_body = json_body
        self.content = content
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        if self.json_body is not None:
            return httpx.Response(self.status_code, json=self.json_body)
        return httpx.Response(self.status_code)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(settings, article_converter, handler):
    http = httpx.AsyncClient(base_url=settings.base_url, transport=httpx.MockTransport(handler))
    return HttpDataClient("headlines", article_converter, settings=settings, http_client=http)


class TestPaths:
    def test_global_and_user_paths(self, settings, article_converter):
        client = make_client(settings, article_converter, Recorder())

        assert client.resource_path(GLOBAL) == "/api/v1/data/headlines"
        assert client.resource_path(GLOBAL, "a1") == "/api/v1/data/headlines/a1"
        assert client.resource_path(UserScope("u1")) == "/api/v1/data/users/u1/headlines"
        assert client.resource_path(UserScope("u1"), action="count") == "/api/v1/data/users/u1/headlines/count"

    def test_path_segments_are_quoted(self, settings, article_converter):
        client = make_client(settings, article_converter, Recorder())
        assert client.resource_path(UserScope("a/b"), "x y") == "/api/v1/data/users/a%2Fb/headlines/x%20y"

    def test_resource_required(self, settings, article_converter):
        with pytest.raises(ValueError):
            HttpDataClient("/", article_converter, settings=settings)


class TestOperations:
    @pytest.mark.asyncio
    async def test_create_posts_body(self, settings, article_converter):
        recorder = Recorder(201, envelope(ARTICLE_JSON))
        client = make_client(settings, article_converter, recorder)

        response = await client.create(make_article("Hello", views=7), scope=UserScope("u1"))

        request = recorder.last
        assert request.method == "POST"
        assert request.url.path == "/api/v1/data/users/u1/headlines"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["user-agent"] == "data-client-tests/1.0"
        assert json.loads(request.content)["title"] == "Hello"
        assert response.data.id == "a1"
        assert response.metadata.request_id == "req-1"
        assert response.metadata.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_read(self, settings, article_converter):
        recorder = Recorder(200, envelope(ARTICLE_JSON))
        client = make_client(settings, article_converter, recorder)

        response = await client.read("a1")

        assert recorder.last.method == "GET"
        assert recorder.last.url.path == "/api/v1/data/headlines/a1"
        assert response.data.title == "Hello"
        assert response.data.publish_date == "2024-03-01"

    @pytest.mark.asyncio
    async def test_read_all_sends_query_params(self, settings, article_converter):
        page = {"items": [ARTICLE_JSON], "nextCursor": "abc", "total": 4}
        recorder = Recorder(200, envelope(page))
        client = make_client(settings, article_converter, recorder)

        response = await client.read_all(
            filter={"status": "published"},
            sort=[SortOption("publishDate", SortOrder.DESC), SortOption("title")],
            pagination=PaginationOptions(cursor="prev", limit=2),
        )

        params = dict(recorder.last.url.params)
        assert params == {
            "filter": '{"status":"published"}',
            "sort": "publishDate:desc,title:asc",
            "cursor": "prev",
            "limit": "2",
        }
        filter, pagination, sort = parse_query_params(params)
        assert filter == {"status": "published"}
        assert pagination == PaginationOptions(cursor="prev", limit=2)
        assert [str(option) for option in sort] == ["publishDate:desc", "title:asc"]

        assert [a.id for a in response.data.items] == ["a1"]
        assert response.data.next_cursor == "abc"
        assert response.data.has_more is True
        assert response.data.total == 4

    @pytest.mark.asyncio
    async def test_read_all_without_arguments_sends_no_params(self, settings, article_converter):
        recorder = Recorder(200, envelope({"items": []}))
        client = make_client(settings, article_converter, recorder)

        response = await client.read_all()

        assert dict(recorder.last.url.params) == {}
        assert response.data.items == []
        assert response.data.has_more is False

    @pytest.mark.asyncio
    async def test_update_puts_body(self, settings, article_converter):
        recorder = Recorder(200, envelope(ARTICLE_JSON))
        client = make_client(settings, article_converter, recorder)

        await client.update("a1", make_article("Hello", id="a1"))

        assert recorder.last.method == "PUT"
        assert recorder.last.url.path == "/api/v1/data/headlines/a1"
        assert json.loads(recorder.last.content)["id"] == "a1"

    @pytest.mark.asyncio
    async def test_delete_accepts_no_content(self, settings, article_converter):
        recorder = Recorder(204)
        client = make_client(settings, article_converter, recorder)

        assert await client.delete("a1", scope=UserScope("u2")) is None
        assert recorder.last.method == "DELETE"
        assert recorder.last.url.path == "/api/v1/data/users/u2/headlines/a1"

    @pytest.mark.asyncio
    async def test_count(self, settings, article_converter):
        recorder = Recorder(200, envelope(12))
        client = make_client(settings, article_converter, recorder)

        response = await client.count(filter={"views": {"$gt": 3}})

        assert response.data == 12
        assert recorder.last.url.path == "/api/v1/data/headlines/count"
        assert json.loads(recorder.last.url.params["filter"]) == {"views": {"$gt": 3}}

    @pytest.mark.asyncio
    async def test_aggregate_posts_pipeline(self, settings, article_converter):
        results = [{"_id": "published", "count": 3}]
        recorder = Recorder(200, envelope(results))
        client = make_client(settings, article_converter, recorder)
        pipeline = [{"$match": {"status": "published"}}, {"$group": {"_id": "$status", "count": {"$sum": 1}}}]

        response = await client.aggregate(pipeline)

        assert recorder.last.method == "POST"
        assert recorder.last.url.path == "/api/v1/data/headlines/aggregate"
        assert json.loads(recorder.last.content) == {"pipeline": pipeline}
        assert response.data == results

    @pytest.mark.asyncio
    async def test_auth_and_extra_headers(self, settings, article_converter):
        settings.auth_token = "secret"
        recorder = Recorder(200, envelope(ARTICLE_JSON))
        http = httpx.AsyncClient(base_url=settings.base_url, transport=httpx.MockTransport(recorder))
        client = HttpDataClient(
            "headlines", article_converter, settings=settings, http_client=http, headers={"X-Tenant": "t1"}
        )

        await client.read("a1")

        assert recorder.last.headers["authorization"] == "Bearer secret"
        assert recorder.last.headers["x-tenant"] == "t1"

    @pytest.mark.asyncio
    async def test_invalid_arguments_fail_before_sending(self, settings, article_converter):
        recorder = Recorder(200, envelope(ARTICLE_JSON))
        client = make_client(settings, article_converter, recorder)

        with pytest.raises(BadRequestError):
            await client.read("")
        with pytest.raises(BadRequestError):
            await client.delete("..")
        with pytest.raises(BadRequestError):
            await client.update(".", make_article("Dot"))
        with pytest.raises(BadRequestError):
            await client.read_all(sort="title")
        with pytest.raises(BadRequestError):
            await client.aggregate({"$match": {}})
        assert recorder.requests == []


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,exception_class", [
        (400, BadRequestError),
        (422, BadRequestError),
        (401, UnauthorizedError),
        (403, ForbiddenError),
        (404, NotFoundError),
        (500, ServerError),
        (503, ServerError),
        (409, UnknownError),
        (302, UnknownError),
    ])
    async def test_status_mapping(self, settings, article_converter, status_code, exception_class):
        client = make_client(settings, article_converter, Recorder(status_code, content=b"nope"))

        with pytest.raises(exception_class) as exc_info:
            await client.read("a1")

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_error_body_is_parsed(self, settings, article_converter):
        body = {"error": {"code": "ITEM_MISSING", "message": "no such headline", "details": {"id": "a1"}}}
        client = make_client(settings, article_converter, Recorder(404, body))

        with pytest.raises(NotFoundError) as exc_info:
            await client.read("a1")

        assert exc_info.value.message == "no such headline"
        assert exc_info.value.error_code == "ITEM_MISSING"
        assert exc_info.value.details["id"] == "a1"

    @pytest.mark.asyncio
    async def test_server_errors_are_retryable(self, settings, article_converter):
        client = make_client(settings, article_converter, Recorder(502, content=b"bad gateway"))
        with pytest.raises(ServerError) as exc_info:
            await client.count()
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self, settings, article_converter):
        client = make_client(settings, article_converter, Recorder(exc=httpx.ConnectError("refused")))

        with pytest.raises(NetworkError) as exc_info:
            await client.read("a1")

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self, settings, article_converter):
        client = make_client(settings, article_converter, Recorder(exc=httpx.ReadTimeout("slow")))
        with pytest.raises(NetworkError):
            await client.read_all()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response_kwargs", [
        {"content": b"<html>not json</html>"},
        {"json_body": {"items": []}},
        {"json_body": ["a", "b"]},
        {"json_body": envelope({"title": 5})},
    ])
    async def test_bad_item_payloads(self, settings, article_converter, response_kwargs):
        client = make_client(settings, article_converter, Recorder(200, **response_kwargs))
        with pytest.raises(DataFormatError):
            await client.read("a1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [
        {"items": "nope"},
        {"nextCursor": "x"},
        {"items": [{"views": "many"}]},
        [],
    ])
    async def test_bad_page_payloads(self, settings, article_converter, data):
        client = make_client(settings, article_converter, Recorder(200, envelope(data)))
        with pytest.raises(DataFormatError):
            await client.read_all()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [-1, "3", True, None])
    async def test_bad_count_payloads(self, settings, article_converter, data):
        client = make_client(settings, article_converter, Recorder(200, envelope(data)))
        with pytest.raises(DataFormatError):
            await client.count()

    @pytest.mark.asyncio
    async def test_bad_aggregate_payload(self, settings, article_converter):
        client = make_client(settings, article_converter, Recorder(200, envelope([1, 2])))
        with pytest.raises(DataFormatError):
            await client.aggregate([])


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_borrowed_client_is_not_closed(self, settings, article_converter):
        http = httpx.AsyncClient(base_url=settings.base_url, transport=httpx.MockTransport(Recorder()))
        async with HttpDataClient("headlines", article_converter, settings=settings, http_client=http):
            pass
        assert http.is_closed is False
        await http.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, settings, article_converter):
        client = HttpDataClient("headlines", article_converter, settings=settings)
        await client.aclose()
        assert client._http.is_closed is True
