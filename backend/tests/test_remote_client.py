"""
Storefront Edge API — Remote Data Client Tests
===============================================

What:  Wire-format tests for the PostgREST and Storage calls.
How:   httpx.MockTransport records each request and answers with canned
       JSON; no network access.

What we test:
    ✅ Query parameters (filters, ordering, limit, select)
    ✅ Credential headers per handle
    ✅ Write requests ask for the stored row back
    ✅ Error mapping: non-2xx, missing column, transport failure, timeout
    ✅ Storage upload/list/remove/public URL
"""

import json

import httpx
import pytest

from storefront.exceptions import NotFoundError, RemoteError, SchemaCompatibilityError
from storefront.remote_client import (
    RemoteDataClient,
    RemoteReader,
    create_remote_handles,
)

BASE_URL = "http://store.test"


class Recorder:
    """MockTransport handler that records requests and replays queued answers."""

    def __init__(self, *responses):
        self.requests = []
        self.responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.responses.pop(0) if self.responses else httpx.Response(200, json=[])
        if isinstance(answer, Exception):
            raise answer
        return answer


def make_clients(recorder):
    handles = create_remote_handles(
        base_url=BASE_URL + "/",
        anon_key="anon",
        service_role_key="service",
        client_info="storefront-test",
        transport=httpx.MockTransport(recorder),
    )
    return handles


class TestReader:

    @pytest.mark.asyncio
    async def test_query_builds_postgrest_params(self):
        recorder = Recorder(httpx.Response(200, json=[{"id": 1}]))
        handles = make_clients(recorder)

        rows = await handles.reader.query(
            "products",
            filters={"hidden_on_home": False, "category": "mouse"},
            order=("id", True),
            limit=3,
        )

        assert rows == [{"id": 1}]
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/products"
        assert request.url.params["select"] == "*"
        assert request.url.params["hidden_on_home"] == "eq.false"
        assert request.url.params["category"] == "eq.mouse"
        assert request.url.params["order"] == "id.asc"
        assert request.url.params["limit"] == "3"
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_reader_uses_anon_credentials(self):
        recorder = Recorder()
        handles = make_clients(recorder)

        await handles.reader.query("hero_images", order=("display_order", False))

        request = recorder.requests[0]
        assert request.headers["apikey"] == "anon"
        assert request.headers["authorization"] == "Bearer anon"
        assert request.headers["x-client-info"] == "storefront-test"
        assert request.url.params["order"] == "display_order.desc"
        await handles.aclose()

    def test_reader_has_no_write_methods(self):
        reader = RemoteReader(httpx.AsyncClient(), BASE_URL)
        for method in ("insert", "update", "delete", "upload_blob", "remove_blob"):
            assert not hasattr(reader, method)

    @pytest.mark.asyncio
    async def test_query_one_not_found(self):
        handles = make_clients(Recorder(httpx.Response(200, json=[])))

        with pytest.raises(NotFoundError):
            await handles.reader.query_one("orders", {"order_id": "ORD-1"})
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_error_response_becomes_remote_error(self):
        handles = make_clients(Recorder(
            httpx.Response(500, json={"message": "database is down", "code": "XX000"})
        ))

        with pytest.raises(RemoteError) as exc_info:
            await handles.reader.query("products")
        assert exc_info.value.message == "database is down"
        assert exc_info.value.status == 500
        assert exc_info.value.code == "XX000"
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_remote_error(self):
        handles = make_clients(Recorder(httpx.ConnectError("refused")))

        with pytest.raises(RemoteError, match="unreachable"):
            await handles.reader.query("products")
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_timeout_becomes_remote_error(self):
        handles = make_clients(Recorder(httpx.ReadTimeout("slow")))

        with pytest.raises(RemoteError, match="timed out"):
            await handles.reader.query("products")
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_probe_column_answers(self):
        handles = make_clients(Recorder(
            httpx.Response(200, json=[]),
            httpx.Response(400, json={
                "code": "42703",
                "message": 'column hero_images.show_content does not exist',
            }),
            httpx.ConnectError("refused"),
        ))

        assert await handles.reader.probe_column("hero_images", "show_content") is True
        assert await handles.reader.probe_column("hero_images", "show_content") is False
        assert await handles.reader.probe_column("hero_images", "show_content") is None
        await handles.aclose()

    def test_public_url(self):
        reader = RemoteReader(httpx.AsyncClient(), BASE_URL + "/")
        assert reader.public_url_for("hero-images", "hero 1.png") == (
            "http://store.test/storage/v1/object/public/hero-images/hero%201.png"
        )


class TestAdmin:

    @pytest.mark.asyncio
    async def test_insert_returns_stored_row(self):
        recorder = Recorder(httpx.Response(201, json=[{"id": 11, "name": "Pad"}]))
        handles = make_clients(recorder)

        row = await handles.admin.insert("products", {"name": "Pad"})

        assert row == {"id": 11, "name": "Pad"}
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        assert request.headers["apikey"] == "service"
        assert request.headers["x-client-info"] == "storefront-test-admin"
        assert json.loads(request.content) == {"name": "Pad"}
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_missing_column_becomes_schema_error(self):
        handles = make_clients(Recorder(httpx.Response(400, json={
            "code": "PGRST204",
            "message": "Could not find the 'show_content' column of 'hero_images' in the schema cache",
        })))

        with pytest.raises(SchemaCompatibilityError) as exc_info:
            await handles.admin.insert("hero_images", {"show_content": True})
        assert exc_info.value.table == "hero_images"
        assert exc_info.value.column == "show_content"
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_update_without_rows_is_not_found(self):
        recorder = Recorder(httpx.Response(200, json=[]))
        handles = make_clients(recorder)

        with pytest.raises(NotFoundError):
            await handles.admin.update("orders", {"id": 99}, {"order_status": "shipped"})
        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.99"
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_delete_filters_by_key(self):
        recorder = Recorder(httpx.Response(204))
        handles = make_clients(recorder)

        await handles.admin.delete("product_images", {"product_id": 7})

        request = recorder.requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/rest/v1/product_images"
        assert request.url.params["product_id"] == "eq.7"
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_upload_blob(self):
        recorder = Recorder(httpx.Response(200, json={"Key": "hero-images/hero-1.png"}))
        handles = make_clients(recorder)

        name = await handles.admin.upload_blob("hero-images", "hero-1.png", b"img", "image/png")

        assert name == "hero-1.png"
        request = recorder.requests[0]
        assert request.url.path == "/storage/v1/object/hero-images/hero-1.png"
        assert request.headers["content-type"] == "image/png"
        assert request.headers["cache-control"] == "max-age=3600"
        assert request.headers["x-upsert"] == "false"
        assert request.content == b"img"
        await handles.aclose()

    @pytest.mark.asyncio
    async def test_list_and_remove_blobs(self):
        recorder = Recorder(
            httpx.Response(200, json=[{"name": "a.png"}]),
            httpx.Response(200, json=[{"name": "a.png"}]),
        )
        handles = make_clients(recorder)

        assert await handles.admin.list_blobs("assets", limit=100) == [{"name": "a.png"}]
        await handles.admin.remove_blob("assets", "a.png")

        list_request, remove_request = recorder.requests
        assert list_request.url.path == "/storage/v1/object/list/assets"
        assert json.loads(list_request.content)["limit"] == 100
        assert remove_request.method == "DELETE"
        assert json.loads(remove_request.content) == {"prefixes": ["a.png"]}
        await handles.aclose()

    def test_admin_is_a_reader(self):
        assert issubclass(RemoteDataClient, RemoteReader)
