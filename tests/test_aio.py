from __future__ import annotations

import asyncio
import json
from datetime import datetime

import httpx
import pytest

from fga_sdk.aio import AsyncFgaClient
from fga_sdk.config import ClientConfig
from fga_sdk.errors import (
    ClientNotInitializedError,
    FgaTimeoutError,
    ForbiddenError,
    InvalidRequestError,
    SerializationError,
)
from fga_sdk.models import CheckRequest, CheckResult, ListObjectsRequest, TupleKey

from .helpers import STORE_ID, Recorder, respond_json


def make_client(config: ClientConfig, recorder: Recorder) -> AsyncFgaClient:
    return AsyncFgaClient(config, transport=httpx.MockTransport(recorder))


def anne_views_doc() -> CheckRequest:
    return CheckRequest(user="user:anne", relation="viewer", object="document:1")


@pytest.mark.asyncio
async def test_check_allowed(config: ClientConfig) -> None:
    recorder = Recorder(respond_json(200, {"allowed": True}))
    async with make_client(config, recorder) as client:
        result = await client.check(anne_views_doc())

    assert result == CheckResult(allowed=True)
    assert recorder.last.url.path == f"/stores/{STORE_ID}/check"
    assert recorder.last.headers["Authorization"] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_check_forbidden(config: ClientConfig) -> None:
    recorder = Recorder(respond_json(403, {"code": "forbidden", "message": "denied"}))
    async with make_client(config, recorder) as client:
        with pytest.raises(ForbiddenError) as info:
            await client.check(anne_views_doc())

    assert info.value.status == 403


@pytest.mark.asyncio
async def test_undecodable_body(config: ClientConfig) -> None:
    recorder = Recorder(lambda request: httpx.Response(200, content=b"<html>"))
    async with make_client(config, recorder) as client:
        with pytest.raises(SerializationError):
            await client.check(anne_views_doc())


@pytest.mark.asyncio
async def test_timeout(config: ClientConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("connect timed out", request=request)

    async with make_client(config, Recorder(handler)) as client:
        with pytest.raises(FgaTimeoutError):
            await client.check(anne_views_doc(), timeout=0.5)


@pytest.mark.asyncio
async def test_write_conflict_never_hits_network(config: ClientConfig) -> None:
    recorder = Recorder(respond_json(200, {}))
    fact = TupleKey(user="user:anne", relation="viewer", object="document:1")
    async with make_client(config, recorder) as client:
        with pytest.raises(InvalidRequestError):
            await client.write(writes=[fact], deletes=[fact])

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_write_then_list_objects(config: ClientConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/write"):
            return httpx.Response(200, json={})
        return httpx.Response(200, json={"objects": ["document:1"]})

    recorder = Recorder(handler)
    async with make_client(config, recorder) as client:
        await client.write_tuples([TupleKey(user="user:anne", relation="viewer", object="document:1")])
        result = await client.list_objects(ListObjectsRequest(user="user:anne", relation="viewer", type="document"))

    assert result.objects == ["document:1"]
    assert [request.url.path for request in recorder.requests] == [
        f"/stores/{STORE_ID}/write",
        f"/stores/{STORE_ID}/list-objects",
    ]


@pytest.mark.asyncio
async def test_operations_after_close_fail(config: ClientConfig) -> None:
    recorder = Recorder(respond_json(200, {"allowed": True}))
    client = make_client(config, recorder)
    await client.close()
    await client.close()

    with pytest.raises(ClientNotInitializedError):
        await client.check(anne_views_doc())
    with pytest.raises(ClientNotInitializedError):
        await client.read()
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_concurrent_checks(config: ClientConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        obj = json.loads(request.content)["tuple_key"]["object"]
        return httpx.Response(200, json={"allowed": obj.endswith("7")})

    async with make_client(config, Recorder(handler)) as client:
        results = await asyncio.gather(
            *(
                client.check(CheckRequest(user="user:anne", relation="viewer", object=f"document:{number}"))
                for number in range(20)
            )
        )

    assert [result.allowed for result in results] == [str(number).endswith("7") for number in range(20)]


@pytest.mark.asyncio
async def test_corrupt_compressed_body(config: ClientConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip data")

    async with make_client(config, Recorder(handler)) as client:
        with pytest.raises(SerializationError) as info:
            await client.check(anne_views_doc())

    assert isinstance(info.value.__cause__, httpx.DecodingError)


@pytest.mark.asyncio
async def test_unencodable_context_fails_before_network(config: ClientConfig) -> None:
    recorder = Recorder(respond_json(200, {"allowed": True}))
    request = CheckRequest(
        user="user:anne", relation="viewer", object="document:1", context={"now": datetime(2024, 1, 1)}
    )
    async with make_client(config, recorder) as client:
        with pytest.raises(SerializationError):
            await client.check(request)

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_malformed_tuple_dict_is_rejected(config: ClientConfig) -> None:
    recorder = Recorder(respond_json(200, {}))
    async with make_client(config, recorder) as client:
        with pytest.raises(InvalidRequestError):
            await client.write_tuples([{"user": "", "relation": "viewer", "object": "document:1"}])

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_close_during_request(config: ClientConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = Recorder(respond_json(200, {"allowed": True}))
    client = make_client(config, recorder)
    send = client._client.request

    async def close_then_send(*args, **kwargs):
        await client.close()
        return await send(*args, **kwargs)

    monkeypatch.setattr(client._client, "request", close_then_send)
    with pytest.raises(ClientNotInitializedError) as info:
        await client.check(anne_views_doc())

    assert isinstance(info.value.__cause__, RuntimeError)
    assert recorder.requests == []
