"""Asyncio client for the OpenFGA authorization API."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Sequence, Union

import httpx

from . import operations
from .config import ClientConfig
from .errors import ClientNotInitializedError
from .models import (
    AuthorizationModel,
    AuthorizationModelDefinition,
    CheckRequest,
    CheckResult,
    ExpandRequest,
    ExpandResult,
    ListObjectsRequest,
    ListObjectsResult,
    ListStoresResult,
    ReadAuthorizationModelsResult,
    ReadChangesResult,
    ReadRequest,
    ReadResult,
    Store,
    WriteAuthorizationModelResult,
)
from .operations import PreparedCall, TupleInput


class AsyncFgaClient:
    """Asyncio counterpart of :class:`~fga_sdk.client.FgaClient`.

    Calls suspend only on the HTTP exchange; concurrent tasks may share one
    instance.
    """

    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=operations.default_headers(config),
            transport=transport,
        )
        self._closed = False

    async def __aenter__(self) -> "AsyncFgaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientNotInitializedError("AsyncFgaClient has been closed")

    async def _call(self, build: Callable[..., PreparedCall], *args: Any, timeout: Optional[float] = None) -> Any:
        self._ensure_open()
        call = build(self._config, *args)
        options = operations.request_options(call, timeout)
        # building the call may run caller code that closes the client
        self._ensure_open()

        started = time.perf_counter()
        try:
            response = await self._client.request(**options)
        except httpx.RequestError as exc:
            raise operations.transport_failure(call, exc, started) from exc
        except RuntimeError as exc:
            if not self._closed:
                raise
            raise ClientNotInitializedError("AsyncFgaClient was closed during the request", cause=exc) from exc
        return operations.complete(call, response, started)

    async def check(self, request: CheckRequest, *, timeout: Optional[float] = None) -> CheckResult:
        return await self._call(operations.check, request, timeout=timeout)

    async def expand(self, request: ExpandRequest, *, timeout: Optional[float] = None) -> ExpandResult:
        return await self._call(operations.expand, request, timeout=timeout)

    async def list_objects(self, request: ListObjectsRequest, *, timeout: Optional[float] = None) -> ListObjectsResult:
        return await self._call(operations.list_objects, request, timeout=timeout)

    async def read(self, request: Optional[ReadRequest] = None, *, timeout: Optional[float] = None) -> ReadResult:
        return await self._call(operations.read, request, timeout=timeout)

    async def write(
        self,
        writes: Sequence[TupleInput] = (),
        deletes: Sequence[TupleInput] = (),
        *,
        timeout: Optional[float] = None,
    ) -> None:
        await self._call(operations.write, writes, deletes, timeout=timeout)

    async def write_tuples(self, tuples: Sequence[TupleInput], *, timeout: Optional[float] = None) -> None:
        await self.write(writes=tuples, timeout=timeout)

    async def delete_tuples(self, tuples: Sequence[TupleInput], *, timeout: Optional[float] = None) -> None:
        await self.write(deletes=tuples, timeout=timeout)

    async def list_stores(
        self,
        *,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ListStoresResult:
        return await self._call(operations.list_stores, page_size, continuation_token, timeout=timeout)

    async def create_store(self, name: str, *, timeout: Optional[float] = None) -> Store:
        return await self._call(operations.create_store, name, timeout=timeout)

    async def get_store(self, store_id: Optional[str] = None, *, timeout: Optional[float] = None) -> Store:
        return await self._call(operations.get_store, store_id, timeout=timeout)

    async def delete_store(self, store_id: Optional[str] = None, *, timeout: Optional[float] = None) -> None:
        await self._call(operations.delete_store, store_id, timeout=timeout)

    async def read_authorization_models(
        self,
        *,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ReadAuthorizationModelsResult:
        return await self._call(operations.read_authorization_models, page_size, continuation_token, timeout=timeout)

    async def read_authorization_model(
        self, model_id: Optional[str] = None, *, timeout: Optional[float] = None
    ) -> AuthorizationModel:
        return await self._call(operations.read_authorization_model, model_id, timeout=timeout)

    async def write_authorization_model(
        self,
        model: Union[AuthorizationModelDefinition, Dict[str, Any]],
        *,
        timeout: Optional[float] = None,
    ) -> WriteAuthorizationModelResult:
        return await self._call(operations.write_authorization_model, model, timeout=timeout)

    async def read_changes(
        self,
        *,
        type: Optional[str] = None,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ReadChangesResult:
        return await self._call(operations.read_changes, type, page_size, continuation_token, timeout=timeout)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()


__all__ = ["AsyncFgaClient"]
