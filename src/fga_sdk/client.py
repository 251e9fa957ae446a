"""Blocking Python client for the OpenFGA authorization API."""

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


class FgaClient:
    """Typed client for one OpenFGA deployment.

    The client owns a pooled ``httpx.Client`` until :meth:`close`. It keeps
    no mutable state besides that, so one instance can serve many threads.
    Nothing is cached and nothing is retried: every call is one round trip
    and every failure is raised as an :class:`~fga_sdk.errors.FgaError`.
    """

    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=operations.default_headers(config),
            transport=transport,
        )
        self._closed = False

    def __enter__(self) -> "FgaClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientNotInitializedError("FgaClient has been closed")

    def _call(self, build: Callable[..., PreparedCall], *args: Any, timeout: Optional[float] = None) -> Any:
        self._ensure_open()
        call = build(self._config, *args)
        options = operations.request_options(call, timeout)
        # building the call may run caller code that closes the client
        self._ensure_open()

        started = time.perf_counter()
        try:
            response = self._client.request(**options)
        except httpx.RequestError as exc:
            raise operations.transport_failure(call, exc, started) from exc
        except RuntimeError as exc:
            if not self._closed:
                raise
            raise ClientNotInitializedError("FgaClient was closed during the request", cause=exc) from exc
        return operations.complete(call, response, started)

    def check(self, request: CheckRequest, *, timeout: Optional[float] = None) -> CheckResult:
        return self._call(operations.check, request, timeout=timeout)

    def expand(self, request: ExpandRequest, *, timeout: Optional[float] = None) -> ExpandResult:
        return self._call(operations.expand, request, timeout=timeout)

    def list_objects(self, request: ListObjectsRequest, *, timeout: Optional[float] = None) -> ListObjectsResult:
        return self._call(operations.list_objects, request, timeout=timeout)

    def read(self, request: Optional[ReadRequest] = None, *, timeout: Optional[float] = None) -> ReadResult:
        return self._call(operations.read, request, timeout=timeout)

    def write(
        self,
        writes: Sequence[TupleInput] = (),
        deletes: Sequence[TupleInput] = (),
        *,
        timeout: Optional[float] = None,
    ) -> None:
        """Apply ``writes`` and ``deletes`` in one atomic request.

        Raises :class:`~fga_sdk.errors.InvalidRequestError` without sending
        anything when both lists are empty or share a tuple.
        """
        self._call(operations.write, writes, deletes, timeout=timeout)

    def write_tuples(self, tuples: Sequence[TupleInput], *, timeout: Optional[float] = None) -> None:
        self.write(writes=tuples, timeout=timeout)

    def delete_tuples(self, tuples: Sequence[TupleInput], *, timeout: Optional[float] = None) -> None:
        self.write(deletes=tuples, timeout=timeout)

    def list_stores(
        self,
        *,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ListStoresResult:
        return self._call(operations.list_stores, page_size, continuation_token, timeout=timeout)

    def create_store(self, name: str, *, timeout: Optional[float] = None) -> Store:
        return self._call(operations.create_store, name, timeout=timeout)

    def get_store(self, store_id: Optional[str] = None, *, timeout: Optional[float] = None) -> Store:
        return self._call(operations.get_store, store_id, timeout=timeout)

    def delete_store(self, store_id: Optional[str] = None, *, timeout: Optional[float] = None) -> None:
        self._call(operations.delete_store, store_id, timeout=timeout)

    def read_authorization_models(
        self,
        *,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ReadAuthorizationModelsResult:
        return self._call(operations.read_authorization_models, page_size, continuation_token, timeout=timeout)

    def read_authorization_model(
        self, model_id: Optional[str] = None, *, timeout: Optional[float] = None
    ) -> AuthorizationModel:
        return self._call(operations.read_authorization_model, model_id, timeout=timeout)

    def write_authorization_model(
        self,
        model: Union[AuthorizationModelDefinition, Dict[str, Any]],
        *,
        timeout: Optional[float] = None,
    ) -> WriteAuthorizationModelResult:
        return self._call(operations.write_authorization_model, model, timeout=timeout)

    def read_changes(
        self,
        *,
        type: Optional[str] = None,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ReadChangesResult:
        return self._call(operations.read_changes, type, page_size, continuation_token, timeout=timeout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._client.close()


__all__ = ["FgaClient"]
