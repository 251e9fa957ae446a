"""Request builders and response handling shared by the sync and async clients.

Each builder turns typed inputs plus the client configuration into a
:class:`PreparedCall` without touching the network. The clients execute the
call over their transport and hand the response back to
:func:`handle_response`.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .config import ClientConfig
from .errors import (
    FgaError,
    InvalidConfigurationError,
    InvalidRequestError,
    SerializationError,
    map_status,
    map_transport_error,
)
from .metrics import observe_request
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
    TupleKey,
    WriteAuthorizationModelResult,
)

logger = logging.getLogger(__name__)

TupleInput = Union[TupleKey, Dict[str, Any]]


@dataclass(frozen=True)
class PreparedCall:
    operation: str
    method: str
    path: str
    decode: Callable[[Any], Any]
    json: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


def default_headers(config: ClientConfig) -> Dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": config.user_agent,
    }
    if config.api_token:
        headers["Authorization"] = f"Bearer {config.api_token}"
    headers.update(config.headers)
    return headers


def resolve_timeout(timeout: Optional[float]) -> Any:
    if timeout is None:
        return httpx.USE_CLIENT_DEFAULT
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise InvalidRequestError("timeout must be a positive number of seconds")
    return timeout


def _segment(value: str) -> str:
    return quote(value, safe="")


def _store_path(config: ClientConfig, operation: str, store_id: Optional[str] = None) -> str:
    resolved = store_id or config.store_id
    if not resolved:
        raise InvalidConfigurationError(f"store_id is required for {operation}")
    return f"/stores/{_segment(resolved)}"


def _params(**values: Any) -> Optional[Dict[str, Any]]:
    params = {key: value for key, value in values.items() if value is not None}
    return params or None


def _with_model_id(config: ClientConfig, body: Dict[str, Any]) -> Dict[str, Any]:
    if config.authorization_model_id:
        body["authorization_model_id"] = config.authorization_model_id
    return body


def _tuple_key_list(tuples: Iterable[TupleKey], *, with_condition: bool = True) -> Dict[str, Any]:
    exclude = None if with_condition else {"condition"}
    return {"tuple_keys": [key.model_dump(exclude_none=True, exclude=exclude) for key in tuples]}


def _add_query_options(body: Dict[str, Any], request: Any) -> Dict[str, Any]:
    contextual = getattr(request, "contextual_tuples", None)
    if contextual:
        body["contextual_tuples"] = _tuple_key_list(contextual)
    context = getattr(request, "context", None)
    if context is not None:
        body["context"] = context
    if request.consistency is not None:
        body["consistency"] = request.consistency.value
    return body


def _ignore_body(_data: Any) -> None:
    return None


def coerce_tuples(tuples: Iterable[TupleInput]) -> list[TupleKey]:
    try:
        return [key if isinstance(key, TupleKey) else TupleKey.model_validate(key) for key in tuples]
    except ValidationError as exc:
        raise InvalidRequestError(f"invalid tuple key: {exc}", cause=exc) from exc


def check(config: ClientConfig, request: CheckRequest) -> PreparedCall:
    body: Dict[str, Any] = {
        "tuple_key": {"user": request.user, "relation": request.relation, "object": request.object},
    }
    _with_model_id(config, body)
    _add_query_options(body, request)
    return PreparedCall(
        operation="check",
        method="POST",
        path=f"{_store_path(config, 'check')}/check",
        json=body,
        decode=CheckResult.model_validate,
    )


def expand(config: ClientConfig, request: ExpandRequest) -> PreparedCall:
    body: Dict[str, Any] = {"tuple_key": {"relation": request.relation, "object": request.object}}
    _with_model_id(config, body)
    _add_query_options(body, request)
    return PreparedCall(
        operation="expand",
        method="POST",
        path=f"{_store_path(config, 'expand')}/expand",
        json=body,
        decode=ExpandResult.model_validate,
    )


def list_objects(config: ClientConfig, request: ListObjectsRequest) -> PreparedCall:
    body: Dict[str, Any] = {"type": request.type, "relation": request.relation, "user": request.user}
    _with_model_id(config, body)
    _add_query_options(body, request)
    return PreparedCall(
        operation="list_objects",
        method="POST",
        path=f"{_store_path(config, 'list_objects')}/list-objects",
        json=body,
        decode=ListObjectsResult.model_validate,
    )


def read(config: ClientConfig, request: Optional[ReadRequest] = None) -> PreparedCall:
    request = request or ReadRequest()
    body: Dict[str, Any] = {}
    tuple_key = request.model_dump(include={"user", "relation", "object"}, exclude_none=True)
    if tuple_key:
        body["tuple_key"] = tuple_key
    if request.page_size is not None:
        body["page_size"] = request.page_size
    if request.continuation_token:
        body["continuation_token"] = request.continuation_token
    _add_query_options(body, request)
    return PreparedCall(
        operation="read",
        method="POST",
        path=f"{_store_path(config, 'read')}/read",
        json=body,
        decode=ReadResult.model_validate,
    )


def write(
    config: ClientConfig,
    writes: Sequence[TupleInput] = (),
    deletes: Sequence[TupleInput] = (),
) -> PreparedCall:
    """Build an atomic write. Conflicting or empty writes never reach the network."""
    writes = coerce_tuples(writes)
    deletes = coerce_tuples(deletes)
    if not writes and not deletes:
        raise InvalidRequestError("write requires at least one tuple to write or delete")
    conflicting = {key.identity for key in writes} & {key.identity for key in deletes}
    if conflicting:
        listed = ", ".join(sorted(f"{obj}#{rel}@{user}" for user, rel, obj in conflicting))
        raise InvalidRequestError(f"tuples cannot be both written and deleted in one request: {listed}")

    body: Dict[str, Any] = {}
    if writes:
        body["writes"] = _tuple_key_list(writes)
    if deletes:
        body["deletes"] = _tuple_key_list(deletes, with_condition=False)
    _with_model_id(config, body)
    return PreparedCall(
        operation="write",
        method="POST",
        path=f"{_store_path(config, 'write')}/write",
        json=body,
        decode=_ignore_body,
    )


def list_stores(
    config: ClientConfig,
    page_size: Optional[int] = None,
    continuation_token: Optional[str] = None,
) -> PreparedCall:
    return PreparedCall(
        operation="list_stores",
        method="GET",
        path="/stores",
        params=_params(page_size=page_size, continuation_token=continuation_token or None),
        decode=ListStoresResult.model_validate,
    )


def create_store(config: ClientConfig, name: str) -> PreparedCall:
    if not isinstance(name, str) or not name.strip():
        raise InvalidRequestError("store name must be a non-empty string")
    return PreparedCall(
        operation="create_store",
        method="POST",
        path="/stores",
        json={"name": name},
        decode=Store.model_validate,
    )


def get_store(config: ClientConfig, store_id: Optional[str] = None) -> PreparedCall:
    return PreparedCall(
        operation="get_store",
        method="GET",
        path=_store_path(config, "get_store", store_id),
        decode=Store.model_validate,
    )


def delete_store(config: ClientConfig, store_id: Optional[str] = None) -> PreparedCall:
    return PreparedCall(
        operation="delete_store",
        method="DELETE",
        path=_store_path(config, "delete_store", store_id),
        decode=_ignore_body,
    )


def read_authorization_models(
    config: ClientConfig,
    page_size: Optional[int] = None,
    continuation_token: Optional[str] = None,
) -> PreparedCall:
    return PreparedCall(
        operation="read_authorization_models",
        method="GET",
        path=f"{_store_path(config, 'read_authorization_models')}/authorization-models",
        params=_params(page_size=page_size, continuation_token=continuation_token or None),
        decode=ReadAuthorizationModelsResult.model_validate,
    )


def _decode_authorization_model(data: Any) -> AuthorizationModel:
    if not isinstance(data, dict) or "authorization_model" not in data:
        raise ValueError("response has no authorization_model")
    return AuthorizationModel.model_validate(data["authorization_model"])


def read_authorization_model(config: ClientConfig, model_id: Optional[str] = None) -> PreparedCall:
    resolved = model_id or config.authorization_model_id
    if not resolved:
        raise InvalidConfigurationError("authorization_model_id is required for read_authorization_model")
    store_path = _store_path(config, "read_authorization_model")
    return PreparedCall(
        operation="read_authorization_model",
        method="GET",
        path=f"{store_path}/authorization-models/{_segment(resolved)}",
        decode=_decode_authorization_model,
    )


def write_authorization_model(
    config: ClientConfig,
    model: Union[AuthorizationModelDefinition, Dict[str, Any]],
) -> PreparedCall:
    if not isinstance(model, AuthorizationModelDefinition):
        try:
            model = AuthorizationModelDefinition.model_validate(model)
        except ValidationError as exc:
            raise InvalidRequestError(f"invalid authorization model: {exc}", cause=exc) from exc
    return PreparedCall(
        operation="write_authorization_model",
        method="POST",
        path=f"{_store_path(config, 'write_authorization_model')}/authorization-models",
        json=model.model_dump(exclude_none=True),
        decode=WriteAuthorizationModelResult.model_validate,
    )


def read_changes(
    config: ClientConfig,
    type: Optional[str] = None,
    page_size: Optional[int] = None,
    continuation_token: Optional[str] = None,
) -> PreparedCall:
    return PreparedCall(
        operation="read_changes",
        method="GET",
        path=f"{_store_path(config, 'read_changes')}/changes",
        params=_params(type=type or None, page_size=page_size, continuation_token=continuation_token or None),
        decode=ReadChangesResult.model_validate,
    )


def handle_response(call: PreparedCall, response: httpx.Response) -> Any:
    """Map a completed HTTP exchange to the call's typed result or raise."""
    if not response.is_success:
        error = map_status(
            response.status_code,
            response.content,
            retry_after=response.headers.get("Retry-After"),
        )
        logger.warning(
            "OpenFGA %s failed status=%s code=%s",
            call.operation,
            response.status_code,
            error.code,
        )
        raise error

    try:
        data = response.json() if response.content else {}
        return call.decode(data)
    except ValueError as exc:
        logger.warning("OpenFGA %s returned an undecodable body: %s", call.operation, exc)
        raise SerializationError(
            f"could not decode {call.operation} response: {exc}",
            status=response.status_code,
            cause=exc,
        ) from exc


def encode_body(call: PreparedCall) -> Optional[bytes]:
    if call.json is None:
        return None
    try:
        return json.dumps(call.json, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"could not encode {call.operation} request: {exc}", cause=exc) from exc


def request_options(call: PreparedCall, timeout: Optional[float]) -> Dict[str, Any]:
    """Keyword arguments for ``request()`` on either httpx client.

    Raises before any I/O when the timeout or the body is unusable.
    """
    options = {
        "method": call.method,
        "url": call.path,
        "params": call.params,
        "content": encode_body(call),
        "timeout": resolve_timeout(timeout),
    }
    logger.debug("OpenFGA %s %s %s", call.operation, call.method, call.path)
    return options


def transport_failure(call: PreparedCall, exc: httpx.RequestError, started: float) -> FgaError:
    error = map_transport_error(exc)
    logger.warning("OpenFGA %s transport failure: %s", call.operation, type(exc).__name__)
    observe_request(call.operation, error.kind.value, time.perf_counter() - started)
    return error


def complete(call: PreparedCall, response: httpx.Response, started: float) -> Any:
    try:
        result = handle_response(call, response)
    except FgaError as exc:
        observe_request(call.operation, exc.kind.value, time.perf_counter() - started)
        raise
    observe_request(call.operation, "ok", time.perf_counter() - started)
    return result


__all__ = [
    "PreparedCall",
    "TupleInput",
    "check",
    "coerce_tuples",
    "complete",
    "create_store",
    "default_headers",
    "delete_store",
    "encode_body",
    "expand",
    "get_store",
    "handle_response",
    "request_options",
    "transport_failure",
    "list_objects",
    "list_stores",
    "read",
    "read_authorization_model",
    "read_authorization_models",
    "read_changes",
    "resolve_timeout",
    "write",
    "write_authorization_model",
]
