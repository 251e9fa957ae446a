"""Error taxonomy for the OpenFGA client and the HTTP status mapper."""

from __future__ import annotations

import json
from enum import Enum
from typing import Optional, Type, Union

import httpx

_MAX_MESSAGE_CHARS = 512


class ErrorKind(str, Enum):
    INVALID_CONFIGURATION = "invalid_configuration"
    CLIENT_NOT_INITIALIZED = "client_not_initialized"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    SERIALIZATION_ERROR = "serialization_error"


class FgaError(Exception):
    """Base class for every error raised by the client.

    ``status`` is the HTTP status when the service answered, ``code`` the
    OpenFGA error code from the response body when one was present, and
    ``cause`` the underlying exception for transport and decode failures.
    """

    kind: ErrorKind = ErrorKind.SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


class InvalidConfigurationError(FgaError):
    kind = ErrorKind.INVALID_CONFIGURATION


class InvalidRequestError(InvalidConfigurationError):
    """A request was rejected locally, before anything was sent."""


class ClientNotInitializedError(FgaError):
    kind = ErrorKind.CLIENT_NOT_INITIALIZED


class UnauthorizedError(FgaError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(FgaError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(FgaError):
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(FgaError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, *, retry_after: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(FgaError):
    kind = ErrorKind.SERVER_ERROR


class NetworkError(FgaError):
    kind = ErrorKind.NETWORK_ERROR


class FgaTimeoutError(FgaError):
    kind = ErrorKind.TIMEOUT


class SerializationError(FgaError):
    kind = ErrorKind.SERIALIZATION_ERROR


_STATUS_ERRORS: dict[int, Type[FgaError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitedError,
}


def _describe_body(body: Union[bytes, str, None]) -> tuple[Optional[str], Optional[str]]:
    if not body:
        return None, None
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        data = json.loads(text)
    except ValueError:
        return None, text[:_MAX_MESSAGE_CHARS]
    if isinstance(data, dict):
        code = data.get("code")
        message = data.get("message")
        return (str(code) if code is not None else None), (str(message) if message is not None else None)
    return None, text[:_MAX_MESSAGE_CHARS]


def map_status(
    status: int,
    body: Union[bytes, str, None] = None,
    *,
    retry_after: Optional[str] = None,
) -> FgaError:
    """Translate a non-2xx HTTP answer into an error instance.

    Statuses outside the fixed table, 5xx and unlisted 4xx alike, map to
    :class:`ServerError`.
    """
    code, detail = _describe_body(body)
    error_cls = _STATUS_ERRORS.get(status, ServerError)
    message = f"OpenFGA responded with HTTP {status}"
    if detail:
        message = f"{message}: {detail}"
    if error_cls is RateLimitedError:
        return RateLimitedError(message, status=status, code=code, retry_after=retry_after)
    return error_cls(message, status=status, code=code)


def map_transport_error(exc: httpx.RequestError) -> FgaError:
    if isinstance(exc, httpx.TimeoutException):
        return FgaTimeoutError(f"OpenFGA request timed out: {exc}", cause=exc)
    if isinstance(exc, httpx.DecodingError):
        return SerializationError(f"OpenFGA response could not be decoded: {exc}", cause=exc)
    return NetworkError(f"OpenFGA request failed: {type(exc).__name__}: {exc}", cause=exc)


__all__ = [
    "ErrorKind",
    "FgaError",
    "InvalidConfigurationError",
    "InvalidRequestError",
    "ClientNotInitializedError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "NetworkError",
    "FgaTimeoutError",
    "SerializationError",
    "map_status",
    "map_transport_error",
]
