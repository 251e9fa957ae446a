"""OpenFGA Python SDK."""

from .aio import AsyncFgaClient
from .client import FgaClient
from .config import ClientConfig
from .errors import (
    ClientNotInitializedError,
    ErrorKind,
    FgaError,
    FgaTimeoutError,
    ForbiddenError,
    InvalidConfigurationError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    SerializationError,
    ServerError,
    UnauthorizedError,
)
from .models import (
    CheckRequest,
    CheckResult,
    ExpandRequest,
    ExpandResult,
    ListObjectsRequest,
    ListObjectsResult,
    ReadRequest,
    ReadResult,
    TupleKey,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncFgaClient",
    "FgaClient",
    "ClientConfig",
    "CheckRequest",
    "CheckResult",
    "ExpandRequest",
    "ExpandResult",
    "ListObjectsRequest",
    "ListObjectsResult",
    "ReadRequest",
    "ReadResult",
    "TupleKey",
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
]
