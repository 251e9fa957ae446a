"""Configuration objects for the OpenFGA Python SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from .errors import InvalidConfigurationError

DEFAULT_USER_AGENT = "fga-sdk-python/0.1.0"


@dataclass(frozen=True)
class ClientConfig:
    api_url: str
    store_id: Optional[str] = None
    authorization_model_id: Optional[str] = None
    api_token: Optional[str] = field(default=None, repr=False)
    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.api_url, str) or not self.api_url.strip():
            raise InvalidConfigurationError("api_url must be a non-empty URL")
        try:
            url = httpx.URL(self.api_url.strip())
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"api_url is not a valid URL: {self.api_url!r}", cause=exc) from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidConfigurationError(f"api_url must be an absolute http(s) URL: {self.api_url!r}")

        for name in ("store_id", "authorization_model_id", "api_token"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise InvalidConfigurationError(f"{name} must be a string when set")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise InvalidConfigurationError("timeout must be a positive number of seconds")

        if not isinstance(self.headers, dict) or not all(
            isinstance(key, str) and isinstance(value, str) for key, value in self.headers.items()
        ):
            raise InvalidConfigurationError("headers must map header names to string values")

    @property
    def base_url(self) -> str:
        return self.api_url.strip().rstrip("/")


__all__ = ["ClientConfig", "DEFAULT_USER_AGENT"]
