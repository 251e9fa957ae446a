from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx

STORE_ID = "01HVMMBCMGZNT3SED4Z17ECXCA"
MODEL_ID = "01HVMMBD123456789ABCDEFGHJ"


class Recorder:
    """Collects requests seen by a MockTransport and answers with a fixed handler."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last.content)


def respond_json(status: int, payload: Any) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    return handler
