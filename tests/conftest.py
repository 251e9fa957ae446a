from __future__ import annotations

import pytest

from fga_sdk.config import ClientConfig

from .helpers import MODEL_ID, STORE_ID


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig(
        api_url="https://fga.example.com/",
        store_id=STORE_ID,
        authorization_model_id=MODEL_ID,
        api_token="secret-token",
    )
