"""Pytest fixtures for provider tests."""

import hashlib
import hmac
import json
from typing import Any
from urllib.parse import parse_qsl

import httpx
import pytest
import pytest_asyncio

from paybridge.core.config import Settings

SECRET_FIELDS = (
    "stripe_secret_key",
    "stripe_webhook_secret",
    "lemonsqueezy_api_key",
    "lemonsqueezy_store_id",
    "lemonsqueezy_webhook_secret",
    "polar_access_token",
    "polar_webhook_secret",
    "creem_api_key",
    "creem_webhook_secret",
    "dodo_payments_api_key",
    "dodo_payments_webhook_secret",
    "tap_secret_key",
    "tap_webhook_secret",
)


class FakeProviderAPI:
    """Records outbound requests and answers with canned JSON."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: dict[tuple[str, str], tuple[int, Any]] = {}

    def add(self, method: str, path: str, status: int = 200, json: Any = None) -> None:
        self._responses[(method, path)] = (status, json if json is not None else {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self._responses.get(
            (request.method, request.url.path),
            (404, {"error": "no route"}),
        )
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def json_body(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def form_body(self, index: int = -1) -> dict[str, str]:
        return dict(parse_qsl(self.requests[index].content.decode()))

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def hmac_hex(secret: str, message: str | bytes) -> str:
    if isinstance(message, str):
        message = message.encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


@pytest.fixture
def settings() -> Settings:
    """Settings with every provider configured."""
    values = {field: f"test_{field}" for field in SECRET_FIELDS}
    values["lemonsqueezy_store_id"] = "12345"
    values["environment"] = "development"
    return Settings(_env_file=None, **values)


@pytest.fixture
def empty_settings() -> Settings:
    """Settings with no provider credentials at all."""
    return Settings(_env_file=None, environment="development", **{field: None for field in SECRET_FIELDS})


@pytest.fixture
def api() -> FakeProviderAPI:
    return FakeProviderAPI()


@pytest_asyncio.fixture
async def http_client(api: FakeProviderAPI):
    client = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    yield client
    await client.aclose()


@pytest.fixture
def sign():
    """Hex HMAC-SHA256 helper for building signed webhooks."""
    return hmac_hex
