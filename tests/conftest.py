"""Shared fixtures for envbee SDK tests."""
from collections.abc import Callable
from typing import Optional

import orjson
import pytest

from envbee_sdk import EnvbeeClient, MemoryCache, RequestTimeoutError, Response

ENV_VARS = (
    "ENVBEE_API_KEY",
    "ENVBEE_API_SECRET",
    "ENVBEE_API_URL",
    "ENVBEE_ENC_KEY",
    "ENVBEE_CACHE_DIR",
)

TEXT_KEY = "0123456789abcdef0123456789abcdef"


def json_response(payload, status: int = 200) -> Response:
    return Response(status=status, body=orjson.dumps(payload))


class FakeTransport:
    """In-memory transport recording each request and replying via a responder."""

    def __init__(self, responder: Optional[Callable[[str, dict], Response]] = None):
        self.responder = responder
        self.requests: list[tuple[str, dict]] = []
        self.closed = False

    async def get(self, url: str, headers: dict[str, str]) -> Response:
        self.requests.append((url, headers))
        if self.responder is None:
            return Response(status=500, body=b"")
        return self.responder(url, headers)

    async def close(self) -> None:
        self.closed = True


class TimeoutTransport(FakeTransport):
    async def get(self, url: str, headers: dict[str, str]) -> Response:
        self.requests.append((url, headers))
        raise RequestTimeoutError(f"Request to {url} timed out.")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep tests independent from the caller's ENVBEE_* environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def make_client(cache):
    """Factory building a client around a FakeTransport."""
    def _make(responder=None, enc_key=None, transport=None, **kwargs):
        transport = transport or FakeTransport(responder)
        client = EnvbeeClient(
            api_key="key123",
            api_secret="secret123",
            enc_key=enc_key,
            base_url="https://api.test",
            cache=kwargs.pop("cache", cache),
            transport=transport,
            **kwargs,
        )
        return client, transport
    return _make
