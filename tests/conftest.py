"""
Shared fixtures for the ZAI SDK test suites.
"""

from typing import Any, Callable

import httpx
import pytest

from mocks.zai.server import API_PREFIX, MockZAIServer
from zai.core.auth import TokenCache, TokenIssuer
from zai.core.transport import Transport

MOCK_BASE_URL = f"http://mock.zai{API_PREFIX}/"
CREDENTIAL = "key123.secretXYZ"


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials out of every test."""
    monkeypatch.delenv("ZAI_API_KEY", raising=False)
    monkeypatch.delenv("ZAI_BASE_URL", raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_cache():
    return TokenCache()


@pytest.fixture
def issuer(token_cache, clock):
    return TokenIssuer(token_cache, clock=clock)


@pytest.fixture
def mock_server():
    """Mock origin that knows the secret for ``key123``."""
    return MockZAIServer(secrets={"key123": "secretXYZ"})


@pytest.fixture
def make_transport(mock_server, token_cache) -> Callable[..., Transport]:
    """Build transports wired to the mock origin with an isolated token cache."""

    def factory(**kwargs: Any) -> Transport:
        kwargs.setdefault("api_key", CREDENTIAL)
        kwargs.setdefault("base_url", MOCK_BASE_URL)
        kwargs.setdefault("token_cache", token_cache)
        kwargs.setdefault("http_transport", httpx.ASGITransport(app=mock_server.app))
        return Transport(**kwargs)

    return factory
