"""Shared test fixtures for Music Gateway tests."""

import os

# Add project root to path
import sys
from typing import Callable, List

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

TEST_AUTH_SECRET = "test-secret"
TEST_API_BASE_URL = "https://meting.example.com/api"


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Install deterministic settings for every test."""
    import settings
    from settings import Settings

    test_settings = Settings(
        api_base_url=TEST_API_BASE_URL,
        auth_secret=TEST_AUTH_SECRET,
        default_source="netease",
        fallback_user_agent="Mozilla/5.0",
        upstream_timeout=5,
    )
    monkeypatch.setattr(settings, "_cached_settings", test_settings)
    yield test_settings


@pytest.fixture
def strict_auth_settings(monkeypatch, test_settings):
    """Settings with client auth verification enabled."""
    import settings

    strict = test_settings.model_copy(update={"verify_client_auth": True})
    monkeypatch.setattr(settings, "_cached_settings", strict)
    return strict


# =============================================================================
# Upstream Fixtures
# =============================================================================


class FakeUpstream:
    """Records outbound requests and answers them with a configurable handler."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"ok": True}
        )
        self.client = httpx.AsyncClient(transport=httpx.MockTransport(self._handle), follow_redirects=True)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        # Hand the body back unread, as a network transport would
        return httpx.Response(response.status_code, headers=response.headers, stream=response.stream)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no upstream request was made"
        return self.requests[-1]


@pytest.fixture
def upstream(monkeypatch):
    """Replace the shared upstream client with a recording mock transport."""
    import routers.proxy._streaming as streaming

    fake = FakeUpstream()

    async def get_fake_client():
        return fake.client

    monkeypatch.setattr(streaming, "get_client", get_fake_client)
    yield fake


# =============================================================================
# FastAPI TestClient Fixtures
# =============================================================================


@pytest.fixture
def app_no_lifespan():
    """FastAPI app with only the gateway router mounted."""
    from routers import proxy

    app = FastAPI()
    app.include_router(proxy.router, prefix="/proxy")
    return app


@pytest.fixture
def test_client(app_no_lifespan, upstream):
    """TestClient whose upstream calls go to the fake upstream."""
    with TestClient(app_no_lifespan) as client:
        yield client
