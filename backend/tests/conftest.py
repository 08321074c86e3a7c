"""
Pytest configuration and fixtures for Norgesglass tests.

Upstreams are never contacted: the app's outbound httpx client runs on a
MockTransport that dispatches by host to handlers registered per test.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from norgesglass.api.main import create_app
from norgesglass.core.config import Settings

Handler = Callable[[httpx.Request], httpx.Response]

NARVESEN_HOST = "narvesen.no"
NGU_HOST = "geo.ngu.no"
NVE_HOST = "hydapi.nve.no"

TEST_SETTINGS: dict[str, Any] = {
    "nve_api_key": "test-key",
    "static_dir": "/nonexistent/static",
}


class FakeUpstream:
    """Routes outbound requests by host to per-test handlers and records them."""

    def __init__(self) -> None:
        self.handlers: dict[str, Handler] = {}
        self.requests: list[httpx.Request] = []

    def route(self, host: str, handler: Handler | httpx.Response) -> None:
        if isinstance(handler, httpx.Response):
            response = handler
            self.handlers[host] = lambda request: httpx.Response(
                response.status_code,
                content=response.content,
                headers=response.headers,
            )
        else:
            self.handlers[host] = handler

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.get(request.url.host)
        if handler is None:
            raise httpx.ConnectError(f"no route to {request.url.host}", request=request)
        return handler(request)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def outbound(upstream: FakeUpstream) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
        yield client


@pytest.fixture
def make_app(outbound: httpx.AsyncClient) -> Callable[..., FastAPI]:
    """Build an app wired to the fake upstream, with optional setting overrides."""

    def _make(**overrides: Any) -> FastAPI:
        settings = Settings(_env_file=None, **{**TEST_SETTINGS, **overrides})
        return create_app(settings, http_client=outbound)

    return _make


@pytest_asyncio.fixture
async def client(make_app: Callable[..., FastAPI]) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the API with default test settings."""
    async with AsyncClient(
        transport=ASGITransport(app=make_app()),
        base_url="http://test",
    ) as ac:
        yield ac
