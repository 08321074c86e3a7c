"""
Unit tests for the bounded upstream fetcher.
"""

import asyncio
from contextlib import aclosing

import httpx
import pytest

from norgesglass.core.exceptions import (
    BodyTooLargeError,
    UpstreamStatusError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)
from norgesglass.services.fetcher import BoundedFetcher

pytestmark = pytest.mark.asyncio

URL = "https://upstream.example/data"


def make_fetcher(handler) -> BoundedFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BoundedFetcher(client, timeout=5.0)


def body(content: bytes, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=content)
    return handler


class TestBodyLimit:
    async def test_body_at_limit_is_returned(self):
        fetcher = make_fetcher(body(b"x" * 100))
        assert await fetcher.fetch(URL, source="test", max_bytes=100) == b"x" * 100

    async def test_one_byte_over_limit_fails(self):
        fetcher = make_fetcher(body(b"x" * 101))

        with pytest.raises(BodyTooLargeError) as exc_info:
            await fetcher.fetch(URL, source="test", max_bytes=100)

        assert exc_info.value.limit == 100
        assert exc_info.value.source == "test"

    async def test_limit_enforced_across_chunks(self):
        fetcher = make_fetcher(body(b"x" * (200 * 1024)))

        with pytest.raises(BodyTooLargeError):
            await fetcher.fetch(URL, source="test", max_bytes=100 * 1024)

    async def test_empty_body(self):
        fetcher = make_fetcher(body(b""))
        assert await fetcher.fetch(URL, source="test", max_bytes=10) == b""


class TestStatus:
    @pytest.mark.parametrize("status", [201, 204])
    async def test_any_2xx_is_success(self, status):
        fetcher = make_fetcher(body(b"" if status == 204 else b"ok", status))
        await fetcher.fetch(URL, source="test", max_bytes=10)

    @pytest.mark.parametrize("status", [301, 404, 429, 500, 503])
    async def test_non_2xx_raises_status_error(self, status):
        fetcher = make_fetcher(body(b"nope", status))

        with pytest.raises(UpstreamStatusError) as exc_info:
            await fetcher.fetch(URL, source="test", max_bytes=10)

        assert exc_info.value.status == status
        assert exc_info.value.details == {"source": "test", "status": status}

    async def test_error_body_size_is_not_checked(self):
        fetcher = make_fetcher(body(b"x" * 1000, 500))

        with pytest.raises(UpstreamStatusError):
            await fetcher.fetch(URL, source="test", max_bytes=10)


class TestTransport:
    @pytest.mark.parametrize(
        "error",
        [httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout, httpx.ReadError],
    )
    async def test_transport_failures_are_classified(self, error):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error("boom", request=request)

        fetcher = make_fetcher(handler)

        with pytest.raises(UpstreamTransportError) as exc_info:
            await fetcher.fetch(URL, source="test", max_bytes=10)

        assert isinstance(exc_info.value, UpstreamUnavailableError)
        assert isinstance(exc_info.value.__cause__, error)


class TestDeadline:
    async def test_dripping_body_hits_overall_deadline(self):
        async def drip():
            for _ in range(6):
                await asyncio.sleep(0.1)
                yield b"x"

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=drip())

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = BoundedFetcher(client, timeout=0.25)

        with pytest.raises(UpstreamTransportError) as exc_info:
            await fetcher.fetch(URL, source="test", max_bytes=100)

        assert exc_info.value.details["timeout_seconds"] == 0.25

    async def test_slow_response_headers_hit_deadline(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1.0)
            return httpx.Response(200, content=b"late")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = BoundedFetcher(client, timeout=0.1)

        with pytest.raises(UpstreamTransportError):
            await fetcher.fetch(URL, source="test", max_bytes=100)

    async def test_steady_body_within_deadline(self):
        async def drip():
            for _ in range(3):
                await asyncio.sleep(0.01)
                yield b"x"

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=drip())

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = BoundedFetcher(client, timeout=2.0)

        assert await fetcher.fetch(URL, source="test", max_bytes=100) == b"xxx"


class TestRequest:
    async def test_headers_and_params_are_sent(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"{}")

        fetcher = make_fetcher(handler)
        await fetcher.fetch(
            URL,
            source="test",
            max_bytes=10,
            headers={"X-API-Key": "secret"},
            params={"Active": "1"},
        )

        (request,) = seen
        assert request.method == "GET"
        assert request.headers["x-api-key"] == "secret"
        assert request.url.params["Active"] == "1"

    async def test_iter_bytes_can_stop_early(self):
        fetcher = make_fetcher(body(b"x" * (200 * 1024)))

        chunks = fetcher.iter_bytes(URL, source="test", max_bytes=1024 * 1024)
        async with aclosing(chunks):
            first = await anext(chunks)

        assert len(first) > 0
