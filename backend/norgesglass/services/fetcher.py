"""
Bounded upstream fetcher.

Single GET per call, no retries. Every outcome other than "2xx with a body
that fits" is raised as one of the UpstreamUnavailableError subclasses so
callers can tell a broken network from an angry upstream from an
oversized document.
"""

import asyncio
from collections.abc import AsyncIterator, Mapping

import httpx
import structlog

from norgesglass.core.constants import UPSTREAM_TIMEOUT_SECONDS
from norgesglass.core.exceptions import (
    BodyTooLargeError,
    UpstreamStatusError,
    UpstreamTransportError,
)

logger = structlog.get_logger()

CHUNK_SIZE = 64 * 1024


async def _next_chunk(chunks: AsyncIterator[bytes], deadline: float) -> bytes | None:
    async with asyncio.timeout_at(deadline):
        return await anext(chunks, None)


class BoundedFetcher:
    """
    GET with a hard body-size ceiling and outcome classification.

    Wraps a shared httpx.AsyncClient. The ceiling is enforced while
    streaming: reading the (limit + 1)-th byte aborts with BodyTooLargeError,
    so a truncated document is never handed on as if it were complete.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = UPSTREAM_TIMEOUT_SECONDS,
    ):
        self.client = client
        self.timeout = timeout
        self.log = logger.bind(component="BoundedFetcher")

    async def iter_bytes(
        self,
        url: str,
        *,
        source: str,
        max_bytes: int,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Stream the response body chunk by chunk.

        Status is checked before the first chunk is yielded. Consumers that
        stop early should wrap the generator in contextlib.aclosing so the
        connection is released right away.

        The timeout is a deadline for the whole call, connect through last
        byte, so a server dripping bytes cannot hold the request open.

        Raises:
            UpstreamStatusError: non-2xx status (body drained first)
            BodyTooLargeError: more than max_bytes in the body
            UpstreamTransportError: DNS, connect, deadline, read or decode failure
        """
        log = self.log.bind(source=source)
        deadline = asyncio.get_running_loop().time() + self.timeout
        request = self.client.build_request(
            "GET",
            url,
            headers=headers,
            params=params,
            timeout=self.timeout,
        )

        try:
            async with asyncio.timeout_at(deadline):
                response = await self.client.send(request, stream=True)

            try:
                if not response.is_success:
                    # Drain so the pooled connection can be reused
                    raw = response.aiter_raw()
                    while await _next_chunk(raw, deadline) is not None:
                        pass
                    log.warning("upstream_status", status=response.status_code)
                    raise UpstreamStatusError(source, response.status_code)

                total = 0
                chunks = response.aiter_bytes(CHUNK_SIZE)
                while (chunk := await _next_chunk(chunks, deadline)) is not None:
                    total += len(chunk)
                    if total > max_bytes:
                        log.warning("upstream_body_too_large", limit_bytes=max_bytes)
                        raise BodyTooLargeError(source, max_bytes)
                    yield chunk
            finally:
                await response.aclose()

        except httpx.RequestError as e:
            log.warning("upstream_transport_error", error=str(e), error_type=type(e).__name__)
            raise UpstreamTransportError(
                f"{type(e).__name__}: {e}",
                source,
            ) from e

        except TimeoutError as e:
            log.warning("upstream_deadline_exceeded", timeout_seconds=self.timeout)
            raise UpstreamTransportError(
                f"no complete response within {self.timeout}s",
                source,
                {"timeout_seconds": self.timeout},
            ) from e

    async def fetch(
        self,
        url: str,
        *,
        source: str,
        max_bytes: int,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> bytes:
        """
        Fetch the whole body, at most max_bytes of it.

        Returns:
            The complete response body

        Raises:
            Same as iter_bytes()
        """
        chunks = []
        async for chunk in self.iter_bytes(
            url,
            source=source,
            max_bytes=max_bytes,
            headers=headers,
            params=params,
        ):
            chunks.append(chunk)

        body = b"".join(chunks)
        self.log.debug("upstream_fetched", source=source, body_bytes=len(body))
        return body
