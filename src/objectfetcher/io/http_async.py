"""Asynchronous HTTP transport using httpx."""

import logging
import httpx
from typing import Mapping, Optional
from contextlib import asynccontextmanager

from .base import TransportError, DEFAULT_TIMEOUT

log = logging.getLogger(__name__)

# Global async client
_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def _get_client():
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)

    try:
        yield _client
    finally:
        # Don't close the client here - it's shared
        pass


class HTTPAsyncTransport:
    """Asynchronous HTTP transport: GET, or POST when a request body is given."""

    def __init__(self, url: str, data: Optional[str | bytes] = None,
                 headers: Optional[Mapping[str, str]] = None, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.data = data
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0

    @property
    def method(self) -> str:
        return "GET" if self.data is None else "POST"

    async def _request(self, retry_count: int = 0) -> httpx.Response:
        content = self.data.encode() if isinstance(self.data, str) else self.data
        async with _get_client() as client:
            self.requests_made += 1
            try:
                return await client.request(
                    self.method, self.url, content=content, headers=self.headers, timeout=self.timeout
                )
            except httpx.InvalidURL as e:
                # malformed URL, not retried
                raise TransportError(f"Invalid URL {self.url!r}: {e}", url=self.url) from e
            except httpx.RequestError as e:
                if retry_count == 0:
                    # One automatic retry
                    log.debug("%s %s failed (%s), retrying once", self.method, self.url, e)
                    return await self._request(retry_count + 1)
                raise TransportError(f"{self.method} request failed: {e}", url=self.url) from e

    async def fetch(self) -> bytes:
        """Return the full response body."""
        response = await self._request()
        if response.status_code >= 400:
            raise TransportError(
                f"{self.method} request failed with status {response.status_code}",
                url=self.url, status_code=response.status_code,
            )

        content = response.content
        self.bytes_fetched += len(content)
        log.debug("Fetched %d bytes from %s", len(content), self.url)
        return content

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Client is shared, don't close it here
        pass


async def open_http_transport_async(url: str, data: Optional[str | bytes] = None, **kwargs) -> HTTPAsyncTransport:
    """Create an asynchronous HTTP transport."""
    return HTTPAsyncTransport(url, data, **kwargs)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
