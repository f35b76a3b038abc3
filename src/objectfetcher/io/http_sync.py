"""Synchronous HTTP transport using requests."""

import logging
import requests
from typing import Mapping, Optional

from .base import TransportError, DEFAULT_TIMEOUT

log = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPTransport:
    """Synchronous HTTP transport: GET, or POST when a request body is given."""

    def __init__(self, url: str, data: Optional[str | bytes] = None,
                 headers: Optional[Mapping[str, str]] = None, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.data = data
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self._session = _get_session()

    @property
    def method(self) -> str:
        return "GET" if self.data is None else "POST"

    def _request(self, retry_count: int = 0) -> requests.Response:
        self.requests_made += 1
        try:
            return self._session.request(
                self.method, self.url, data=self.data, headers=self.headers, timeout=self.timeout
            )
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema) as e:
            # malformed URL, not retried
            raise TransportError(f"Invalid URL {self.url!r}: {e}", url=self.url) from e
        except requests.RequestException as e:
            if retry_count == 0:
                # One automatic retry
                log.debug("%s %s failed (%s), retrying once", self.method, self.url, e)
                return self._request(retry_count + 1)
            raise TransportError(f"{self.method} request failed: {e}", url=self.url) from e

    def fetch(self) -> bytes:
        """Return the full response body."""
        response = self._request()
        if response.status_code >= 400:
            raise TransportError(
                f"{self.method} request failed with status {response.status_code}",
                url=self.url, status_code=response.status_code,
            )

        content = response.content
        self.bytes_fetched += len(content)
        log.debug("Fetched %d bytes from %s", len(content), self.url)
        return content

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass


def open_http_transport(url: str, data: Optional[str | bytes] = None, **kwargs) -> HTTPTransport:
    """Create a synchronous HTTP transport."""
    return HTTPTransport(url, data, **kwargs)
