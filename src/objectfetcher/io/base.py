"""Base protocols and shared types for the transport layer."""

from typing import Protocol, runtime_checkable

from ..core.model import TransportError  # noqa: F401  (re-exported)


DEFAULT_TIMEOUT = 60.0  # seconds


@runtime_checkable
class Transport(Protocol):
    """Protocol for synchronous transports."""

    bytes_fetched: int  # running total

    def fetch(self) -> bytes:
        """Return the complete payload.
        If it cannot be retrieved → raise TransportError.
        """
        ...


@runtime_checkable
class AsyncTransport(Protocol):
    """Protocol for asynchronous transports."""

    bytes_fetched: int  # running total

    async def fetch(self) -> bytes:
        """Return the complete payload.
        If it cannot be retrieved → raise TransportError.
        """
        ...
