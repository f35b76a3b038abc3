"""Local file transports."""

import asyncio
from pathlib import Path
from typing import BinaryIO, Union

from .base import TransportError


class LocalTransport:
    """Synchronous transport reading a whole local file or binary stream."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self.bytes_fetched = 0
        self.source = source

    @property
    def url(self) -> str:
        if hasattr(self.source, 'read'):
            return getattr(self.source, 'name', '<stream>')
        return str(self.source)

    def fetch(self) -> bytes:
        """Return the complete file contents."""
        try:
            if hasattr(self.source, 'read'):
                # BinaryIO object: read from the start, keep the caller's position
                current_pos = self.source.tell() if self.source.seekable() else None
                if current_pos is not None:
                    self.source.seek(0)
                data = self.source.read()
                if current_pos is not None:
                    self.source.seek(current_pos)
            else:
                data = Path(self.source).read_bytes()
        except OSError as e:
            raise TransportError(f"Cannot read {self.url}: {e}", url=self.url) from e

        self.bytes_fetched += len(data)
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


class LocalAsyncTransport:
    """Asynchronous local transport - thin wrapper around the sync one."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self._sync_transport = LocalTransport(source)

    @property
    def url(self) -> str:
        return self._sync_transport.url

    @property
    def bytes_fetched(self) -> int:
        return self._sync_transport.bytes_fetched

    async def fetch(self) -> bytes:
        """Return the complete file contents."""
        return await asyncio.to_thread(self._sync_transport.fetch)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


def open_local_transport(source: Union[Path, str, BinaryIO]) -> LocalTransport:
    """Create a synchronous local transport."""
    return LocalTransport(source)


async def open_local_transport_async(source: Union[Path, str, BinaryIO]) -> LocalAsyncTransport:
    """Create an asynchronous local transport."""
    return LocalAsyncTransport(source)
