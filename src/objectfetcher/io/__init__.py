"""Transport layer for objectfetcher - delivers whole payloads to the parser."""

# Re-export these for import convenience
from .base import Transport, AsyncTransport, TransportError  # noqa: F401
from .local import open_local_transport, open_local_transport_async
from .http_sync import open_http_transport
from .http_async import open_http_transport_async


def _is_url(source) -> bool:
    if hasattr(source, 'read'):  # BinaryIO
        return False
    return str(source).startswith(('http://', 'https://'))


def open_transport(source, data=None, **kwargs):
    """Factory function to create the appropriate Transport for a source."""
    if _is_url(source):
        return open_http_transport(str(source), data, **kwargs)
    if data is not None:
        raise ValueError("A request body can only be sent to an http(s) URL")
    return open_local_transport(source)


async def open_transport_async(source, data=None, **kwargs):
    """Factory function to create the appropriate AsyncTransport for a source."""
    if _is_url(source):
        return await open_http_transport_async(str(source), data, **kwargs)
    if data is not None:
        raise ValueError("A request body can only be sent to an http(s) URL")
    return await open_local_transport_async(source)
