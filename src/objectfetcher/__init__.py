"""objectfetcher - turn fetched XML into generic maps, sequences and strings."""

from .core.model import (                                              # re-export
    FetchConfig, FetchResult, GenericValue, Map, Sequence, Scalar,
    FetchError, TransportError, MalformedDocumentError, StructuralError,
)
from .core.builder import TreeBuilder
from .core.dispatcher import ResultDispatcher
from .fetcher import ObjectFetcher, FetcherDelegate
from .io import open_transport, open_transport_async


def _make_config(config, options) -> FetchConfig:
    if config is not None and options:
        raise TypeError("Pass either config or keyword options, not both")
    return config or FetchConfig(**options)


def _collector():
    outcome = {}

    def on_result(objects):
        outcome["objects"] = objects

    def on_error(error):
        outcome["error"] = error

    return outcome, on_result, on_error


def parse_objects(data: bytes, *, config: FetchConfig | None = None, **options) -> list:
    """Parse an XML buffer into records, raising on failure."""
    outcome, on_result, on_error = _collector()
    dispatcher = ResultDispatcher(_make_config(config, options), on_result, on_error)
    dispatcher.on_fetch_succeeded(data)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["objects"]


def _to_result(outcome: dict, bytes_fetched: int) -> FetchResult:
    if "error" in outcome:
        return FetchResult(False, None, str(outcome["error"]), bytes_fetched)
    return FetchResult(True, outcome["objects"], None, bytes_fetched)


async def fetch_objects(source, *, data=None, config: FetchConfig | None = None, **options) -> FetchResult:
    """Fetch records asynchronously from a source (URL, path, or file-like object)."""
    config = _make_config(config, options)
    outcome, on_result, on_error = _collector()
    fetcher = ObjectFetcher(on_result, on_error, config=config)
    try:
        transport = await open_transport_async(source, data, timeout=config.timeout)
    except ValueError as e:
        return FetchResult(False, None, str(e), 0)
    await fetcher.fetch_objects_using_transport_async(transport)
    return _to_result(outcome, fetcher.bytes_fetched)


def fetch_objects_sync(source, *, data=None, config: FetchConfig | None = None, **options) -> FetchResult:
    """Fetch records synchronously from a source (URL, path, or file-like object)."""
    config = _make_config(config, options)
    outcome, on_result, on_error = _collector()
    fetcher = ObjectFetcher(on_result, on_error, config=config)
    try:
        transport = open_transport(source, data, timeout=config.timeout)
    except ValueError as e:
        return FetchResult(False, None, str(e), 0)
    fetcher.fetch_objects_using_transport(transport)
    return _to_result(outcome, fetcher.bytes_fetched)


__all__ = [
    "parse_objects", "fetch_objects", "fetch_objects_sync",
    "ObjectFetcher", "FetcherDelegate", "TreeBuilder", "ResultDispatcher",
    "FetchConfig", "FetchResult", "GenericValue", "Map", "Sequence", "Scalar",
    "FetchError", "TransportError", "MalformedDocumentError", "StructuralError",
]
