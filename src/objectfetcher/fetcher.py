"""Callback-style fetcher: retrieve an XML payload and hand back its records."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

from .core.dispatcher import ErrorCallback, ResultCallback, ResultDispatcher
from .core.model import FetchConfig
from .core.tokenizer_base import Tokenizer
from .io.http_async import open_http_transport_async
from .io.http_sync import open_http_transport

log = logging.getLogger(__name__)


@runtime_checkable
class FetcherDelegate(Protocol):
    """Object receiving the outcome of a fetch."""

    def array_from_fetcher(self, objects: list) -> None:
        ...

    def did_fail_with_error(self, error: Exception) -> None:
        ...


class ObjectFetcher:
    """Fetch XML and deliver it as generic records through two callbacks.

    Exactly one of ``on_result`` / ``on_error`` fires per fetch.  One fetch may
    be in flight at a time; every fetch builds its tree from scratch.
    """

    def __init__(
        self,
        on_result: ResultCallback,
        on_error: ErrorCallback,
        *,
        has_wrapper_tag: bool = False,
        skip_first: bool = False,
        config: FetchConfig | None = None,
        tokenizer: Tokenizer | None = None,
    ):
        if config is None:
            config = FetchConfig(has_wrapper_tag=has_wrapper_tag, skip_first=skip_first)
        self.config = config
        self.tokenizer = tokenizer
        self._on_result = on_result
        self._on_error = on_error
        self._dispatcher: ResultDispatcher | None = None
        self.bytes_fetched = 0

    @classmethod
    def from_delegate(cls, delegate: FetcherDelegate, **kwargs: Any) -> "ObjectFetcher":
        return cls(delegate.array_from_fetcher, delegate.did_fail_with_error, **kwargs)

    @property
    def in_progress(self) -> bool:
        return self._dispatcher is not None

    def abandon(self) -> None:
        """Discard the in-flight fetch; no callback fires for it afterwards."""
        if self._dispatcher is not None:
            self._dispatcher.abandon()
            self._dispatcher = None

    # ------------------------------------------------------------------ #
    def _begin(self) -> ResultDispatcher:
        if self._dispatcher is not None:
            raise RuntimeError("A fetch is already in progress on this ObjectFetcher")
        self._dispatcher = ResultDispatcher(self.config, self._on_result, self._on_error, self.tokenizer)
        return self._dispatcher

    def _end(self, dispatcher: ResultDispatcher) -> None:
        if self._dispatcher is dispatcher:
            self._dispatcher = None

    # --------------------------- sync ---------------------------------- #
    def fetch_objects_with_url(self, url: str, data: str | bytes | None = None) -> None:
        """GET `url` (POST `data` when given) and deliver its records."""
        self.fetch_objects_using_transport(open_http_transport(url, data, timeout=self.config.timeout))

    def fetch_objects_using_transport(self, transport) -> None:
        dispatcher = self._begin()
        try:
            try:
                payload = transport.fetch()
            except Exception as e:
                dispatcher.on_fetch_failed(e)
                return
            finally:
                self.bytes_fetched = getattr(transport, 'bytes_fetched', 0)
            dispatcher.on_fetch_succeeded(payload)
        finally:
            self._end(dispatcher)

    # -------------------------- async ---------------------------------- #
    async def fetch_objects_with_url_async(self, url: str, data: str | bytes | None = None) -> None:
        """Async version of fetch_objects_with_url."""
        transport = await open_http_transport_async(url, data, timeout=self.config.timeout)
        await self.fetch_objects_using_transport_async(transport)

    async def fetch_objects_using_transport_async(self, transport) -> None:
        dispatcher = self._begin()
        try:
            try:
                payload = await transport.fetch()
            except asyncio.CancelledError:
                log.debug("Fetch cancelled, abandoning")
                dispatcher.abandon()
                raise
            except Exception as e:
                dispatcher.on_fetch_failed(e)
                return
            finally:
                self.bytes_fetched = getattr(transport, 'bytes_fetched', 0)
            dispatcher.on_fetch_succeeded(payload)
        finally:
            self._end(dispatcher)
