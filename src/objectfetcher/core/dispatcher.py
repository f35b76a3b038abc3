"""Deliver exactly one outcome per fetch: the record sequence or an error."""

from __future__ import annotations

import logging
import warnings
from typing import Callable, List

from .builder import TreeBuilder
from .model import (
    FetchConfig,
    GenericValue,
    MalformedDocumentError,
    StructuralError,
    TransportError,
)
from .tokenizer_base import Tokenizer
from ..tokenizers.expat import ExpatTokenizer

log = logging.getLogger(__name__)

ResultCallback = Callable[[List[GenericValue]], None]
ErrorCallback = Callable[[Exception], None]


class ResultDispatcher:
    def __init__(
        self,
        config: FetchConfig,
        on_result: ResultCallback,
        on_error: ErrorCallback,
        tokenizer: Tokenizer | None = None,
    ):
        if tokenizer is None:
            tokenizer = ExpatTokenizer()
        self.config = config
        self.tokenizer = tokenizer
        self._on_result = on_result
        self._on_error = on_error
        self._delivered = False
        self._abandoned = False

    @property
    def delivered(self) -> bool:
        return self._delivered

    def abandon(self) -> None:
        """Suppress any later callback."""
        self._abandoned = True

    def _claim(self, what: str) -> bool:
        if self._abandoned:
            log.debug("Dropping %s for abandoned fetch", what)
            return False
        if self._delivered:
            warnings.warn(f"Fetch outcome already delivered, ignoring {what}", RuntimeWarning)
            return False
        self._delivered = True
        return True

    # --- inbound from the transport ---
    def on_fetch_succeeded(self, data: bytes) -> None:
        if self._abandoned or self._delivered:
            self._claim("fetched bytes")
            return

        builder = TreeBuilder(self.config)
        try:
            builder.start_document(self.config.has_wrapper_tag, self.config.skip_first)
            self.tokenizer.parse(data, builder)
            objects = builder.end_document()
        except (MalformedDocumentError, StructuralError) as e:
            builder.reset()
            self.on_parse_failed(e)
            return

        if self._claim("result"):
            log.debug("Delivering %d record(s) parsed from %d bytes", len(objects), len(data))
            self._on_result(objects)

    def on_fetch_failed(self, error: Exception) -> None:
        if not isinstance(error, TransportError):
            wrapped = TransportError(str(error) or type(error).__name__)
            wrapped.__cause__ = error
            error = wrapped
        if self._claim("transport error"):
            log.debug("Delivering transport error: %s", error)
            self._on_error(error)

    def on_parse_failed(self, error: Exception) -> None:
        if self._claim("parse error"):
            log.debug("Delivering parse error: %s", error)
            self._on_error(error)
