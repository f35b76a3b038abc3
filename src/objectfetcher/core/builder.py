"""Tree-building state machine: parse events in, generic object graph out.

One ``TreeBuilder`` handles one document at a time.  Every open element owns a
``ParseFrame`` on the stack; when the element closes its finished value is
installed into the parent frame, or appended to the result when the parent is
the wrapper (or there is no parent at all).
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import List, Mapping, Set

from .model import (
    FetchConfig,
    GenericValue,
    Map,
    Scalar,
    Sequence,
    StructuralError,
)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ParseFrame:
    tag: str                       # XML element name
    key: str                       # name used inside the parent container
    container: Map | Sequence      # Sequence only for the wrapper frame
    text: List[str] = field(default_factory=list)
    attribute_keys: Set[str] = field(default_factory=set)
    is_wrapper: bool = False


class TreeBuilder:
    """Consume tokenizer events and build the top-level record sequence."""

    def __init__(self, config: FetchConfig | None = None) -> None:
        self.config = config or FetchConfig()
        self.reset()

    def reset(self) -> None:
        """Drop any partially built document."""
        self._frames: List[ParseFrame] = []
        self._result: List[GenericValue] = []
        self._wrapper_expected = False
        self._skip_first = False
        self._started = False
        self._seen_root = False

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def in_progress(self) -> bool:
        return self._started

    # ------------------------------------------------------------------ #
    def start_document(self, wrapper_expected: bool | None = None, skip_first: bool | None = None) -> None:
        if self._started:
            raise StructuralError("A document is already being built")
        self.reset()
        if wrapper_expected is None:
            wrapper_expected = self.config.has_wrapper_tag
        if skip_first is None:
            skip_first = self.config.skip_first
        self._wrapper_expected = wrapper_expected
        self._skip_first = skip_first
        self._started = True

    def start_element(self, tag: str, attributes: Mapping[str, str]) -> None:
        self._require_started(f"<{tag}>")
        if not self._frames and self._seen_root:
            raise StructuralError(f"Second root element <{tag}>")

        key = self.config.key_for(tag)
        if not self._seen_root and self._wrapper_expected:
            if attributes:
                log.debug("Ignoring %d attribute(s) on wrapper <%s>", len(attributes), tag)
            frame = ParseFrame(tag, key, Sequence(), is_wrapper=True)
        else:
            # attributes go in first, children and text may overwrite them later
            container = Map({name: Scalar(value) for name, value in attributes.items()})
            frame = ParseFrame(tag, key, container, attribute_keys=set(attributes))

        self._seen_root = True
        self._frames.append(frame)

    def characters(self, text: str) -> None:
        self._require_started("character data")
        if not self._frames:
            if text.strip():
                raise StructuralError(f"Character data outside the root element: {text[:40]!r}")
            return
        self._frames[-1].text.append(text)

    def end_element(self, tag: str) -> None:
        self._require_started(f"</{tag}>")
        if not self._frames:
            raise StructuralError(f"</{tag}> without a matching open tag")
        frame = self._frames[-1]
        if frame.tag != tag:
            raise StructuralError(f"</{tag}> does not close <{frame.tag}>")
        self._frames.pop()

        text = "".join(frame.text)
        if frame.is_wrapper:
            if text.strip():
                warnings.warn(f"Ignoring character data inside wrapper element <{tag}>")
            self._result.extend(frame.container.items)
            return

        value = self._finish(frame, text)
        if not self._frames:
            self._result.append(value)
            return
        parent = self._frames[-1]
        if parent.is_wrapper:
            parent.container.items.append(value)
        else:
            self._install(parent, frame.key, value)

    def end_document(self) -> List[GenericValue]:
        self._require_started("end of document")
        if self._frames:
            still_open = ", ".join(f"<{f.tag}>" for f in self._frames)
            raise StructuralError(f"Document ended with unclosed element(s): {still_open}")

        result = self._result
        if self._skip_first and result:
            result = result[1:]
        log.debug("Built %d top-level record(s)", len(result))
        self.reset()
        return result

    # ------------------------------------------------------------------ #
    def _require_started(self, event: str) -> None:
        if not self._started:
            raise StructuralError(f"Got {event} before start of document")

    def _finish(self, frame: ParseFrame, text: str) -> GenericValue:
        """Flush the frame's text and return its finished value."""
        container = frame.container
        if self.config.strip_whitespace:
            text = text.strip()
        elif len(container) and text.isspace():
            text = ""                   # indentation between children

        if not text:
            return container
        if not len(container):
            return Scalar(text)
        container.entries[self.config.text_key] = Scalar(text)
        return container

    @staticmethod
    def _install(parent: ParseFrame, key: str, value: GenericValue) -> None:
        entries = parent.container.entries
        if key in parent.attribute_keys:
            # a child element wins over an attribute of the same name
            parent.attribute_keys.discard(key)
            entries[key] = value
            return

        existing = entries.get(key)
        if existing is None:
            entries[key] = value
        elif isinstance(existing, Sequence):
            existing.items.append(value)
        else:
            entries[key] = Sequence([existing, value])
