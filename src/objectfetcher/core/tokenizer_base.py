from abc import ABC, abstractmethod
from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class EventHandler(Protocol):
    """Receiver of structural parse events, in document order."""

    def start_element(self, tag: str, attributes: Mapping[str, str]) -> None:
        ...

    def characters(self, text: str) -> None:
        ...

    def end_element(self, tag: str) -> None:
        ...


class Tokenizer(ABC):
    # --- required by subclasses ---
    @abstractmethod
    def parse(self, data: bytes, handler: EventHandler) -> None:
        """Tokenize `data` and forward every event to `handler`.
        Syntax errors → raise MalformedDocumentError.
        """
        ...
