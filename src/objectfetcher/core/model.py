from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union


# --- generic object graph ------------------------------------------------- #
@dataclass(slots=True)
class Scalar:
    """Character data of a leaf element, or an attribute value."""
    text: str

    def to_plain(self) -> str:
        return self.text


@dataclass(slots=True, eq=False)
class Map:
    """Element content keyed by attribute / child element name."""
    entries: Dict[str, "GenericValue"] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __getitem__(self, key: str) -> "GenericValue":
        return self.entries[key]

    def __eq__(self, other):
        if not isinstance(other, (Map, Sequence, Scalar)):
            return NotImplemented
        return _equal(self, other)

    def to_plain(self) -> Dict[str, Any]:
        return _to_plain(self)


@dataclass(slots=True, eq=False)
class Sequence:
    """Repeated siblings sharing one key, in document order."""
    items: List["GenericValue"] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> "GenericValue":
        return self.items[index]

    def __eq__(self, other):
        if not isinstance(other, (Map, Sequence, Scalar)):
            return NotImplemented
        return _equal(self, other)

    def to_plain(self) -> List[Any]:
        return _to_plain(self)


GenericValue = Union[Map, Sequence, Scalar]


# Both walks use an explicit stack so nesting depth is bounded by memory only,
# like TreeBuilder which produced the graph.
def _to_plain(value: GenericValue) -> Any:
    if isinstance(value, Scalar):
        return value.text
    root: Any = {} if isinstance(value, Map) else []
    stack = [(value, root)]
    while stack:
        source, target = stack.pop()
        pairs = source.entries.items() if isinstance(source, Map) else enumerate(source.items)
        for key, child in pairs:
            if isinstance(child, Scalar):
                converted: Any = child.text
            else:
                converted = {} if isinstance(child, Map) else []
                stack.append((child, converted))
            if isinstance(target, dict):
                target[key] = converted
            else:
                target.append(converted)
    return root


def _equal(left: GenericValue, right: GenericValue) -> bool:
    stack = [(left, right)]
    while stack:
        a, b = stack.pop()
        if type(a) is not type(b):
            return False
        if isinstance(a, Scalar):
            if a.text != b.text:
                return False
        elif isinstance(a, Map):
            if list(a.entries) != list(b.entries):
                return False
            stack.extend(zip(a.entries.values(), b.entries.values()))
        else:
            if len(a.items) != len(b.items):
                return False
            stack.extend(zip(a.items, b.items))
    return True


# --- configuration / results --------------------------------------------- #
@dataclass(slots=True)
class FetchConfig:
    has_wrapper_tag: bool = False
    skip_first: bool = False
    text_key: str = "#text"           # where text goes next to attributes/children
    strip_whitespace: bool = True
    rename: Mapping[str, str] = field(default_factory=dict)   # tag -> key
    timeout: float = 60.0             # seconds, transport only

    def key_for(self, tag: str) -> str:
        return self.rename.get(tag, tag)


@dataclass(slots=True)
class FetchResult:
    success: bool
    objects: List[GenericValue] | None
    error: str | None
    bytes_fetched: int         # filled by the transport


# --- errors -------------------------------------------------------------- #
class FetchError(RuntimeError):
    """Base class for everything delivered to an error callback."""
    pass


class TransportError(FetchError):
    """Raised when the payload could not be retrieved."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedDocumentError(FetchError):
    """Raised when the tokenizer rejects the document."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column


class StructuralError(FetchError):
    """Raised when parse events do not describe a balanced element tree."""
    pass
