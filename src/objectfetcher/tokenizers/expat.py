from __future__ import annotations

from xml.parsers import expat

from ..core.model import MalformedDocumentError
from ..core.tokenizer_base import EventHandler, Tokenizer

_CHUNK = 64 * 1024


class ExpatTokenizer(Tokenizer):
    """Streaming tokenizer on top of the stdlib expat parser."""

    def __init__(self, encoding: str | None = None, chunk_size: int = _CHUNK):
        self.encoding = encoding
        self.chunk_size = chunk_size

    def _create_parser(self, handler: EventHandler):
        parser = expat.ParserCreate(self.encoding)
        parser.buffer_text = False      # report fragments as they come
        parser.SetParamEntityParsing(expat.XML_PARAM_ENTITY_PARSING_NEVER)
        parser.StartElementHandler = handler.start_element
        parser.EndElementHandler = handler.end_element
        parser.CharacterDataHandler = handler.characters
        return parser

    def parse(self, data: bytes, handler: EventHandler) -> None:
        if not data:
            raise MalformedDocumentError("Empty document", line=1, column=0)

        parser = self._create_parser(handler)
        view = memoryview(data)
        try:
            for start in range(0, len(view), self.chunk_size):
                parser.Parse(bytes(view[start:start + self.chunk_size]), False)
            parser.Parse(b"", True)
        except expat.ExpatError as e:
            raise MalformedDocumentError(
                f"Malformed XML: {expat.ErrorString(e.code)} at line {e.lineno}, column {e.offset}",
                line=e.lineno,
                column=e.offset,
            ) from e
