"""Streaming XML event reader that preserves the input bytes.

The reader pulls fixed-size chunks from a binary stream and cuts them into
events one at a time. Only the bytes of the event being scanned are kept in
memory, so arbitrarily large track logs can be processed. The reader is
strict: malformed markup raises ``ParseError`` instead of being repaired.

A reader can be paused simply by not asking it for the next event; its buffer
and stream position are kept until reading resumes.
"""

import logging
from typing import BinaryIO, Iterator, Optional

from gpxjoin.shared.config import DEFAULT_CHUNK_SIZE
from gpxjoin.shared.errors import ParseError

from .events import Event, EventPosition, EventType

logger = logging.getLogger(__name__)

_LT = ord("<")
_GT = ord(">")
_LBRACKET = ord("[")
_RBRACKET = ord("]")
_QUOTES = (ord('"'), ord("'"))

# Bytes that end or cannot appear in an element name
_NAME_STOP_BYTES = frozenset(b" \t\r\n<>/=\"'")

_PI_OPEN = b"<?"
_PI_CLOSE = b"?>"
_DECL_OPEN = b"<!"
_COMMENT_OPEN = b"<!--"
_COMMENT_CLOSE = b"-->"
_CDATA_OPEN = b"<![CDATA["
_CDATA_CLOSE = b"]]>"
_DOCTYPE_OPEN = b"<!DOCTYPE"
_END_TAG_OPEN = b"</"

XML_DECLARATION_TARGET = b"xml"


def _is_name(name: bytes) -> bool:
    return bool(name) and not any(byte in _NAME_STOP_BYTES for byte in name)


class XMLEventReader:
    """Pull-style reader producing one ``Event`` per call.

    Args:
        stream: Binary readable with a ``read(size)`` method
        source_name: Name used in error messages (usually the file path)
        chunk_size: Number of bytes requested from the stream per read
    """

    def __init__(
        self,
        stream: BinaryIO,
        source_name: str = "<stream>",
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.stream = stream
        self.source_name = source_name
        self.chunk_size = chunk_size

        self._buffer = bytearray()
        self._pos = 0
        self._exhausted = False
        self._line = 1
        self._column = 1
        self._offset = 0

        self.events_read = 0
        self.bytes_read = 0

    @property
    def position(self) -> EventPosition:
        """Position of the next event to be read."""
        return EventPosition(self._line, self._column, self._offset)

    def __iter__(self) -> Iterator[Event]:
        """Yield events until end of input; the EOF event itself is not yielded."""
        while True:
            event = self.read_event()
            if event.is_eof:
                return
            yield event

    def read_event(self) -> Event:
        """Read the next event.

        Returns:
            The next event; an ``EOF`` event once the input is exhausted, and
            again on every later call

        Raises:
            ParseError: If the markup is malformed or the stream fails
        """
        self._compact()
        if not self._ensure(1):
            return Event(EventType.EOF, b"", self.position)

        if self._buffer[self._pos] != _LT:
            end = self._find(b"<", self._pos + 1)
            return self._emit(EventType.TEXT, len(self._buffer) if end == -1 else end)

        if self._startswith(_PI_OPEN):
            return self._read_processing_instruction()
        if self._startswith(_DECL_OPEN):
            if self._startswith(_COMMENT_OPEN):
                end = self._find_close(_COMMENT_CLOSE, len(_COMMENT_OPEN), "comment")
                return self._emit(EventType.COMMENT, end)
            if self._startswith(_CDATA_OPEN):
                end = self._find_close(_CDATA_CLOSE, len(_CDATA_OPEN), "CDATA section")
                return self._emit(EventType.CDATA, end)
            if self._startswith(_DOCTYPE_OPEN):
                return self._emit(EventType.DOCTYPE, self._scan_doctype())
            raise self._error("unsupported markup declaration")
        if self._startswith(_END_TAG_OPEN):
            return self._read_end_tag()
        return self._read_start_tag()

    # Buffer management

    def _fill(self) -> bool:
        """Append the next chunk to the buffer; False once the stream is exhausted."""
        if self._exhausted:
            return False
        try:
            chunk = self.stream.read(self.chunk_size)
        except OSError as e:
            raise ParseError(f"failed to read input: {e}", self.source_name, self.position) from e
        if not chunk:
            self._exhausted = True
            logger.debug(
                "Input exhausted",
                extra={
                    "component": "event_reader",
                    "source": self.source_name,
                    "bytes_read": self.bytes_read,
                }
            )
            return False
        if not isinstance(chunk, (bytes, bytearray)):
            raise ParseError(
                "source must be opened in binary mode", self.source_name, self.position
            )
        self._buffer.extend(chunk)
        self.bytes_read += len(chunk)
        return True

    def _compact(self) -> None:
        # Only done between events so indexes taken during a scan stay valid
        if self._pos:
            del self._buffer[:self._pos]
            self._pos = 0

    def _ensure(self, count: int) -> bool:
        while len(self._buffer) - self._pos < count:
            if not self._fill():
                return False
        return True

    def _startswith(self, prefix: bytes) -> bool:
        self._ensure(len(prefix))
        return self._buffer.startswith(prefix, self._pos)

    def _find(self, needle: bytes, start: int) -> int:
        """Find ``needle`` at or after ``start``, reading more input as needed."""
        while True:
            index = self._buffer.find(needle, start)
            if index != -1:
                return index
            start = max(start, len(self._buffer) - len(needle) + 1)
            if not self._fill():
                return -1

    def _find_close(self, terminator: bytes, skip: int, what: str) -> int:
        index = self._find(terminator, self._pos + skip)
        if index == -1:
            raise self._error(f"unexpected end of input inside {what}")
        return index + len(terminator)

    # Scanners

    def _scan_tag(self) -> int:
        """Return the index just past the ``>`` closing the current tag."""
        index = self._pos + 1
        while True:
            if index >= len(self._buffer):
                if not self._fill():
                    raise self._error("unexpected end of input inside tag")
                continue
            byte = self._buffer[index]
            if byte in _QUOTES:
                close = self._find(bytes((byte,)), index + 1)
                if close == -1:
                    raise self._error("unexpected end of input inside attribute value")
                index = close + 1
                continue
            if byte == _GT:
                return index + 1
            if byte == _LT:
                raise self._error("unexpected '<' inside tag")
            index += 1

    def _scan_doctype(self) -> int:
        index = self._pos + len(_DOCTYPE_OPEN)
        depth = 0
        quote = None
        while True:
            if index >= len(self._buffer):
                if not self._fill():
                    raise self._error("unexpected end of input inside DOCTYPE")
                continue
            byte = self._buffer[index]
            if quote is not None:
                if byte == quote:
                    quote = None
            elif depth > 0 and byte == _LT:
                # Quotes inside subset comments and PIs are plain text
                skip = self._skip_subset_markup(index)
                if skip is not None:
                    index = skip
                    continue
            elif byte in _QUOTES:
                quote = byte
            elif byte == _LBRACKET:
                depth += 1
            elif byte == _RBRACKET:
                depth -= 1
            elif byte == _GT and depth <= 0:
                return index + 1
            index += 1

    def _skip_subset_markup(self, index: int) -> Optional[int]:
        """Return the index past a comment or PI starting at ``index``, if any."""
        for opener, closer, what in (
            (_COMMENT_OPEN, _COMMENT_CLOSE, "comment"),
            (_PI_OPEN, _PI_CLOSE, "processing instruction"),
        ):
            while len(self._buffer) < index + len(opener) and self._fill():
                pass
            if self._buffer.startswith(opener, index):
                close = self._find(closer, index + len(opener))
                if close == -1:
                    raise self._error(f"unexpected end of input inside {what}")
                return close + len(closer)
        return None

    def _read_processing_instruction(self) -> Event:
        end = self._find_close(_PI_CLOSE, len(_PI_OPEN), "processing instruction")
        body = bytes(self._buffer[self._pos + len(_PI_OPEN):end - len(_PI_CLOSE)])
        target = body.split(None, 1)[0] if body.strip() else b""
        if body[:1].isspace() or not _is_name(target):
            raise self._error("processing instruction without a valid target")
        if target == XML_DECLARATION_TARGET:
            return self._emit(EventType.DECLARATION, end, target)
        return self._emit(EventType.PROCESSING_INSTRUCTION, end, target)

    def _read_end_tag(self) -> Event:
        end = self._scan_tag()
        name = bytes(self._buffer[self._pos + len(_END_TAG_OPEN):end - 1]).rstrip()
        if not _is_name(name):
            raise self._error("malformed end tag")
        return self._emit(EventType.END, end, name)

    def _read_start_tag(self) -> Event:
        end = self._scan_tag()
        body = bytes(self._buffer[self._pos + 1:end - 1])
        event_type = EventType.START
        if body.endswith(b"/"):
            event_type = EventType.EMPTY
            body = body[:-1]
        name = body.split(None, 1)[0] if body.strip() else b""
        if body[:1].isspace() or not _is_name(name):
            raise self._error("malformed start tag")
        return self._emit(event_type, end, name)

    # Event construction

    def _emit(self, event_type: EventType, end: int, name: Optional[bytes] = None) -> Event:
        raw = bytes(self._buffer[self._pos:end])
        event = Event(event_type, raw, self.position, name)
        self._pos = end
        self._advance(raw)
        self.events_read += 1
        return event

    def _advance(self, raw: bytes) -> None:
        self._offset += len(raw)
        newlines = raw.count(b"\n")
        if newlines:
            self._line += newlines
            self._column = len(raw) - raw.rfind(b"\n")
        else:
            self._column += len(raw)

    def _error(self, message: str) -> ParseError:
        return ParseError(message, self.source_name, self.position)
