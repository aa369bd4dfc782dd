"""Event writer that forwards raw event bytes to an output sink.

Events are never re-serialized: the bytes written are exactly the bytes the
reader consumed, so forwarded markup, whitespace and encoding survive intact.
"""

from typing import BinaryIO

from gpxjoin.shared.errors import WriteError

from .events import Event


class XMLEventWriter:
    """Writes events to a binary sink and counts what was written."""

    def __init__(self, sink: BinaryIO) -> None:
        self.sink = sink
        self.events_written = 0
        self.bytes_written = 0

    def write_event(self, event: Event) -> None:
        """Write one event's raw bytes.

        Raises:
            WriteError: If the sink rejects the write
        """
        if not event.raw:
            return
        try:
            self.sink.write(event.raw)
        except (OSError, ValueError) as e:
            raise WriteError(f"failed to write output: {e}") from e
        self.events_written += 1
        self.bytes_written += len(event.raw)

    def flush(self) -> None:
        """Flush the sink if it supports flushing."""
        flush = getattr(self.sink, "flush", None)
        if flush is None:
            return
        try:
            flush()
        except (OSError, ValueError) as e:
            raise WriteError(f"failed to flush output: {e}") from e
