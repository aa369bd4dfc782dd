"""Streaming XML tokenization for GPX joining.

This module turns binary streams into XML events that keep their original
bytes, and writes such events back out unchanged.

Key Components:
    XMLEventReader: Pull reader producing one event per call
    XMLEventWriter: Verbatim writer for events
    Event: A single event with its raw bytes, name and position
    EventType: Enumeration of all event kinds
    EventPosition: Line, column and byte offset of an event
"""

from .events import (
    Event,
    EventPosition,
    EventType,
)
from .reader import XMLEventReader
from .writer import XMLEventWriter

__all__ = [
    "Event",
    "EventPosition",
    "EventType",
    "XMLEventReader",
    "XMLEventWriter",
]
