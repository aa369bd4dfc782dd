"""Tests for event data types."""

import dataclasses

import pytest

from gpxjoin.tokenization import Event, EventPosition, EventType


class TestEventPosition:
    """Tests for EventPosition."""

    def test_position_creation(self):
        """Test EventPosition creation with valid values."""
        pos = EventPosition(line=5, column=10, offset=50)
        assert pos.line == 5
        assert pos.column == 10
        assert pos.offset == 50

    def test_position_validation(self):
        """Test EventPosition validation for invalid values."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            EventPosition(line=0, column=1, offset=0)

        with pytest.raises(ValueError, match="Column number must be >= 1"):
            EventPosition(line=1, column=0, offset=0)

        with pytest.raises(ValueError, match="Offset must be >= 0"):
            EventPosition(line=1, column=1, offset=-1)


class TestEvent:
    """Tests for Event."""

    def test_opens_element(self):
        """Test which event types push onto the path."""
        position = EventPosition(1, 1, 0)
        assert Event(EventType.START, b"<a>", position, b"a").opens_element
        assert Event(EventType.EMPTY, b"<a/>", position, b"a").opens_element
        assert not Event(EventType.END, b"</a>", position, b"a").opens_element
        assert not Event(EventType.TEXT, b"a", position).opens_element

    def test_eof(self):
        """Test EOF detection."""
        position = EventPosition(1, 1, 0)
        assert Event(EventType.EOF, b"", position).is_eof
        assert not Event(EventType.COMMENT, b"<!---->", position).is_eof

    def test_immutable(self):
        """Test that events cannot be modified."""
        event = Event(EventType.TEXT, b"x", EventPosition(1, 1, 0))
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.raw = b"y"

    def test_str(self):
        """Test the short description."""
        event = Event(EventType.START, b"<a>", EventPosition(3, 7, 40), b"a")
        assert str(event) == "START@3:7"
