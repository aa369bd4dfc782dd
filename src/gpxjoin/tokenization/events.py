"""XML event types produced by the streaming reader.

Events carry the exact bytes they were read from so they can be forwarded to
the output unchanged.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class EventType(Enum):
    """Lexical units of an XML byte stream."""

    DECLARATION = auto()             # XML declaration: <?xml ... ?>
    PROCESSING_INSTRUCTION = auto()  # Other processing instructions: <?target ... ?>
    DOCTYPE = auto()                 # DOCTYPE declarations
    START = auto()                   # Start tag: <name ...>
    END = auto()                     # End tag: </name>
    EMPTY = auto()                   # Empty-element tag: <name .../>
    TEXT = auto()                    # Character content between markup
    CDATA = auto()                   # CDATA sections: <![CDATA[ ... ]]>
    COMMENT = auto()                 # XML comments: <!-- ... -->
    EOF = auto()                     # End of input


# Event types that open an element in the path
ELEMENT_OPENING_TYPES = frozenset({EventType.START, EventType.EMPTY})


@dataclass(frozen=True)
class EventPosition:
    """Position of the first byte of an event."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass(frozen=True)
class Event:
    """A single XML event and the raw bytes it was read from.

    ``name`` holds the element name for START, END and EMPTY events and the
    target for processing instructions; it is ``None`` for everything else.
    """

    type: EventType
    raw: bytes
    position: EventPosition
    name: Optional[bytes] = None

    @property
    def is_eof(self) -> bool:
        return self.type is EventType.EOF

    @property
    def opens_element(self) -> bool:
        """Whether this event pushes a name onto the element path."""
        return self.type in ELEMENT_OPENING_TYPES

    def __str__(self) -> str:
        return f"{self.type.name}@{self.position.line}:{self.position.column}"
