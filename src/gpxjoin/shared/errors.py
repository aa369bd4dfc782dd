"""Error types for GPX joining.

Every failure during a join is fatal: nothing is retried and nothing already
written to the output is rolled back. All errors derive from ``GPXJoinError``
so callers can catch the whole family in one place.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from gpxjoin.tokenization.events import EventPosition


def _display(name: bytes) -> str:
    """Render an element name for messages."""
    return name.decode("utf-8", errors="replace")


class GPXJoinError(Exception):
    """Base class for all join failures."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)


class NoSourcesError(GPXJoinError):
    """Raised when a join is requested without any input."""

    def __init__(self) -> None:
        super().__init__("need at least one source file")


class OpenError(GPXJoinError):
    """Raised when an input path cannot be opened for reading."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"failed to open {path!r}: {reason}")


class ParseError(GPXJoinError):
    """Raised for malformed XML or a failed read from a source."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        position: Optional["EventPosition"] = None
    ) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (line {position.line}, column {position.column})"
        super().__init__(message, source)


class TagMismatchError(GPXJoinError):
    """Raised for an end tag with no open element or crossed tags.

    ``expected`` is the innermost open element, or ``None`` when nothing was
    open. ``found`` is the name in the offending end tag.
    """

    def __init__(
        self,
        expected: Optional[bytes],
        found: bytes,
        source: Optional[str] = None
    ) -> None:
        self.expected = expected
        self.found = found
        if expected is None:
            message = f"unexpected </{_display(found)}> tag when path is empty"
        else:
            message = (
                f"start/end tag mismatch: expected </{_display(expected)}>, "
                f"saw </{_display(found)}>"
            )
        super().__init__(message, source)


class MissingTemplateRootCloseError(GPXJoinError):
    """Raised when the template ends before its root element is closed."""

    def __init__(self, root_tag: str, source: Optional[str] = None) -> None:
        self.root_tag = root_tag
        super().__init__(
            f"reached end of input without seeing </{root_tag}> at the top level",
            source,
        )


class WriteError(GPXJoinError):
    """Raised when the output sink rejects a write."""


class ConfigError(GPXJoinError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        self.field_name = field_name
        super().__init__(message)
