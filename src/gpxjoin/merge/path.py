"""Element path tracking.

``ElementPath`` is the stack of open element names from the document root to
the current parse position. It replaces a DOM: every classification the merge
engine needs is a query against this stack.
"""

from typing import Iterator, List, Optional, Sequence

from gpxjoin.shared.errors import TagMismatchError


class ElementPath:
    """Stack of open element names, pushed and popped with start and end tags."""

    def __init__(self, source_name: Optional[str] = None) -> None:
        """Initialize an empty path.

        Args:
            source_name: Source reported in ``TagMismatchError`` messages
        """
        self.source_name = source_name
        self._names: List[bytes] = []

    @property
    def depth(self) -> int:
        return len(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._names)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ElementPath):
            return self._names == other._names
        if isinstance(other, (list, tuple)):
            return self.is_exactly(other)
        return NotImplemented

    # Mutable, so never usable as a dict key
    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "/".join(name.decode("utf-8", errors="replace") for name in self._names)

    def __repr__(self) -> str:
        return f"ElementPath({str(self)!r})"

    def push(self, name: bytes) -> None:
        """Enter an element."""
        self._names.append(name)

    def pop_expect(self, name: bytes) -> bytes:
        """Leave the innermost element, which must be ``name``.

        Returns:
            The removed name

        Raises:
            TagMismatchError: If no element is open or the innermost open
                element has a different name
        """
        if not self._names:
            raise TagMismatchError(None, name, self.source_name)
        popped = self._names.pop()
        if popped != name:
            raise TagMismatchError(popped, name, self.source_name)
        return popped

    def is_exactly(self, pattern: Sequence[bytes]) -> bool:
        """Check whether the path equals ``pattern``."""
        if len(self._names) != len(pattern):
            return False
        return all(name == expected for name, expected in zip(self._names, pattern))

    def has_prefix(self, pattern: Sequence[bytes]) -> bool:
        """Check whether the path starts with ``pattern``.

        The path itself counts, so ``[gpx, trk]`` matches while inside the
        ``trk`` element as well as at its own start and end tags.
        """
        if len(self._names) < len(pattern):
            return False
        return all(name == expected for name, expected in zip(self._names, pattern))

    def clear(self) -> None:
        self._names.clear()
