"""Input sources for the merge engine.

The engine works on any binary readable. These helpers attach a name for
diagnostics and record whether the engine is responsible for closing the
stream, which is the case for files it opened from a path.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Iterator, Union

from gpxjoin.shared.errors import OpenError

PathLike = Union[str, Path]


@dataclass
class SourceStream:
    """A readable binary stream and the name it is reported under."""

    name: str
    stream: BinaryIO
    owned: bool = False

    def close(self) -> None:
        """Close the stream if it was opened on the caller's behalf."""
        if self.owned and not getattr(self.stream, "closed", False):
            self.stream.close()


def as_source(obj: Any, index: int) -> SourceStream:
    """Wrap a raw stream as a source, keeping existing sources unchanged.

    Streams passed in by the caller are never closed by the engine.
    """
    if isinstance(obj, SourceStream):
        return obj
    name = getattr(obj, "name", None)
    if not isinstance(name, str):
        name = f"<source {index}>"
    return SourceStream(name=name, stream=obj, owned=False)


def open_source(path: PathLike) -> SourceStream:
    """Open a file for reading as an owned source.

    Raises:
        OpenError: If the file cannot be opened
    """
    try:
        stream = open(path, "rb")
    except OSError as e:
        raise OpenError(str(path), e.strerror or str(e)) from e
    return SourceStream(name=str(path), stream=stream, owned=True)


def iter_path_sources(paths: Iterable[PathLike]) -> Iterator[SourceStream]:
    """Open each path only when the engine asks for the next source."""
    for path in paths:
        yield open_source(path)
