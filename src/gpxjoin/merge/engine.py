"""Streaming GPX merge engine.

The engine copies the first source (the template) to the output until the
template's root element is about to close, pauses it, appends the track
subtrees of every later source (the contributors) in order, then writes the
template's root close and whatever follows it.

All of this happens in one pass over each input, one event at a time, with
no document tree: an ``ElementPath`` per source is enough to classify every
event.
"""

import time
import uuid
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, BinaryIO, Iterable, Optional

from gpxjoin.shared.config import JoinConfig
from gpxjoin.shared.errors import (
    GPXJoinError,
    MissingTemplateRootCloseError,
    NoSourcesError,
    ParseError,
)
from gpxjoin.shared.logging import get_logger
from gpxjoin.shared.result import JoinResult, SourceRole, SourceStats
from gpxjoin.tokenization import Event, EventType, XMLEventReader, XMLEventWriter

from .path import ElementPath
from .sources import PathLike, SourceStream, as_source, iter_path_sources

MS_PER_SECOND = 1000


class JoinState(Enum):
    """Phases of a join run."""

    TEMPLATE_HEADER = auto()  # Copying the template up to its root close
    CONTRIBUTORS = auto()     # Copying track subtrees from later sources
    TEMPLATE_TAIL = auto()    # Writing the root close and the rest of the template
    DONE = auto()             # Run completed


@dataclass
class PendingRootClose:
    """The paused template, held back until every contributor is drained.

    ``event`` is the template's root end tag, already read and checked but not
    yet written. ``reader`` is positioned right after it.
    """

    source: SourceStream
    reader: XMLEventReader
    event: Event
    path: ElementPath
    stats: SourceStats


class GPXJoiner:
    """Merges GPX sources into a single document written to ``dest``."""

    def __init__(
        self,
        dest: BinaryIO,
        config: Optional[JoinConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the joiner.

        Args:
            dest: Binary sink receiving the merged document
            config: Join configuration; defaults are used when omitted
            correlation_id: Optional correlation ID; one is generated when
                neither this nor the configuration provides it
        """
        self.config = config or JoinConfig()
        self.correlation_id = (
            correlation_id or self.config.correlation_id or uuid.uuid4().hex
        )
        self.writer = XMLEventWriter(dest)
        self.logger = get_logger(__name__, self.correlation_id, "merge_engine")
        self.state = JoinState.TEMPLATE_HEADER

        self._root_path = self.config.merge.root_path
        self._track_path = self.config.merge.track_path
        self._max_depth = self.config.reader.max_depth

    def join(self, sources: Iterable[Any]) -> JoinResult:
        """Merge ``sources`` in order into the output.

        Args:
            sources: Binary streams or ``SourceStream`` objects; the first is
                the template. Sources are pulled from the iterable one at a
                time, only after the previous one has been fully read.

        Returns:
            JoinResult with per-source statistics

        Raises:
            GPXJoinError: On the first failure. Output written before the
                failure is left in the sink.
        """
        start_time = time.time()
        result = JoinResult(correlation_id=self.correlation_id)
        self.state = JoinState.TEMPLATE_HEADER
        iterator = iter(sources)

        self.logger.info(
            "Starting join",
            extra={
                "root_tag": self.config.merge.root_tag,
                "track_tag": self.config.merge.track_tag,
            }
        )

        try:
            first = next(iterator, None)
            if first is None:
                raise NoSourcesError()
            template = as_source(first, 0)
            try:
                pending = self._stream_template_header(template, result)

                self._transition(JoinState.CONTRIBUTORS)
                for index, item in enumerate(iterator, start=1):
                    self._stream_contributor(as_source(item, index), result)

                self._transition(JoinState.TEMPLATE_TAIL)
                self._resume_template_tail(pending)
            finally:
                template.close()
            self.writer.flush()
        except GPXJoinError as e:
            # Re-raised for the caller to report, so no traceback here
            self.logger.error(
                "Join failed",
                extra={"error": str(e), "state": self.state.name, "source": e.source},
                exc_info=False
            )
            raise

        self._transition(JoinState.DONE)
        result.bytes_written = self.writer.bytes_written
        result.events_written = self.writer.events_written
        result.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND

        self.logger.info("Join completed", extra=result.summary())
        return result

    def _transition(self, state: JoinState) -> None:
        self.logger.debug(
            "State transition",
            extra={"from_state": self.state.name, "to_state": state.name}
        )
        self.state = state

    def _open_reader(self, source: SourceStream) -> XMLEventReader:
        return XMLEventReader(
            source.stream,
            source_name=source.name,
            chunk_size=self.config.reader.chunk_size,
        )

    def _stream_template_header(
        self, template: SourceStream, result: JoinResult
    ) -> PendingRootClose:
        """Copy the template verbatim until its root end tag.

        Raises:
            MissingTemplateRootCloseError: If the template ends first
        """
        stats = SourceStats(template.name, SourceRole.TEMPLATE)
        result.sources.append(stats)
        reader = self._open_reader(template)
        path = ElementPath(template.name)

        while True:
            event = reader.read_event()
            if event.is_eof:
                raise MissingTemplateRootCloseError(self.config.merge.root_tag, template.name)
            stats.events_read += 1

            if event.type is EventType.END and path.is_exactly(self._root_path):
                path.pop_expect(event.name)
                self.logger.debug(
                    "Template root closing; pausing template",
                    extra={
                        "source": template.name,
                        "line": event.position.line,
                        "tracks": stats.tracks,
                    }
                )
                return PendingRootClose(template, reader, event, path, stats)

            self._enter(event, path, stats)
            self._write(event, stats)
            self._leave(event, path)

    def _stream_contributor(self, source: SourceStream, result: JoinResult) -> None:
        """Copy only the track subtrees of a contributor."""
        stats = SourceStats(source.name, SourceRole.CONTRIBUTOR)
        result.sources.append(stats)
        try:
            reader = self._open_reader(source)
            path = ElementPath(source.name)
            for event in reader:
                stats.events_read += 1
                self._enter(event, path, stats)
                if path.has_prefix(self._track_path):
                    self._write(event, stats)
                self._leave(event, path)
        finally:
            source.close()

        self.logger.debug(
            "Contributor drained",
            extra={
                "source": source.name,
                "tracks": stats.tracks,
                "events_read": stats.events_read,
                "events_written": stats.events_written,
            }
        )

    def _resume_template_tail(self, pending: PendingRootClose) -> None:
        """Write the held-back root end tag and the rest of the template."""
        self._write(pending.event, pending.stats)
        for event in pending.reader:
            pending.stats.events_read += 1
            self._enter(event, pending.path, pending.stats)
            self._write(event, pending.stats)
            self._leave(event, pending.path)

    def _enter(self, event: Event, path: ElementPath, stats: SourceStats) -> None:
        if not event.opens_element:
            return
        path.push(event.name)
        if self._max_depth is not None and path.depth > self._max_depth:
            raise ParseError(
                f"element nesting deeper than {self._max_depth} levels",
                stats.name,
                event.position,
            )
        if path.is_exactly(self._track_path):
            stats.tracks += 1

    def _leave(self, event: Event, path: ElementPath) -> None:
        # An empty element is entered and left within the same event
        if event.type is EventType.END or event.type is EventType.EMPTY:
            path.pop_expect(event.name)

    def _write(self, event: Event, stats: SourceStats) -> None:
        self.writer.write_event(event)
        stats.events_written += 1


def join_gpx(
    sources: Iterable[Any],
    dest: BinaryIO,
    config: Optional[JoinConfig] = None
) -> JoinResult:
    """Merge GPX documents read from binary streams into ``dest``.

    The first source supplies the header, metadata and tail of the output;
    every later source contributes only its ``gpx/trk`` subtrees, appended in
    order just before the root close tag.

    Examples:
        >>> import io
        >>> out = io.BytesIO()
        >>> _ = join_gpx([io.BytesIO(b"<gpx><trk>A</trk></gpx>"),
        ...               io.BytesIO(b"<gpx><trk>B</trk></gpx>")], out)
        >>> out.getvalue()
        b'<gpx><trk>A</trk><trk>B</trk></gpx>'
    """
    return GPXJoiner(dest, config).join(sources)


def join_files(
    paths: Iterable[PathLike],
    dest: BinaryIO,
    config: Optional[JoinConfig] = None
) -> JoinResult:
    """Merge GPX files into ``dest``.

    Each file is opened only when its turn comes and closed as soon as it has
    been read.

    Raises:
        OpenError: If a file cannot be opened
    """
    return join_gpx(iter_path_sources(paths), dest, config)
