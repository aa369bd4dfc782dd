"""Result objects for GPX join runs.

A run reports per-source statistics and totals for the output it produced.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class SourceRole(Enum):
    """Role a source plays in a join."""

    TEMPLATE = auto()      # Supplies header, metadata and tail
    CONTRIBUTOR = auto()   # Supplies only its track subtrees


@dataclass
class SourceStats:
    """Counters collected while scanning one source."""

    name: str
    role: SourceRole
    events_read: int = 0
    events_written: int = 0
    tracks: int = 0

    @property
    def events_dropped(self) -> int:
        """Events read from this source but not written to the output."""
        return self.events_read - self.events_written


@dataclass
class JoinResult:
    """Outcome of a successful join run."""

    sources: List[SourceStats] = field(default_factory=list)
    bytes_written: int = 0
    events_written: int = 0
    processing_time_ms: float = 0.0
    correlation_id: Optional[str] = None

    @property
    def template(self) -> Optional[SourceStats]:
        """Statistics for the template source."""
        return self.sources[0] if self.sources else None

    @property
    def contributors(self) -> List[SourceStats]:
        """Statistics for every contributor, in merge order."""
        return self.sources[1:]

    @property
    def source_count(self) -> int:
        return len(self.sources)

    @property
    def total_tracks(self) -> int:
        """Number of tracks in the merged document."""
        return sum(stats.tracks for stats in self.sources)

    @property
    def contributed_tracks(self) -> int:
        """Number of tracks taken from contributors."""
        return sum(stats.tracks for stats in self.contributors)

    def summary(self) -> Dict[str, Any]:
        """Get a loggable summary of the run."""
        return {
            "sources": self.source_count,
            "total_tracks": self.total_tracks,
            "contributed_tracks": self.contributed_tracks,
            "bytes_written": self.bytes_written,
            "events_written": self.events_written,
            "processing_time_ms": round(self.processing_time_ms, 3),
        }
