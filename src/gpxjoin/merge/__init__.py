"""Merge engine for GPX joining.

Key Components:
    GPXJoiner: Runs a join from a template and contributor sources
    ElementPath: Stack of open element names used to classify events
    SourceStream: Named input stream handed to the engine
"""

from .engine import (
    GPXJoiner,
    JoinState,
    PendingRootClose,
    join_files,
    join_gpx,
)
from .path import ElementPath
from .sources import (
    SourceStream,
    as_source,
    iter_path_sources,
    open_source,
)

__all__ = [
    "ElementPath",
    "GPXJoiner",
    "JoinState",
    "PendingRootClose",
    "SourceStream",
    "as_source",
    "iter_path_sources",
    "join_files",
    "join_gpx",
    "open_source",
]
