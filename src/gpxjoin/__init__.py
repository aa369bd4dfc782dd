"""gpxjoin.

Concatenates GPX track logs by streaming: the first file's header, metadata
and tail are kept, and the tracks of every later file are appended after the
first file's own tracks. Inputs are read event by event and written out byte
for byte, so documents of any size are merged without building a tree.

Progressive API Disclosure:
- Level 1: Simple functions - join_files(), join_gpx()
- Level 2: Configured engine - GPXJoiner class with JoinConfig
"""

__version__ = "0.1.1"
__author__ = "gpxjoin contributors"

from .merge import GPXJoiner, join_files, join_gpx
from .shared.config import JoinConfig, MergeConfig, ReaderConfig
from .shared.errors import (
    ConfigError,
    ConfigValidationError,
    GPXJoinError,
    MissingTemplateRootCloseError,
    NoSourcesError,
    OpenError,
    ParseError,
    TagMismatchError,
    WriteError,
)
from .shared.result import JoinResult, SourceRole, SourceStats

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple join functions
    "join_files",
    "join_gpx",

    # Level 2: Configured engine
    "GPXJoiner",
    "JoinConfig",
    "MergeConfig",
    "ReaderConfig",

    # Results
    "JoinResult",
    "SourceRole",
    "SourceStats",

    # Errors
    "ConfigError",
    "ConfigValidationError",
    "GPXJoinError",
    "MissingTemplateRootCloseError",
    "NoSourcesError",
    "OpenError",
    "ParseError",
    "TagMismatchError",
    "WriteError",
]
