"""Shared utilities for GPX joining.

This module provides configuration objects, error types, result types and
logging helpers used across the reader, writer and merge engine.
"""

from .config import (
    JoinConfig,
    MergeConfig,
    ReaderConfig,
)
from .errors import (
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
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    JoinResult,
    SourceRole,
    SourceStats,
)

__all__ = [
    "JoinConfig",
    "MergeConfig",
    "ReaderConfig",
    "ConfigError",
    "ConfigValidationError",
    "GPXJoinError",
    "MissingTemplateRootCloseError",
    "NoSourcesError",
    "OpenError",
    "ParseError",
    "TagMismatchError",
    "WriteError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "JoinResult",
    "SourceRole",
    "SourceStats",
]
