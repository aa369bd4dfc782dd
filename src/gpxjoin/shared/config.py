"""Configuration classes for GPX joining.

This module provides configuration objects for the event reader and the merge
engine, plus loading from dictionaries, JSON files and the environment.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import ConfigValidationError

# Environment variables understood by JoinConfig.from_env()
ENV_CONFIG_FILE = "GPXJOIN_CONFIG"
ENV_LOG_LEVEL = "GPXJOIN_LOG_LEVEL"
ENV_CHUNK_SIZE = "GPXJOIN_CHUNK_SIZE"

DEFAULT_CHUNK_SIZE = 8192
LOW_MEMORY_CHUNK_SIZE = 1024
LARGE_FILE_CHUNK_SIZE = 1024 * 1024

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Bytes that can never appear in a tag name we match against
_INVALID_TAG_BYTES = set(b" \t\r\n<>/=\"'")


def _validate_tag(value: str, field_name: str) -> None:
    if not isinstance(value, str) or not value:
        raise ConfigValidationError(f"{field_name} must be a non-empty string", field_name)
    if any(byte in _INVALID_TAG_BYTES for byte in value.encode("utf-8")):
        raise ConfigValidationError(
            f"{field_name} contains characters not allowed in an element name: {value!r}",
            field_name,
        )


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid size
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class ReaderConfig:
    """Configuration for the streaming event reader."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_depth: Optional[int] = None  # None disables the nesting limit

    def __post_init__(self) -> None:
        """Validate reader configuration."""
        if not _is_int(self.chunk_size) or self.chunk_size <= 0:
            raise ConfigValidationError("chunk_size must be an integer > 0", "chunk_size")
        if self.max_depth is not None and (not _is_int(self.max_depth) or self.max_depth <= 0):
            raise ConfigValidationError("max_depth must be an integer > 0 or None", "max_depth")


@dataclass
class MergeConfig:
    """Element names that drive the merge."""

    root_tag: str = "gpx"
    track_tag: str = "trk"

    def __post_init__(self) -> None:
        """Validate merge configuration."""
        _validate_tag(self.root_tag, "root_tag")
        _validate_tag(self.track_tag, "track_tag")

    @property
    def root_path(self) -> Tuple[bytes, ...]:
        """Path of the document root element."""
        return (self.root_tag.encode("utf-8"),)

    @property
    def track_path(self) -> Tuple[bytes, ...]:
        """Path prefix that marks a track subtree."""
        return self.root_path + (self.track_tag.encode("utf-8"),)


@dataclass
class JoinConfig:
    """Complete configuration for a join run."""

    reader: ReaderConfig = field(default_factory=ReaderConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)

    correlation_id: Optional[str] = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate join configuration."""
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}", "log_level"
            )
        self.log_level = self.log_level.upper()
        if self.correlation_id is not None and not isinstance(self.correlation_id, str):
            raise ConfigValidationError("correlation_id must be a string", "correlation_id")

    @property
    def logging_level(self) -> int:
        """Numeric logging level for the configured level name."""
        return getattr(logging, self.log_level)

    @classmethod
    def default(cls) -> "JoinConfig":
        """Create the default configuration."""
        return cls()

    @classmethod
    def low_memory(cls) -> "JoinConfig":
        """Create configuration that keeps read buffers small."""
        return cls(reader=ReaderConfig(chunk_size=LOW_MEMORY_CHUNK_SIZE))

    @classmethod
    def large_files(cls) -> "JoinConfig":
        """Create configuration with large read chunks for big track logs."""
        return cls(reader=ReaderConfig(chunk_size=LARGE_FILE_CHUNK_SIZE))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration
        """
        return {
            "reader": {
                "chunk_size": self.reader.chunk_size,
                "max_depth": self.reader.max_depth,
            },
            "merge": {
                "root_tag": self.merge.root_tag,
                "track_tag": self.merge.track_tag,
            },
            "correlation_id": self.correlation_id,
            "log_level": self.log_level,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JoinConfig":
        """Create configuration from dictionary.

        Args:
            data: Dictionary containing configuration data; missing keys keep
                their defaults

        Returns:
            JoinConfig instance created from dictionary

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        if not isinstance(data, Mapping):
            raise ConfigValidationError("configuration must be a JSON object")

        sections = {"reader": ReaderConfig, "merge": MergeConfig}
        known = set(sections) | {"correlation_id", "log_level"}
        unknown = set(data) - known
        if unknown:
            name = sorted(unknown)[0]
            raise ConfigValidationError(f"unknown configuration key: {name}", name)

        values: Dict[str, Any] = {}
        for key, section_class in sections.items():
            section = data.get(key)
            if section is None:
                continue
            if not isinstance(section, Mapping):
                raise ConfigValidationError(f"{key} must be an object", key)
            allowed = set(section_class.__dataclass_fields__)
            for name in section:
                if name not in allowed:
                    raise ConfigValidationError(
                        f"unknown configuration key: {key}.{name}", f"{key}.{name}"
                    )
            values[key] = section_class(**section)

        for key in ("correlation_id", "log_level"):
            if key in data:
                values[key] = data[key]
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "JoinConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"invalid JSON configuration: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "JoinConfig":
        """Load configuration from a JSON file.

        Raises:
            ConfigValidationError: If the file cannot be read or is invalid
        """
        path = Path(config_path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigValidationError(f"could not read config file {path}: {e}") from e
        return cls.from_json(text)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "JoinConfig":
        """Build configuration from environment variables.

        ``GPXJOIN_CONFIG`` names a JSON file loaded first; ``GPXJOIN_LOG_LEVEL``
        and ``GPXJOIN_CHUNK_SIZE`` override individual values on top of it.
        """
        env = os.environ if environ is None else environ

        config_file = env.get(ENV_CONFIG_FILE)
        config = cls.from_file(config_file) if config_file else cls()

        log_level = env.get(ENV_LOG_LEVEL)
        if log_level:
            config = cls(
                reader=config.reader,
                merge=config.merge,
                correlation_id=config.correlation_id,
                log_level=log_level,
            )

        chunk_size = env.get(ENV_CHUNK_SIZE)
        if chunk_size:
            try:
                size = int(chunk_size)
            except ValueError as e:
                raise ConfigValidationError(
                    f"{ENV_CHUNK_SIZE} must be an integer, got {chunk_size!r}", "chunk_size"
                ) from e
            config.reader = ReaderConfig(chunk_size=size, max_depth=config.reader.max_depth)

        return config
