"""Main CLI entry point for the gpxjoin command-line tool.

Usage: ``gpxjoin <file1.gpx> [<file2.gpx>, ...] > out.gpx``

The merged document is written to standard output; diagnostics and logs go
to standard error. Flags are recognized only before a bare ``--``, and any
argument that is not a known flag is treated as a path.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Mapping, Optional

from gpxjoin import __author__, __version__
from gpxjoin.merge import join_files
from gpxjoin.shared.config import JoinConfig
from gpxjoin.shared.errors import ConfigError, GPXJoinError, NoSourcesError
from gpxjoin.shared.logging import configure_logging, get_logger

PROG = "gpxjoin"
HELP_FLAGS = frozenset({"-h", "--help", "-V", "--version"})
END_OF_FLAGS = "--"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


@dataclass
class CLIArguments:
    """Parsed command line."""

    paths: List[Path] = field(default_factory=list)
    show_help: bool = False


def parse_args(argv: List[str]) -> CLIArguments:
    """Split the command line into input paths and the help request.

    Parsing stops at the first help flag.
    """
    args = CLIArguments()
    ignore_flags = False
    for arg in argv:
        if not ignore_flags:
            if arg in HELP_FLAGS:
                args.show_help = True
                return args
            if arg == END_OF_FLAGS:
                ignore_flags = True
                continue
        args.paths.append(Path(arg))
    return args


def format_usage(prog: str = PROG) -> str:
    """Build the banner printed for -h/--help/-V/--version."""
    return (
        f"{prog} v{__version__} (c) 2021 {__author__}\n"
        f"usage: {prog} <file1.gpx> [<file2.gpx>, ...] > out.gpx\n"
        "Concatenates GPX files by appending tracks from subsequent GPX files "
        "after tracks from the first.\n"
        "Writes result to standard output.\n"
    )


def load_config(environ: Optional[Mapping[str, str]] = None) -> JoinConfig:
    """Load configuration from the environment, falling back to defaults."""
    try:
        return JoinConfig.from_env(environ)
    except ConfigError as e:
        print(f"Warning: Could not load configuration: {e}", file=sys.stderr)
        return JoinConfig()


def _stdout_sink() -> BinaryIO:
    return getattr(sys.stdout, "buffer", sys.stdout)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]
    args = parse_args(argv)

    if args.show_help:
        print(format_usage(), end="", file=sys.stderr)
        return EXIT_FAILURE

    config = load_config()
    configure_logging(config.logging_level)
    logger = get_logger(__name__, config.correlation_id, "cli")

    if not args.paths:
        print(f"error: {NoSourcesError()}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        result = join_files(args.paths, _stdout_sink(), config)
    except GPXJoinError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED

    logger.info("Merged GPX files", extra=result.summary())
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
