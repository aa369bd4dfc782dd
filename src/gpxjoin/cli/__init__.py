"""Command-line interface module for gpxjoin.

This module provides the ``gpxjoin`` command that merges GPX files given on
the command line and writes the result to standard output.
"""

from .main import main

__all__ = ["main"]
