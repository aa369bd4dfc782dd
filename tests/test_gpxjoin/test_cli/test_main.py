"""Tests for the CLI main module."""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from gpxjoin import __version__
from gpxjoin.cli.main import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    format_usage,
    load_config,
    main,
    parse_args,
)
from gpxjoin.shared.config import ENV_CONFIG_FILE, JoinConfig

TEMPLATE = b'<?xml version="1.0"?>\n<gpx><metadata>M</metadata><trk>A</trk></gpx>\n'
CONTRIBUTOR = b'<?xml version="1.0"?>\n<gpx><metadata>N</metadata><trk>B</trk></gpx>\n'


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep configuration variables from leaking into CLI runs."""
    for name in ("GPXJOIN_CONFIG", "GPXJOIN_LOG_LEVEL", "GPXJOIN_CHUNK_SIZE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def gpx_files(tmp_path):
    template = tmp_path / "template.gpx"
    contributor = tmp_path / "contributor.gpx"
    template.write_bytes(TEMPLATE)
    contributor.write_bytes(CONTRIBUTOR)
    return template, contributor


class TestParseArgs:
    """Test command-line parsing."""

    def test_paths_in_order(self):
        """Test that paths keep their order."""
        args = parse_args(["a.gpx", "b.gpx", "c.gpx"])
        assert args.paths == [Path("a.gpx"), Path("b.gpx"), Path("c.gpx")]
        assert args.show_help is False

    @pytest.mark.parametrize("flag", ["-h", "--help", "-V", "--version"])
    def test_help_flags(self, flag):
        """Test every help flag."""
        assert parse_args(["a.gpx", flag, "b.gpx"]).show_help is True

    def test_double_dash_stops_flags(self):
        """Test that arguments after -- are paths."""
        args = parse_args(["a.gpx", "--", "-h", "--", "--version"])
        assert args.show_help is False
        assert args.paths == [Path("a.gpx"), Path("-h"), Path("--"), Path("--version")]

    def test_unknown_flags_are_paths(self):
        """Test that unrecognized dash arguments are treated as paths."""
        args = parse_args(["-x.gpx"])
        assert args.paths == [Path("-x.gpx")]

    def test_no_arguments(self):
        """Test parsing an empty command line."""
        args = parse_args([])
        assert args.paths == []
        assert args.show_help is False


class TestFormatUsage:
    """Test the usage banner."""

    def test_banner(self):
        """Test banner contents."""
        usage = format_usage()
        assert usage.startswith(f"gpxjoin v{__version__} (c) 2021")
        assert "usage: gpxjoin <file1.gpx> [<file2.gpx>, ...] > out.gpx" in usage
        assert "Writes result to standard output." in usage


class TestLoadConfig:
    """Test CLI configuration loading."""

    def test_defaults(self):
        """Test defaults with an empty environment."""
        assert load_config({}) == JoinConfig()

    def test_bad_config_falls_back(self, tmp_path, capsys):
        """Test that an unreadable config file only warns."""
        config = load_config({ENV_CONFIG_FILE: str(tmp_path / "missing.json")})
        assert config == JoinConfig()
        assert "Warning: Could not load configuration" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "reader", [{"max_depth": "10"}, {"chunk_size": True}, {"chunk_size": [1]}]
    )
    def test_wrongly_typed_config_falls_back(self, reader, tmp_path, capsys):
        """Test that wrongly typed config values only warn."""
        config_path = tmp_path / "gpxjoin.json"
        config_path.write_text(json.dumps({"reader": reader}))
        config = load_config({ENV_CONFIG_FILE: str(config_path)})
        assert config == JoinConfig()
        assert "Warning: Could not load configuration" in capsys.readouterr().err

    def test_main_runs_with_bad_config(self, gpx_files, tmp_path, monkeypatch, capsysbinary):
        """Test that a bad config file does not stop a merge."""
        template, _ = gpx_files
        config_path = tmp_path / "gpxjoin.json"
        config_path.write_text(json.dumps({"reader": {"max_depth": "10"}}))
        monkeypatch.setenv(ENV_CONFIG_FILE, str(config_path))
        assert main([str(template)]) == EXIT_OK
        captured = capsysbinary.readouterr()
        assert captured.out == TEMPLATE
        assert b"Warning: Could not load configuration" in captured.err


class TestMain:
    """Test the CLI entry point."""

    def test_merge(self, gpx_files, capsysbinary):
        """Test a successful merge to stdout."""
        template, contributor = gpx_files
        assert main([str(template), str(contributor)]) == EXIT_OK
        captured = capsysbinary.readouterr()
        assert captured.out == (
            b'<?xml version="1.0"?>\n<gpx><metadata>M</metadata>'
            b"<trk>A</trk><trk>B</trk></gpx>\n"
        )

    def test_single_file_unchanged(self, gpx_files, capsysbinary):
        """Test that one file is copied unchanged."""
        template, _ = gpx_files
        assert main([str(template)]) == EXIT_OK
        assert capsysbinary.readouterr().out == TEMPLATE

    def test_path_after_double_dash(self, tmp_path, monkeypatch, capsysbinary):
        """Test merging a file whose name looks like a flag."""
        (tmp_path / "-h").write_bytes(TEMPLATE)
        monkeypatch.chdir(tmp_path)
        assert main(["--", "-h"]) == EXIT_OK
        assert capsysbinary.readouterr().out == TEMPLATE

    @pytest.mark.parametrize("flag", ["-h", "--help", "-V", "--version"])
    def test_help(self, flag, gpx_files, capsysbinary):
        """Test that help prints the banner and fails without output."""
        template, _ = gpx_files
        assert main([str(template), flag]) == EXIT_FAILURE
        captured = capsysbinary.readouterr()
        assert captured.out == b""
        assert b"usage: gpxjoin" in captured.err

    def test_no_paths(self, capsysbinary):
        """Test running without any path."""
        assert main([]) == EXIT_FAILURE
        captured = capsysbinary.readouterr()
        assert captured.out == b""
        assert b"need at least one source file" in captured.err

    def test_missing_path(self, tmp_path, capsysbinary):
        """Test a nonexistent input."""
        assert main([str(tmp_path / "missing.gpx")]) == EXIT_FAILURE
        captured = capsysbinary.readouterr()
        assert captured.out == b""
        assert b"failed to open" in captured.err
        assert b"missing.gpx" in captured.err

    def test_malformed_contributor(self, gpx_files, tmp_path, capsysbinary):
        """Test that a bad contributor fails the run."""
        template, _ = gpx_files
        broken = tmp_path / "broken.gpx"
        broken.write_bytes(b"<gpx><trk></gpx>")
        assert main([str(template), str(broken)]) == EXIT_FAILURE
        err = capsysbinary.readouterr().err
        assert b"error:" in err
        assert b"start/end tag mismatch" in err
        assert b"broken.gpx" in err

    def test_keyboard_interrupt(self, gpx_files, monkeypatch, capsysbinary):
        """Test handling of an interrupted run."""
        template, _ = gpx_files

        def interrupted(*args, **kwargs):
            raise KeyboardInterrupt

        # gpxjoin.cli re-exports main, so reach the module through sys.modules
        monkeypatch.setattr(sys.modules["gpxjoin.cli.main"], "join_files", interrupted)
        assert main([str(template)]) == EXIT_INTERRUPTED
        assert b"interrupted" in capsysbinary.readouterr().err

    def test_argv_defaults_to_sys_argv(self, gpx_files, capsysbinary):
        """Test reading arguments from sys.argv."""
        template, _ = gpx_files
        with patch("sys.argv", ["gpxjoin", str(template)]):
            assert main() == EXIT_OK
        assert capsysbinary.readouterr().out == TEMPLATE
