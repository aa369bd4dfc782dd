"""Tests for element path tracking."""

import pytest

from gpxjoin.merge import ElementPath
from gpxjoin.shared.errors import TagMismatchError


class TestElementPath:
    """Tests for ElementPath."""

    def test_push_and_depth(self):
        """Test that pushing names grows the path."""
        path = ElementPath()
        assert path.depth == 0
        path.push(b"gpx")
        path.push(b"trk")
        assert len(path) == 2
        assert list(path) == [b"gpx", b"trk"]
        assert str(path) == "gpx/trk"

    def test_pop_expect_returns_name(self):
        """Test popping the matching name."""
        path = ElementPath()
        path.push(b"gpx")
        assert path.pop_expect(b"gpx") == b"gpx"
        assert path.depth == 0

    def test_pop_expect_empty_path(self):
        """Test popping with nothing open."""
        path = ElementPath("a.gpx")
        with pytest.raises(TagMismatchError) as exc_info:
            path.pop_expect(b"trk")
        assert exc_info.value.expected is None
        assert exc_info.value.found == b"trk"
        assert exc_info.value.source == "a.gpx"
        assert str(exc_info.value) == "a.gpx: unexpected </trk> tag when path is empty"

    def test_pop_expect_mismatch(self):
        """Test popping a different name than the innermost one."""
        path = ElementPath()
        path.push(b"a")
        path.push(b"b")
        with pytest.raises(TagMismatchError, match=r"expected </b>, saw </a>"):
            path.pop_expect(b"a")

    def test_is_exactly(self):
        """Test exact path comparison."""
        path = ElementPath()
        assert path.is_exactly([])
        path.push(b"gpx")
        assert path.is_exactly([b"gpx"])
        assert path.is_exactly((b"gpx",))
        assert not path.is_exactly([b"trk"])
        path.push(b"trk")
        assert not path.is_exactly([b"gpx"])
        assert path.is_exactly([b"gpx", b"trk"])

    def test_has_prefix(self):
        """Test prefix matching at, below and above the pattern depth."""
        pattern = [b"gpx", b"trk"]
        path = ElementPath()
        path.push(b"gpx")
        assert not path.has_prefix(pattern)
        path.push(b"trk")
        assert path.has_prefix(pattern)
        path.push(b"trkseg")
        assert path.has_prefix(pattern)
        assert path.has_prefix([])

    def test_has_prefix_wrong_branch(self):
        """Test that a different second element does not match."""
        path = ElementPath()
        path.push(b"gpx")
        path.push(b"rte")
        path.push(b"trk")
        assert not path.has_prefix([b"gpx", b"trk"])

    def test_equality(self):
        """Test comparing paths with paths and sequences."""
        first = ElementPath()
        second = ElementPath()
        first.push(b"gpx")
        second.push(b"gpx")
        assert first == second
        assert first == [b"gpx"]
        assert first != [b"trk"]

    def test_unhashable(self):
        """Test that paths cannot be used as dict keys."""
        with pytest.raises(TypeError):
            hash(ElementPath())

    def test_clear(self):
        """Test clearing the path."""
        path = ElementPath()
        path.push(b"gpx")
        path.clear()
        assert path.depth == 0
