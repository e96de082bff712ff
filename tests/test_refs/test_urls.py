"""Tests for the URL helpers behind Reference."""

import pytest

from jen.exceptions import ResolutionError
from jen.refs.urls import (
    has_scheme,
    is_drive_path,
    merge_paths,
    normalize_slashes,
    normalize_url,
    path_to_url,
    quote_path,
    relative_path,
    remove_dot_segments,
    split_url,
)


class TestRemoveDotSegments:
    """Tests for remove_dot_segments."""

    @pytest.mark.parametrize("path,expected", [
        ("/a/b/c/./../../g", "/a/g"),
        ("/a/b/../c", "/a/c"),
        ("/a/./b/", "/a/b/"),
        ("/../../x", "/x"),
        ("/a/b/..", "/a/"),
        ("/a/b/.", "/a/b/"),
        ("/", "/"),
        ("", ""),
    ])
    def test_examples(self, path, expected):
        """Test RFC 3986 examples and root clamping."""
        assert remove_dot_segments(path) == expected

    def test_relative_path(self):
        """Test relative paths stay relative."""
        assert remove_dot_segments("a/./b/../c") == "a/c"


class TestSchemes:
    """Tests for scheme and drive detection."""

    @pytest.mark.parametrize("value", [
        "http://example.com", "mailto:someone@example.com", "file:///x", "s3://b/k",
    ])
    def test_has_scheme(self, value):
        assert has_scheme(value)

    @pytest.mark.parametrize("value", [
        "C:\\site", "C:/site", "a:b", "index.html", "/abs", "./x:y",
    ])
    def test_not_scheme(self, value):
        """Test drive letters and one-letter prefixes are not schemes."""
        assert not has_scheme(value)

    def test_is_drive_path(self):
        assert is_drive_path("C:\\x")
        assert is_drive_path("d:")
        assert not is_drive_path("http://x")


class TestNormalization:
    """Tests for slash, quoting and URL normalization."""

    def test_normalize_slashes_path_only(self):
        """Test backslashes after '?' or '#' are left alone."""
        assert normalize_slashes("a\\b?x=\\y#\\z") == "a/b?x=\\y#\\z"

    def test_quote_path_idempotent(self):
        """Test quoting twice does not double-encode."""
        once = quote_path("/a b/c.html")
        assert once == "/a%20b/c.html"
        assert quote_path(once) == once

    def test_path_to_url(self):
        assert path_to_url("/tmp/x y/a.html") == "file:///tmp/x%20y/a.html"

    def test_path_to_url_keeps_trailing_slash(self):
        assert path_to_url("/site/") == "file:///site/"

    def test_normalize_url_empty_path(self):
        """Test an authority with no path gets '/'."""
        assert normalize_url("https://example.com") == "https://example.com/"

    def test_normalize_url_file_backslashes(self):
        assert normalize_url("file:///C:\\site\\a.html") == "file:///C:/site/a.html"

    def test_split_url_rejects_bad_port(self):
        with pytest.raises(ResolutionError):
            split_url("http://host:port/")


class TestPaths:
    """Tests for merge_paths and relative_path."""

    def test_merge_onto_directory_of_base(self):
        assert merge_paths("/a/b/c.html", "d.html") == "/a/b/d.html"

    def test_merge_absolute(self):
        assert merge_paths("/a/b/c.html", "/d.html") == "/d.html"

    def test_merge_empty_base(self):
        assert merge_paths("", "d.html") == "/d.html"

    @pytest.mark.parametrize("base_dir,target,expected", [
        ("/a/b/", "/a/b/c.html", "c.html"),
        ("/a/b/", "/a/c.html", "../c.html"),
        ("/a/b/", "/x/y.html", "../../x/y.html"),
        ("/a/b/", "/a/b/", "./"),
        ("/a/b/", "/a/b/c:d.html", "./c:d.html"),
    ])
    def test_relative_path(self, base_dir, target, expected):
        assert relative_path(base_dir, target) == expected
