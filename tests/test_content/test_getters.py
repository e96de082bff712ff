"""Tests for the type-specific content getters."""

from unittest.mock import patch

import pytest

from jen.content import CsvContent, HtmlContent, SvgContent, UnknownContent, get_content
from jen.exceptions import FetchError, ResourceNotFound
from jen.fetch import FileFetcher
from jen.refs import Reference


@pytest.fixture
def site(tmp_path):
    """A site root with a few files."""
    (tmp_path / "index.html").write_text("<html><body><p>hi</p></body></html>")
    (tmp_path / "icon.svg").write_text('<svg xmlns="http://www.w3.org/2000/svg"/>')
    (tmp_path / "broken.svg").write_text("<svg><unclosed></svg>")
    (tmp_path / "data.csv").write_bytes(b"\xef\xbb\xbfname,age\nann,3\nbob,4\n")
    (tmp_path / "empty.csv").write_text("")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG")
    return tmp_path


def ref_for(site, name):
    return Reference.create(site / name, root=site)


class TestGetContent:
    """Tests for get_content dispatch."""

    @pytest.mark.asyncio
    async def test_html(self, site):
        """Test HTML is parsed into a document."""
        content = await get_content(ref_for(site, "index.html"), "text/html", FileFetcher())
        assert isinstance(content, HtmlContent)
        assert content.type == "html"
        assert len(list(content.document.elements("p"))) == 1

    @pytest.mark.asyncio
    async def test_svg(self, site):
        content = await get_content(ref_for(site, "icon.svg"), "image/svg+xml", FileFetcher())
        assert isinstance(content, SvgContent)
        assert content.type == "svg"

    @pytest.mark.asyncio
    async def test_malformed_svg(self, site):
        """Test unparseable SVG is a generic FetchError, not 'not found'."""
        with pytest.raises(FetchError) as exc_info:
            await get_content(ref_for(site, "broken.svg"), "image/svg+xml", FileFetcher())
        assert not isinstance(exc_info.value, ResourceNotFound)

    @pytest.mark.asyncio
    async def test_csv(self, site):
        """Test the first row becomes the headers and the BOM is dropped."""
        content = await get_content(ref_for(site, "data.csv"), "text/csv", FileFetcher())
        assert isinstance(content, CsvContent)
        assert content.headers == ["name", "age"]
        assert content.rows == [["ann", "3"], ["bob", "4"]]
        assert content.records()[1] == {"name": "bob", "age": "4"}

    @pytest.mark.asyncio
    async def test_empty_csv(self, site):
        content = await get_content(ref_for(site, "empty.csv"), "text/csv", FileFetcher())
        assert content.headers == []
        assert content.rows == []

    @pytest.mark.asyncio
    async def test_unknown_is_not_read(self, site):
        """Test unknown content is only checked for existence."""
        with patch.object(FileFetcher, "read") as read:
            content = await get_content(ref_for(site, "logo.png"), "image/png", FileFetcher())
        assert isinstance(content, UnknownContent)
        assert content.mime_type == "image/png"
        read.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_missing(self, site):
        with pytest.raises(ResourceNotFound):
            await get_content(ref_for(site, "missing.png"), "image/png", FileFetcher())

    @pytest.mark.asyncio
    async def test_html_missing(self, site):
        with pytest.raises(ResourceNotFound):
            await get_content(ref_for(site, "missing.html"), "text/html", FileFetcher())
