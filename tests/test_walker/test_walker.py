"""Tests for ContentWalker traversal."""

import asyncio

import pytest

from jen.content import CsvContent, HtmlContent, SvgContent, UnknownContent
from jen.exceptions import CycleError, FetchError, ResolutionError, ResourceNotFound
from jen.fetch import Fetcher, FetcherRegistry, FileFetcher
from jen.refs import Reference
from jen.walker import ContentWalker, CyclePolicy, WalkOptions


class RemoteFetcher(Fetcher):
    """Pretends every http(s) resource exists."""

    schemes = ('http', 'https')

    def __init__(self):
        self.checked = []

    async def read(self, ref):
        return b""

    async def check(self, ref):
        self.checked.append(ref.target)


def write(root, name, text):
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def entry_for(root, name="index.html"):
    return Reference.create(root / name, root=root)


async def collect(walker, entry, **kwargs):
    return [item async for item in walker.walk(entry, **kwargs)]


def names(items):
    return [item.content.ref.target.rsplit('/', 1)[-1] for item in items]


@pytest.fixture
def walker():
    return ContentWalker(FileFetcher())


class TestSnippetScenario:
    """The snippet include example."""

    @pytest.mark.asyncio
    async def test_two_html_entries(self, tmp_path, walker):
        """Test index.html plus the snippet it includes, with source location."""
        write(tmp_path, "index.html",
              "<!DOCTYPE html>\n"
              "<html>\n"
              "<body>\n"
              "  <x-jen-snippet src=\"./header.html\"></x-jen-snippet>\n"
              "</body>\n"
              "</html>\n")
        write(tmp_path, "header.html", "<header>Site</header>\n")
        entry = entry_for(tmp_path)

        items = await collect(walker, entry)

        assert names(items) == ["index.html", "header.html"]
        assert all(isinstance(item.content, HtmlContent) for item in items)
        assert items[0].source is None
        source = items[1].source
        assert source.ref is entry
        assert source.attribute == "src"
        assert (source.line, source.column) == (4, 3)
        assert items[1].content.ref.referrer is entry

    @pytest.mark.asyncio
    async def test_source_renders_location(self, tmp_path, walker):
        write(tmp_path, "index.html", '<x-jen-snippet src="h.html"></x-jen-snippet>')
        write(tmp_path, "h.html", "<p>h</p>")
        items = await collect(walker, entry_for(tmp_path))
        assert str(items[1].source) == f"{tmp_path / 'index.html'}:1:1 (src)"


class TestCycles:
    """Tests for cycle policies on A -> B -> A."""

    @pytest.fixture
    def cyclic(self, tmp_path):
        write(tmp_path, "a.html", '<a href="b.html">B</a>')
        write(tmp_path, "b.html", '<a href="a.html">A</a>')
        return entry_for(tmp_path, "a.html")

    @pytest.mark.asyncio
    async def test_prune_is_default(self, cyclic, walker):
        """Test PRUNE yields A and B but no second A."""
        assert names(await collect(walker, cyclic)) == ["a.html", "b.html"]

    @pytest.mark.asyncio
    async def test_fail(self, cyclic, walker):
        """Test FAIL raises with the chain in order."""
        seen = []
        options = WalkOptions(cycle_policy=CyclePolicy.FAIL)
        with pytest.raises(CycleError) as exc_info:
            async for item in walker.walk(cyclic, options=options):
                seen.append(item)
        chain = exc_info.value.chain
        assert [t.rsplit('/', 1)[-1] for t in chain] == ["a.html", "b.html", "a.html"]
        message = str(exc_info.value)
        assert message.index("a.html") < message.index("b.html")
        assert names(seen) == ["a.html", "b.html"]

    @pytest.mark.asyncio
    async def test_allow_is_unbounded(self, cyclic, walker):
        """Test ALLOW keeps going; the caller has to stop it."""
        walk = walker.walk(cyclic, options=WalkOptions(cycle_policy=CyclePolicy.ALLOW))
        items = []
        async for item in walk:
            items.append(item)
            if len(items) == 5:
                break
        await walk.aclose()
        assert names(items) == ["a.html", "b.html", "a.html", "b.html", "a.html"]

    @pytest.mark.asyncio
    async def test_self_link_with_fragment_pruned(self, tmp_path, walker):
        """Test a link back to the same page with a fragment is a cycle."""
        write(tmp_path, "index.html", '<a href="index.html#top">top</a><a href="#x">x</a>')
        assert names(await collect(walker, entry_for(tmp_path))) == ["index.html"]

    @pytest.mark.asyncio
    async def test_diamond_yields_shared_node_twice(self, tmp_path, walker):
        """Test only the resolution chain counts, not a global visited set."""
        write(tmp_path, "a.html", '<a href="b.html">b</a>\n<a href="c.html">c</a>')
        write(tmp_path, "b.html", '<a href="d.html">d</a>')
        write(tmp_path, "c.html", '<a href="d.html">d</a>')
        write(tmp_path, "d.html", '<p>d</p>')
        items = await collect(walker, entry_for(tmp_path, "a.html"))
        assert names(items) == ["a.html", "b.html", "d.html", "c.html", "d.html"]


class TestRemoteAndSkipped:
    """Tests for remote gating and skipped values."""

    @pytest.mark.asyncio
    async def test_remote_skipped_by_default(self, tmp_path):
        write(tmp_path, "index.html", '<script src="https://cdn.example.com/lib.js"></script>')
        remote = RemoteFetcher()
        walker = ContentWalker(FetcherRegistry([FileFetcher(), remote]))
        assert names(await collect(walker, entry_for(tmp_path))) == ["index.html"]
        assert remote.checked == []

    @pytest.mark.asyncio
    async def test_remote_followed_when_enabled(self, tmp_path):
        write(tmp_path, "index.html", '<script src="https://cdn.example.com/lib.js"></script>')
        remote = RemoteFetcher()
        walker = ContentWalker(FetcherRegistry([FileFetcher(), remote]))
        items = await collect(walker, entry_for(tmp_path),
                              options=WalkOptions(follow_remote_references=True))
        assert len(items) == 2
        assert isinstance(items[1].content, UnknownContent)
        assert items[1].content.mime_type == "application/javascript"
        assert remote.checked == ["https://cdn.example.com/lib.js"]

    @pytest.mark.asyncio
    async def test_non_fetchable_schemes(self, tmp_path, walker):
        """Test mailto, javascript, data and tel values are ignored."""
        write(tmp_path, "index.html",
              '<a href="mailto:me@example.com">m</a>'
              '<a href="javascript:void(0)">j</a>'
              '<img src="data:image/png;base64,AAAA">'
              '<a href="tel:+15551234">t</a>'
              '<a href="">empty</a>')
        assert names(await collect(walker, entry_for(tmp_path))) == ["index.html"]

    @pytest.mark.asyncio
    async def test_schemes_without_fetcher_skipped(self, tmp_path):
        """Test about:, sms: and ftp: links do not fail a walk following remotes."""
        write(tmp_path, "index.html",
              '<iframe src="about:blank"></iframe>'
              '<a href="sms:+15551234">s</a>'
              '<a href="ftp://files.example.com/a.zip">f</a>'
              '<a href="https://example.com/">h</a>')
        remote = RemoteFetcher()
        walker = ContentWalker(FetcherRegistry([FileFetcher(), remote]))
        observed = []
        items = await collect(walker, entry_for(tmp_path),
                              options=WalkOptions(follow_remote_references=True,
                                                  observe=observed.append))
        assert len(items) == 2
        assert remote.checked == ["https://example.com/"]
        assert [ref.scheme for ref in observed] == ["file", "https"]


class TestNotFound:
    """Tests for the not-found policy and the observe hook."""

    @pytest.fixture
    def broken(self, tmp_path):
        write(tmp_path, "index.html", '<img src="missing.png"><a href="ok.html">ok</a>')
        write(tmp_path, "ok.html", "<p>ok</p>")
        return entry_for(tmp_path)

    @pytest.mark.asyncio
    async def test_missing_raises_by_default(self, broken, walker):
        with pytest.raises(ResourceNotFound):
            await collect(walker, broken)

    @pytest.mark.asyncio
    async def test_ignore_not_found(self, broken, walker):
        """Test a missing resource ends only its own branch."""
        items = await collect(walker, broken, options=WalkOptions(ignore_not_found=True))
        assert names(items) == ["index.html", "ok.html"]

    @pytest.mark.asyncio
    async def test_observe_sees_missing_resources(self, broken, walker):
        observed = []
        options = WalkOptions(ignore_not_found=True, observe=observed.append)
        await collect(walker, broken, options=options)
        assert [ref.target.rsplit('/', 1)[-1] for ref in observed] == \
            ["index.html", "missing.png", "ok.html"]

    @pytest.mark.asyncio
    async def test_other_fetch_errors_propagate(self, tmp_path, walker):
        """Test ignore_not_found does not hide malformed content."""
        write(tmp_path, "index.html", '<img src="bad.svg">')
        write(tmp_path, "bad.svg", "<svg><oops></svg>")
        with pytest.raises(FetchError):
            await collect(walker, entry_for(tmp_path),
                          options=WalkOptions(ignore_not_found=True))

    @pytest.mark.asyncio
    async def test_resolution_error_propagates(self, tmp_path, walker):
        write(tmp_path, "index.html", '<a href="http://[::1/x">bad</a>')
        with pytest.raises(ResolutionError):
            await collect(walker, entry_for(tmp_path))


class TestContentTypes:
    """Tests for MIME inference and typed content."""

    @pytest.mark.asyncio
    async def test_mime_inference(self, tmp_path, walker):
        """Test explicit type, script default and extension sniffing."""
        write(tmp_path, "index.html",
              '<link href="theme" type="text/css">\n'
              '<script src="app"></script>\n'
              '<a href="data.csv">data</a>\n'
              '<a href="blob">blob</a>\n')
        write(tmp_path, "data.csv", "a\n1\n")
        items = await collect(walker, entry_for(tmp_path),
                              options=WalkOptions(ignore_not_found=True))
        (index,) = [item.content for item in items if item.source is None]

        discovered = [(ref.target.rsplit('/', 1)[-1], mime)
                      for ref, mime, _ in walker.discover(index)]
        assert discovered == [
            ("theme", "text/css"),
            ("app", "application/javascript"),
            ("data.csv", "text/csv"),
            ("blob", "application/octet-stream"),
        ]
        assert any(isinstance(item.content, CsvContent) for item in items)

    @pytest.mark.asyncio
    async def test_document_order(self, tmp_path, walker):
        """Test references come out in source order, not table order."""
        write(tmp_path, "index.html",
              '<img src="first.png">\n<a href="second.html">2</a>\n<img src="third.png">\n')
        items = await collect(walker, entry_for(tmp_path),
                              options=WalkOptions(ignore_not_found=True))
        index = items[0].content
        assert [ref.target.rsplit('/', 1)[-1] for ref, _, _ in walker.discover(index)] == \
            ["first.png", "second.html", "third.png"]

    @pytest.mark.asyncio
    async def test_multi_line_start_tag_keeps_document_order(self, tmp_path, walker):
        """Test a start tag spanning lines is still walked before its sibling."""
        write(tmp_path, "index.html", '<img\n src="a.png"><img src="b.png">\n')
        write(tmp_path, "a.png", "a")
        write(tmp_path, "b.png", "b")
        items = await collect(walker, entry_for(tmp_path))
        assert names(items) == ["index.html", "a.png", "b.png"]
        assert (items[1].source.line, items[1].source.column) == (1, 1)
        assert (items[2].source.line, items[2].source.column) == (2, 14)

    @pytest.mark.asyncio
    async def test_order_follows_tree_not_attribute_table(self, tmp_path, walker):
        """Test a script before a link is walked first."""
        write(tmp_path, "index.html",
              '<script src="app.js"></script><link rel="stylesheet" href="site.css">')
        write(tmp_path, "app.js", "")
        write(tmp_path, "site.css", "")
        items = await collect(walker, entry_for(tmp_path))
        assert names(items) == ["index.html", "app.js", "site.css"]

    @pytest.mark.asyncio
    async def test_svg_xlink(self, tmp_path, walker):
        """Test SVG files are walked through their XLink references."""
        write(tmp_path, "index.html", '<img src="icon.svg">')
        write(tmp_path, "icon.svg",
              '<svg xmlns="http://www.w3.org/2000/svg"'
              ' xmlns:xlink="http://www.w3.org/1999/xlink">\n'
              '  <use xlink:href="sprite.png#star"/>\n'
              '</svg>\n')
        write(tmp_path, "sprite.png", "png")
        items = await collect(walker, entry_for(tmp_path))
        assert [type(item.content) for item in items] == \
            [HtmlContent, SvgContent, UnknownContent]
        source = items[2].source
        assert source.attribute == "xlink:href"
        assert (source.line, source.column) == (2, 3)

    @pytest.mark.asyncio
    async def test_explicit_entry_type(self, tmp_path, walker):
        """Test content_type overrides extension sniffing for the entry."""
        write(tmp_path, "page.tpl", '<a href="x.html">x</a>')
        write(tmp_path, "x.html", "<p>x</p>")
        items = await collect(walker, entry_for(tmp_path, "page.tpl"),
                              content_type="text/html")
        assert names(items) == ["page.tpl", "x.html"]


class TestCancellation:
    """Tests for the cancel signal."""

    @pytest.mark.asyncio
    async def test_stops_before_next_fetch(self, tmp_path, walker):
        write(tmp_path, "index.html", '<a href="a.html">a</a>')
        write(tmp_path, "a.html", "<p>a</p>")
        cancel = asyncio.Event()
        items = []
        async for item in walker.walk(entry_for(tmp_path), options=WalkOptions(cancel=cancel)):
            items.append(item)
            cancel.set()
        assert names(items) == ["index.html"]

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, tmp_path, walker):
        write(tmp_path, "index.html", "<p>x</p>")
        cancel = asyncio.Event()
        cancel.set()
        assert await collect(walker, entry_for(tmp_path),
                             options=WalkOptions(cancel=cancel)) == []
