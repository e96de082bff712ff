"""Type-specific content getters.

Each getter turns a reference into one case of the Content union,
using a Fetcher for the bytes. get_content() routes by content kind.
"""

import csv
import io
from typing import Awaitable, Callable, Dict, TYPE_CHECKING

from lxml import etree

from jen.exceptions import FetchError
from jen.refs import Reference

from .dom import LxmlDocument
from .types import (
    CSV, HTML, SVG, UNKNOWN,
    Content, CsvContent, HtmlContent, SvgContent, UnknownContent,
    kind_for,
)

if TYPE_CHECKING:
    from jen.fetch import Fetcher

Getter = Callable[[Reference, str, 'Fetcher'], Awaitable[Content]]


async def get_html(ref: Reference, mime_type: str, fetcher: 'Fetcher') -> HtmlContent:
    data = await fetcher.read(ref)
    return HtmlContent(mime_type=mime_type, ref=ref,
                       document=LxmlDocument.parse_html(data))


async def get_svg(ref: Reference, mime_type: str, fetcher: 'Fetcher') -> SvgContent:
    data = await fetcher.read(ref)
    try:
        document = LxmlDocument.parse_svg(data)
    except etree.XMLSyntaxError as e:
        raise FetchError(ref, f"Malformed SVG {ref.display()}: {e}") from e
    return SvgContent(mime_type=mime_type, ref=ref, document=document)


async def get_csv(ref: Reference, mime_type: str, fetcher: 'Fetcher') -> CsvContent:
    data = await fetcher.read(ref)
    try:
        text = data.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise FetchError(ref, f"CSV {ref.display()} is not UTF-8: {e}") from e
    rows = list(csv.reader(io.StringIO(text)))
    headers = rows[0] if rows else []
    return CsvContent(mime_type=mime_type, ref=ref, headers=headers, rows=rows[1:])


async def get_unknown(ref: Reference, mime_type: str,
                      fetcher: 'Fetcher') -> UnknownContent:
    """Confirm the resource exists without reading it."""
    await fetcher.check(ref)
    return UnknownContent(mime_type=mime_type, ref=ref)


GETTERS: Dict[str, Getter] = {
    HTML: get_html,
    SVG: get_svg,
    CSV: get_csv,
    UNKNOWN: get_unknown,
}


async def get_content(ref: Reference, mime_type: str, fetcher: 'Fetcher') -> Content:
    """Fetch ref as the content kind its MIME type implies.

    Raises:
        FetchError: (or a subclass) if the resource cannot be fetched or
                    parsed
    """
    return await GETTERS[kind_for(mime_type)](ref, mime_type, fetcher)
