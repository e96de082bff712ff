"""Minimal DOM capability used by the walker, backed by lxml.

The walker only needs to visit elements in document order, find them by
(namespaced) tag name, read (namespaced) attributes and report where an
element sits in its source. Document is that capability; LxmlDocument
implements it for HTML and SVG. Directive expansion may reach the
underlying tree through `root`.
"""

import bisect
import re
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple

from lxml import etree
from lxml import html as lxml_html

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

Position = Tuple[Optional[int], Optional[int]]

_COMMENT = re.compile(r'<!--.*?-->', re.DOTALL)


class Document(Protocol):
    """What the walker (and directive code) may do with a parsed tree."""

    def iter_elements(self) -> Iterator[Tuple[Optional[str], str, Any]]:
        """Yield (namespace, local name, element) for every element, in document order."""
        ...

    def elements(self, tag: str, namespace: Optional[str] = None) -> Iterator[Any]:
        """Yield elements with this tag name, in document order."""
        ...

    def attribute(self, element: Any, name: str,
                  namespace: Optional[str] = None) -> Optional[str]:
        """Return an attribute value, or None when absent."""
        ...

    def location(self, element: Any) -> Position:
        """Return the 1-based (line, column) where the element's start tag begins."""
        ...

    def serialize(self) -> bytes:
        """Serialize the (possibly mutated) tree."""
        ...


def _qualified(name: str, namespace: Optional[str]) -> str:
    return f"{{{namespace}}}{name}" if namespace else name


def _split_tag(tag: str) -> Tuple[Optional[str], str]:
    if tag.startswith('{'):
        namespace, name = tag[1:].split('}', 1)
        return namespace, name
    return None, tag


def _blank(match: 're.Match') -> str:
    return re.sub(r'[^\n]', ' ', match.group())


class LxmlDocument:
    """Document over an lxml element tree.

    libxml2 records only the line on which a start tag ends, so positions
    are recovered from the source text: elements are visited in document
    order and each one takes the next "<tag" after the previous match,
    provided it starts no later than the element's recorded line.
    Implied elements (an <html> wrapped around a fragment) have no start
    tag and report no column.
    """

    def __init__(self, root: Any, source: bytes, is_html: bool):
        self.root = root
        self.is_html = is_html
        self._text = source.decode('utf-8', errors='replace').lstrip('\ufeff')
        self._positions: Optional[Dict[Any, Tuple[int, int]]] = None

    @classmethod
    def parse_html(cls, data: bytes) -> 'LxmlDocument':
        """Parse an HTML document or fragment (never fails on bad markup)."""
        root = None
        if data.strip():
            try:
                root = lxml_html.document_fromstring(data)
            except (etree.ParserError, etree.XMLSyntaxError):
                # Comment-only documents parse to nothing
                root = None
        if root is None:
            root = lxml_html.document_fromstring("<html></html>")
        return cls(root, data, is_html=True)

    @classmethod
    def parse_svg(cls, data: bytes) -> 'LxmlDocument':
        """Parse an SVG document.

        Raises:
            lxml.etree.XMLSyntaxError: If the document is not well-formed
        """
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        root = etree.fromstring(data, parser=parser)
        return cls(root, data, is_html=False)

    def iter_elements(self) -> Iterator[Tuple[Optional[str], str, Any]]:
        for element in self.root.iter(etree.Element):
            namespace, name = _split_tag(element.tag)
            yield namespace, name, element

    def elements(self, tag: str, namespace: Optional[str] = None) -> Iterator[Any]:
        return self.root.iter(_qualified(tag, namespace))

    def attribute(self, element: Any, name: str,
                  namespace: Optional[str] = None) -> Optional[str]:
        return element.get(_qualified(name, namespace))

    def location(self, element: Any) -> Position:
        if self._positions is None:
            self._positions = self._compute_positions()
        position = self._positions.get(element)
        if position is None:
            return element.sourceline, None
        return position

    def serialize(self) -> bytes:
        tree = self.root.getroottree()
        if self.is_html:
            return lxml_html.tostring(tree, encoding='utf-8')
        return etree.tostring(tree, xml_declaration=True, encoding='utf-8')

    def _compute_positions(self) -> Dict[Any, Tuple[int, int]]:
        # Comments keep their length so offsets still line up
        text = _COMMENT.sub(_blank, self._text)
        line_starts = [0] + [m.end() for m in re.finditer('\n', text)]

        positions: Dict[Any, Tuple[int, int]] = {}
        cursor = 0
        for _, name, element in self.iter_elements():
            name = name.rsplit(':', 1)[-1]
            pattern = re.compile(
                r'<(?:[\w.\-]+:)?' + re.escape(name) + r'(?=[\s/>]|$)',
                re.IGNORECASE,
            )
            match = pattern.search(text, cursor)
            if match is None:
                continue
            line = bisect.bisect_right(line_starts, match.start())
            if element.sourceline is not None and line > element.sourceline:
                continue
            positions[element] = (line, match.start() - line_starts[line - 1] + 1)
            cursor = match.end()

        return positions
