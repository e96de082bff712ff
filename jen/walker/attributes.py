"""Which attributes of which elements reference other resources.

HTML documents are parsed without namespaces, so inline SVG shows up
with plain tag names and a literal "xlink:href" attribute. Standalone
SVG documents are namespaced; files that forget the xmlns declaration
are matched too.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from jen.content import SVG_NAMESPACE, XLINK_NAMESPACE


@dataclass(frozen=True)
class ReferenceAttribute:
    """An attribute on a tag whose value is a reference.

    Attributes:
        tag: Local tag name
        attribute: Local attribute name
        tag_namespace: Namespace URI of the tag (None for HTML)
        attribute_namespace: Namespace URI of the attribute
        prefix: Prefix used when reporting the attribute name
    """
    tag: str
    attribute: str
    tag_namespace: Optional[str] = None
    attribute_namespace: Optional[str] = None
    prefix: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """Attribute name as written in the source, e.g. "xlink:href"."""
        if self.prefix:
            return f"{self.prefix}:{self.attribute}"
        return self.attribute


HTML_REFERENCES: Tuple[ReferenceAttribute, ...] = (
    ReferenceAttribute('a', 'href'),
    ReferenceAttribute('link', 'href'),
    ReferenceAttribute('script', 'src'),
    ReferenceAttribute('img', 'src'),
    ReferenceAttribute('iframe', 'src'),
    ReferenceAttribute('embed', 'src'),
    ReferenceAttribute('object', 'data'),
    ReferenceAttribute('source', 'src'),
    ReferenceAttribute('track', 'src'),
    ReferenceAttribute('audio', 'src'),
    ReferenceAttribute('video', 'src'),
    ReferenceAttribute('video', 'poster'),
    ReferenceAttribute('input', 'src'),
    ReferenceAttribute('image', 'href'),
    ReferenceAttribute('image', 'xlink:href'),
    ReferenceAttribute('x-jen-snippet', 'src'),
)


def _svg_references() -> Tuple[ReferenceAttribute, ...]:
    found = []
    for namespace in (SVG_NAMESPACE, None):
        for tag in ('a', 'image', 'use', 'script', 'feImage'):
            found.append(ReferenceAttribute(tag, 'href', namespace))
            found.append(ReferenceAttribute(tag, 'href', namespace,
                                            XLINK_NAMESPACE, 'xlink'))
    return tuple(found)


SVG_REFERENCES: Tuple[ReferenceAttribute, ...] = _svg_references()
