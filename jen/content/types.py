"""Typed content produced by the walker.

Content is a closed union with one dataclass per kind. Code that needs
the payload dispatches on the class (or on the `type` discriminant);
there is no open-ended "payload" field.
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union

from jen.refs import Reference

from .dom import Document

HTML = "html"
SVG = "svg"
CSV = "csv"
UNKNOWN = "unknown"

_KIND_BY_MIME = {
    "text/html": HTML,
    "application/xhtml+xml": HTML,
    "image/svg+xml": SVG,
    "text/csv": CSV,
    "application/csv": CSV,
}


def kind_for(mime_type: str) -> str:
    """Map a MIME type to a content kind; anything unrecognized is unknown."""
    base = mime_type.split(';', 1)[0].strip().lower()
    return _KIND_BY_MIME.get(base, UNKNOWN)


@dataclass
class HtmlContent:
    """An HTML document; the DOM may be mutated by directive expansion."""

    type: ClassVar[str] = HTML
    mime_type: str
    ref: Reference
    document: Document


@dataclass
class SvgContent:
    """An SVG document."""

    type: ClassVar[str] = SVG
    mime_type: str
    ref: Reference
    document: Document


@dataclass
class CsvContent:
    """Tabular data: the first row is the header row."""

    type: ClassVar[str] = CSV
    mime_type: str
    ref: Reference
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    def records(self) -> List[dict]:
        """Return the rows as dicts keyed by header."""
        return [dict(zip(self.headers, row)) for row in self.rows]


@dataclass
class UnknownContent:
    """Any other resource. Yielded as a leaf; its bytes are never read."""

    type: ClassVar[str] = UNKNOWN
    mime_type: str
    ref: Reference


Content = Union[HtmlContent, SvgContent, CsvContent, UnknownContent]


@dataclass(frozen=True)
class SourceLocation:
    """Where a reference was found: the attribute of an element.

    Attributes:
        ref: Reference of the document containing the element
        line: 1-based line of the element's start tag
        column: 1-based column of the start tag, None if unknown
        attribute: Qualified name of the attribute holding the value
    """
    ref: Reference
    line: Optional[int]
    column: Optional[int]
    attribute: str

    def __str__(self) -> str:
        where = self.ref.display()
        if self.line is not None:
            where += f":{self.line}"
            if self.column is not None:
                where += f":{self.column}"
        return f"{where} ({self.attribute})"


@dataclass
class ContentEntry:
    """One item of a walk: content plus where it was referenced from."""

    content: Content
    source: Optional[SourceLocation] = None
