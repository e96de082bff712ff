"""Typed content model.

Classes:
    HtmlContent, SvgContent, CsvContent, UnknownContent: cases of Content
    ContentEntry: content plus the SourceLocation that referenced it
    Document: DOM capability protocol; LxmlDocument implements it
    MimeTable: injected extension-to-MIME-type lookup

Functions:
    get_content: fetch a reference as the content kind of its MIME type
"""

from .dom import Document, LxmlDocument, SVG_NAMESPACE, XLINK_NAMESPACE
from .getters import get_content
from .mime import DEFAULT_MIME_TYPE, MimeTable
from .types import (
    CSV, HTML, SVG, UNKNOWN,
    Content, ContentEntry, CsvContent, HtmlContent, SourceLocation,
    SvgContent, UnknownContent, kind_for,
)

__all__ = [
    # Content union
    'Content', 'HtmlContent', 'SvgContent', 'CsvContent', 'UnknownContent',
    'HTML', 'SVG', 'CSV', 'UNKNOWN', 'kind_for',
    # Walk results
    'ContentEntry', 'SourceLocation',
    # DOM
    'Document', 'LxmlDocument', 'SVG_NAMESPACE', 'XLINK_NAMESPACE',
    # MIME
    'MimeTable', 'DEFAULT_MIME_TYPE',
    # Fetching
    'get_content',
]
