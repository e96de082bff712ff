"""MIME type lookup by file extension.

Each MimeTable owns its own mimetypes.MimeTypes instance, so extra
mappings registered by one walker never leak into another.
"""

import mimetypes
import posixpath
from typing import Dict, Optional
from urllib.parse import unquote, urlsplit

DEFAULT_MIME_TYPE = "application/octet-stream"

# Types that must not depend on the host's mime.types files
_BUILTIN_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".xhtml": "application/xhtml+xml",
    ".svg": "image/svg+xml",
    ".csv": "text/csv",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".webp": "image/webp",
    ".woff2": "font/woff2",
}


class MimeTable:
    """Extension-to-MIME-type lookup.

    Example:
        table = MimeTable({".tpl": "text/html"})
        table.guess("file:///site/header.tpl")   # "text/html"
        table.guess("file:///site/blob")         # None
    """

    def __init__(self, extra: Optional[Dict[str, str]] = None):
        self._types = mimetypes.MimeTypes()
        for ext, mime_type in {**_BUILTIN_TYPES, **(extra or {})}.items():
            self.add(ext, mime_type)

    def add(self, ext: str, mime_type: str) -> None:
        """Map an extension (with or without the leading dot) to a type."""
        if not ext.startswith('.'):
            ext = '.' + ext
        self._types.add_type(mime_type, ext.lower())

    def guess(self, target: str) -> Optional[str]:
        """Guess the MIME type of a URL or path from its extension."""
        path = unquote(urlsplit(target).path) if '://' in target else target
        ext = posixpath.splitext(path)[1].lower()
        if not ext:
            return None
        mime_type, _ = self._types.guess_type('file' + ext, strict=False)
        return mime_type

    def guess_or_default(self, target: str) -> str:
        return self.guess(target) or DEFAULT_MIME_TYPE
