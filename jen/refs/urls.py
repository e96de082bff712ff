"""URL helpers used by Reference resolution.

Filesystem paths are turned into file: URLs here, and the pieces of
RFC 3986 resolution (path merge, dot-segment removal) that jen applies
itself are implemented here so root clamping can reuse them.
"""

import os
import re
from typing import Optional
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from jen.exceptions import ResolutionError

# Windows drive letters ("C:\site") look like one-letter schemes
_DRIVE_RE = re.compile(r'^[A-Za-z]:([\\/]|$)')
# Real schemes have at least two characters
_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]+:')

_PATH_SAFE = "/%:@!$&'()*+,;=~"


def is_drive_path(value: str) -> bool:
    """Return True for Windows absolute paths such as C:\\site\\index.html."""
    return bool(_DRIVE_RE.match(value))


def has_scheme(value: str) -> bool:
    """Return True if value is a fully-qualified URL."""
    return bool(_SCHEME_RE.match(value)) and not is_drive_path(value)


def split_url(value: str, base: Optional[str] = None) -> SplitResult:
    """Split value into URL components, rejecting malformed syntax.

    Raises:
        ResolutionError: If the value is not a syntactically valid URL
    """
    try:
        parts = urlsplit(value)
        # Ports are only validated on access
        parts.port
    except ValueError as e:
        raise ResolutionError(value, base, str(e)) from e
    return parts


def normalize_slashes(value: str) -> str:
    """Replace backslashes with forward slashes in the path portion only."""
    end = len(value)
    for marker in ('?', '#'):
        pos = value.find(marker)
        if pos != -1:
            end = min(end, pos)
    return value[:end].replace('\\', '/') + value[end:]


def quote_path(path: str) -> str:
    """Percent-encode characters not allowed in a URL path.

    Existing escapes are left untouched, so quoting is idempotent.
    """
    return quote(path, safe=_PATH_SAFE)


def remove_dot_segments(path: str) -> str:
    """Collapse '.' and '..' segments (RFC 3986 section 5.2.4).

    For absolute paths '..' never climbs above '/', which is what makes
    root-anchored resolution clamp instead of escaping.

    Examples:
        "/a/b/../c" -> "/a/c"
        "/a/./b/" -> "/a/b/"
        "/../../x" -> "/x"
    """
    if not path:
        return path
    absolute = path.startswith('/')
    segments = path.split('/')
    if absolute:
        segments = segments[1:]

    output = []
    for segment in segments:
        if segment == '..':
            if output:
                output.pop()
        elif segment != '.':
            output.append(segment)

    # "a/." and "a/.." name a directory
    if segments and segments[-1] in ('.', '..'):
        output.append('')

    result = '/'.join(output)
    return '/' + result if absolute else result


def merge_paths(base_path: str, ref_path: str) -> str:
    """Merge a relative path onto a base path (RFC 3986 section 5.2.3)."""
    if ref_path.startswith('/'):
        return ref_path
    if not base_path:
        return '/' + ref_path
    return base_path[:base_path.rfind('/') + 1] + ref_path


def relative_path(base_dir: str, target_path: str) -> str:
    """Return the shortest relative path from base_dir to target_path.

    Both arguments are absolute URL paths; base_dir ends with '/'.
    The result always resolves back to target_path when merged onto any
    file inside base_dir.
    """
    base_parts = base_dir.split('/')[:-1]
    target_parts = target_path.split('/')

    common = 0
    while (common < len(base_parts) and common < len(target_parts) - 1
           and base_parts[common] == target_parts[common]):
        common += 1

    ups = len(base_parts) - common
    rest = '/'.join(target_parts[common:])
    result = '../' * ups + rest

    if not result:
        return './'
    # Keep the first segment from reading as a scheme or a rooted path
    if ups == 0 and (result.startswith('/') or ':' in result.split('/', 1)[0]):
        return './' + result
    return result


def path_to_url(value: str) -> str:
    """Convert a filesystem path to an absolute file: URL.

    Relative paths are made absolute against the current directory,
    backslashes become slashes and drive letters become a leading path
    segment ("C:\\x" -> "file:///C:/x"). Trailing separators are kept.
    """
    path = normalize_slashes(value)
    if is_drive_path(path):
        path = '/' + path
    elif not path.startswith('/'):
        cwd = os.getcwd().replace('\\', '/')
        if is_drive_path(cwd):
            cwd = '/' + cwd
        path = cwd.rstrip('/') + '/' + path
    return urlunsplit(('file', '', quote_path(remove_dot_segments(path)), '', ''))


def to_url(value: str) -> str:
    """Normalize a path or URL into an absolute URL string."""
    if not has_scheme(value):
        return path_to_url(value)
    return normalize_url(value)


def normalize_url(value: str) -> str:
    """Normalize an absolute URL.

    file: URLs get the same path clean-up as filesystem paths; other
    schemes only get their dot segments collapsed.
    """
    parts = split_url(value)
    path = parts.path
    if parts.scheme == 'file':
        path = normalize_slashes(path)
        if is_drive_path(path):
            path = '/' + path
    if path.startswith('/'):
        path = remove_dot_segments(path)
    elif not path and (parts.netloc or parts.scheme == 'file'):
        path = '/'
    return urlunsplit((parts.scheme, parts.netloc, quote_path(path),
                       parts.query, parts.fragment))
