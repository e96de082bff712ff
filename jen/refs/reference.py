"""Reference: an absolute location plus the chain it was resolved through.

Web-style resolution and filesystem path joining disagree about what a
leading "/" and a run of "../" mean. A Reference decides per call: while
it sits inside its root context it behaves like a page on a site rooted
there ("/x" is the site root, "../" stops at it); outside the root it
behaves like a plain file URL.

Example:
    page = Reference.create("/site/sub/page.html", root="/site/")
    page.resolve("/icon.png").path            # "/site/icon.png"
    page.resolve("../../../icon.png").path    # "/site/icon.png"
    page.resolve("img/a.png").referrer is page  # True
"""

import os
import posixpath
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union
from urllib.parse import unquote, urldefrag, urlunsplit
from urllib.request import url2pathname

from .urls import (
    has_scheme,
    is_drive_path,
    merge_paths,
    normalize_slashes,
    normalize_url,
    quote_path,
    relative_path,
    remove_dot_segments,
    split_url,
    to_url,
)

PathOrStr = Union[str, 'os.PathLike[str]']


@dataclass(frozen=True, eq=False)
class Reference:
    """A resolved, absolute location plus its resolution ancestry.

    Instances are immutable. Equality is identity: two references to the
    same target reached through different chains are different objects.
    Compare `target` (or `location`) for value equality.
    """

    target: str
    """Absolute, normalized URL (local files use the file: scheme)."""

    root: str
    """Root context URL; always ends with '/'."""

    referrer: Optional['Reference'] = field(default=None, repr=False)
    """Reference this one was resolved from, None for entry references."""

    @classmethod
    def create(cls, target: PathOrStr,
               root: Optional[PathOrStr] = None) -> 'Reference':
        """Create an entry reference with no referrer.

        Args:
            target: Filesystem path or URL
            root: Root context (path or URL); defaults to the current
                  working directory

        Raises:
            ResolutionError: If target or root is a malformed URL
        """
        if root is None:
            root = os.getcwd()
        root_url = to_url(os.fspath(root))
        if not root_url.endswith('/'):
            root_url += '/'
        return cls(target=to_url(os.fspath(target)), root=root_url)

    def resolve(self, value: PathOrStr) -> 'Reference':
        """Resolve value against this reference.

        Rules, in priority order:
        1. Absolute URLs are used as-is (file: URLs are normalized).
        2. Values starting with "/" resolve against the root context when
           this reference is inside it, else against this reference's own
           scheme and authority.
        3. Anything else is merged onto this target; inside the root,
           dot segments cannot climb above it.

        The query and fragment of the result are always those of value.

        Raises:
            ResolutionError: If value is a malformed URL
        """
        return Reference(
            target=self._resolve_target(os.fspath(value).strip()),
            root=self.root,
            referrer=self,
        )

    def _resolve_target(self, value: str) -> str:
        if is_drive_path(value):
            return to_url(value)
        if has_scheme(value):
            return normalize_url(value)

        value = normalize_slashes(value)
        base = split_url(self.target)
        if value.startswith('//'):
            scheme = 'https' if base.scheme == 'file' else base.scheme
            return normalize_url(f"{scheme}:{value}")
        # "c:d.html" is a relative path, not a one-letter scheme
        first_segment = re.split(r'[/?#]', value, 1)[0]
        if ':' in first_segment:
            value = './' + value

        parts = split_url(value, base=self.target)
        if not value:
            return urldefrag(self.target).url
        if not parts.path:
            return urlunsplit((base.scheme, base.netloc, base.path,
                               parts.query, parts.fragment))

        if self.is_inside_root:
            root = split_url(self.root)
            if parts.path.startswith('/'):
                local = remove_dot_segments(parts.path)
            else:
                below_root = '/' + base.path[len(root.path):]
                local = remove_dot_segments(merge_paths(below_root, parts.path))
            scheme, netloc = root.scheme, root.netloc
            path = root.path + local[1:]
        else:
            scheme, netloc = base.scheme, base.netloc
            path = remove_dot_segments(merge_paths(base.path, parts.path))

        return urlunsplit((scheme, netloc, quote_path(path),
                           parts.query, parts.fragment))

    def relative(self, other: 'Reference') -> str:
        """Return the shortest value that resolves from here to other.

        Falls back to other's absolute target when scheme or authority
        differ, or when other lies outside the root this reference clamps
        at.
        """
        base = split_url(self.target)
        target = split_url(other.target)
        if (base.scheme, base.netloc) != (target.scheme, target.netloc):
            return other.target
        if self.is_inside_root and not other.is_inside_root:
            return other.target

        base_dir = base.path[:base.path.rfind('/') + 1]
        value = relative_path(base_dir, target.path)
        if target.query:
            value += '?' + target.query
        if target.fragment:
            value += '#' + target.fragment
        return value

    @property
    def scheme(self) -> str:
        return split_url(self.target).scheme

    @property
    def is_local(self) -> bool:
        """True for file: URLs on this machine."""
        parts = split_url(self.target)
        return parts.scheme == 'file' and parts.netloc in ('', 'localhost')

    @property
    def path(self) -> Optional[str]:
        """Local filesystem path, or None for remote references."""
        if not self.is_local:
            return None
        return url2pathname(split_url(self.target).path)

    @property
    def location(self) -> str:
        """Target without its fragment; what actually gets fetched."""
        return urldefrag(self.target).url

    @property
    def is_inside_root(self) -> bool:
        """True if the target lies within the root context's subtree."""
        target = split_url(self.target)
        root = split_url(self.root)
        if (target.scheme, target.netloc) != (root.scheme, root.netloc):
            return False
        return (target.path.startswith(root.path)
                or target.path + '/' == root.path)

    @property
    def root_referrer(self) -> Optional['Reference']:
        """The entry reference at the end of the chain, if any."""
        if self.referrer is None:
            return None
        ref = self.referrer
        while ref.referrer is not None:
            ref = ref.referrer
        return ref

    def chain(self) -> Iterator['Reference']:
        """Yield this reference, then each referrer up to the entry."""
        ref: Optional[Reference] = self
        while ref is not None:
            yield ref
            ref = ref.referrer

    def display(self) -> str:
        """Human-readable rendering used in logs and error messages.

        Paths are shown relative to the directory of the entry reference
        when there is one and it shares scheme and authority.
        """
        root = self.root_referrer
        if root is None:
            return self.path if self.is_local else self.target

        mine = split_url(self.target)
        theirs = split_url(root.target)
        if (mine.scheme, mine.netloc) != (theirs.scheme, theirs.netloc):
            return self.target
        base_dir = posixpath.dirname(unquote(theirs.path)) or '/'
        return posixpath.relpath(unquote(mine.path), base_dir)

    def __str__(self) -> str:
        return self.display()
