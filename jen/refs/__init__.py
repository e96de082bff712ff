"""Reference resolution.

A Reference is an absolute URL (local files use file: URLs) that
remembers the reference it was resolved from and the root context that
root-relative values resolve against.

Example:
    from jen.refs import Reference

    index = Reference.create("site/index.html", root="site")
    header = index.resolve("./partials/header.html")
    print(header.display())   # "partials/header.html"
"""

from .reference import Reference
from .urls import remove_dot_segments, to_url

__all__ = [
    'Reference',
    'remove_dot_segments',
    'to_url',
]
