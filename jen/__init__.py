"""jen: incremental build engine for static sites.

Subpackages:
    refs: Reference resolution against a root context
    content: typed content (html, svg, csv, unknown) and MIME lookup
    fetch: fetchers for file:, http(s): and s3: references
    walker: depth-first traversal of everything a page references
    tasks: dependency-tracking task runner
    config: jen.yaml loading
    site: site builder and file watching
"""

__version__ = '0.1.0'
