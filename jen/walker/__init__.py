"""Content walker: enumerate everything an entry document pulls in.

Classes:
    ContentWalker: depth-first async traversal of a content graph
    WalkOptions: cycle policy, remote gating, not-found policy, cancellation
    CyclePolicy: ALLOW / PRUNE / FAIL
    ReferenceAttribute: one (tag, attribute) pair that holds a reference
"""

from .attributes import HTML_REFERENCES, SVG_REFERENCES, ReferenceAttribute
from .options import CyclePolicy, WalkOptions
from .walker import SKIPPED_SCHEMES, ContentWalker

__all__ = [
    'ContentWalker',
    'WalkOptions',
    'CyclePolicy',
    'ReferenceAttribute',
    'HTML_REFERENCES',
    'SVG_REFERENCES',
    'SKIPPED_SCHEMES',
]
