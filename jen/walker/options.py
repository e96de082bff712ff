"""Traversal options for the ContentWalker."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from jen.refs import Reference


class CyclePolicy(Enum):
    """What to do when a reference resolves back to one of its ancestors."""
    ALLOW = "allow"   # Keep going; bounding the walk is the caller's job
    PRUNE = "prune"   # Silently end the branch
    FAIL = "fail"     # Raise CycleError with the full chain


@dataclass
class WalkOptions:
    """Options shared by every branch of a walk."""

    cycle_policy: CyclePolicy = CyclePolicy.PRUNE
    """Reaction to reference cycles."""

    follow_remote_references: bool = False
    """Fetch non-file references; when False they are silently skipped."""

    ignore_not_found: bool = False
    """End a branch silently on ResourceNotFound / PermissionDenied."""

    observe: Optional[Callable[[Reference], None]] = None
    """Called with every reference right before it is fetched."""

    cancel: Optional[asyncio.Event] = None
    """Once set, the walk stops before its next fetch."""

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()
