"""Exception hierarchy for jen.

Every error raised on purpose by the engine derives from JenError, so
callers (the orchestrator, the CLI) can tell build failures apart from
programming errors.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from jen.refs import Reference
    from jen.tasks import TaskContext


class JenError(Exception):
    """Base class for all jen errors."""
    pass


class ResolutionError(JenError, ValueError):
    """A reference value could not be parsed as a URL.

    Attributes:
        value: The raw value that failed to resolve
        base: Target of the reference it was resolved against, if any
    """

    def __init__(self, value: str, base: Optional[str] = None,
                 reason: Optional[str] = None):
        self.value = value
        self.base = base
        message = f"Cannot resolve {value!r}"
        if base is not None:
            message += f" against {base!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CycleError(JenError):
    """A reference chain revisited one of its own ancestors.

    Attributes:
        chain: Targets from the entry reference down to the repeated one
    """

    def __init__(self, chain: List[str]):
        self.chain = list(chain)
        super().__init__("Reference cycle: " + " -> ".join(self.chain))


class FetchError(JenError):
    """Fetching a reference failed.

    Subclasses distinguish the recoverable kinds; a plain FetchError is a
    transport or I/O failure that always propagates.
    """

    def __init__(self, ref: 'Reference', message: Optional[str] = None):
        self.ref = ref
        super().__init__(message or f"Failed to fetch {ref.target}")


class ResourceNotFound(FetchError):
    """The referenced resource does not exist."""

    def __init__(self, ref: 'Reference', message: Optional[str] = None):
        super().__init__(ref, message or f"Not found: {ref.target}")


class PermissionDenied(FetchError):
    """The referenced resource exists but may not be read."""

    def __init__(self, ref: 'Reference', message: Optional[str] = None):
        super().__init__(ref, message or f"Permission denied: {ref.target}")


class TaskExecutionError(JenError):
    """A task callback raised during update().

    The original exception is available as __cause__.
    """

    def __init__(self, context: 'TaskContext', message: Optional[str] = None):
        self.context = context
        super().__init__(message or f"Task {context.name!r} failed")


class TaskCancelled(JenError):
    """Raised inside a task once the update pass has been cancelled."""
    pass


class UpdateInProgress(JenError):
    """update() was called while a previous pass was still running."""
    pass


class ConfigError(JenError):
    """Invalid site configuration."""
    pass
