"""Task contexts: one record per task invocation."""

import asyncio
import weakref
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Iterator, List, Optional, Set

from jen.exceptions import TaskCancelled

from .index import normalize_path

Task = Callable[['TaskContext', List[str]], Awaitable[Any]]


@dataclass(eq=False)
class TaskContext:
    """Execution record of a task and the sub-tasks it spawned.

    The sub-task list and dependency set describe the last execution;
    the runner clears both before running the task again.
    """

    task: Task
    """Async callable invoked as task(context, inputs)."""

    inputs: List[str] = field(default_factory=list)
    """Paths the task is invoked with, in order."""

    sub_tasks: List['TaskContext'] = field(default_factory=list, repr=False)
    """Children created by do() during the last execution."""

    dependencies: Set[str] = field(default_factory=set)
    """Normalized paths declared with depend_on() during the last execution."""

    cancel: Optional[asyncio.Event] = field(default=None, repr=False)
    """Cancellation signal of the update pass running this context."""

    _parent: Optional['weakref.ReferenceType[TaskContext]'] = field(
        default=None, repr=False)

    @property
    def name(self) -> str:
        return getattr(self.task, '__name__', repr(self.task))

    @property
    def parent(self) -> Optional['TaskContext']:
        """Context that spawned this one, None for entry points."""
        return self._parent() if self._parent is not None else None

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def depend_on(self, path) -> None:
        """Re-run this task when path changes. Repeated calls are harmless."""
        self.dependencies.add(normalize_path(path))

    async def do(self, task: Task, inputs: Iterable = ()) -> Any:
        """Run task inline as a sub-task of this context and return its result.

        Raises:
            TaskCancelled: The update pass was cancelled
        """
        if self.cancelled:
            raise TaskCancelled(f"Cancelled before running {getattr(task, '__name__', task)!r}")
        child = TaskContext(task=task, inputs=list(inputs), cancel=self.cancel,
                            _parent=weakref.ref(self))
        self.sub_tasks.append(child)
        return await child.run()

    async def run(self) -> Any:
        return await self.task(self, list(self.inputs))

    def paths(self) -> Set[str]:
        """Normalized inputs and dependencies of this context alone."""
        return {normalize_path(p) for p in self.inputs} | self.dependencies

    def walk(self) -> Iterator['TaskContext']:
        """This context followed by every descendant, depth-first."""
        yield self
        for child in self.sub_tasks:
            yield from child.walk()

    def is_ancestor_of(self, other: 'TaskContext') -> bool:
        node = other.parent
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False
