"""Dependency-tracking task runner.

The runner keeps three pieces of state in sync:

1. The context tree rooted at each registered entry task
2. A DependencyIndex from path to every context (at any depth) whose
   inputs or declared dependencies include it
3. The ordered invalid set of contexts waiting to run

Path changes mark contexts invalid; update() re-runs them, rebuilding
each one's sub-tree and index entries from scratch.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from jen.exceptions import TaskCancelled, TaskExecutionError, UpdateInProgress
from jen.log import get_logger

from .context import Task, TaskContext
from .events import ChangeKind
from .index import DependencyIndex, normalize_path

logger = get_logger("tasks")


@dataclass
class UpdateResult:
    """Result of one TaskRunner.update() pass."""

    executed: List[str] = field(default_factory=list)
    """Names of contexts that ran to completion, in order."""

    cancelled: bool = False
    """Whether the pass stopped early because of the cancel signal."""

    pending: int = 0
    """Contexts still invalid after the pass."""

    @property
    def tasks_executed(self) -> int:
        return len(self.executed)

    @property
    def completed(self) -> bool:
        """Return True if nothing is left to run."""
        return not self.cancelled and not self.pending


class TaskRunner:
    """Runs tasks and re-runs them when the paths they use change.

    Example:
        async def render(context, inputs):
            context.depend_on("data.csv")
            for path in inputs:
                ...

        runner = TaskRunner()
        task_id = runner.add(render, ["a.html"])
        await runner.update()                     # runs render
        runner.invalidate_path("data.csv", ChangeKind.CHANGE)
        await runner.update()                     # runs render again
    """

    def __init__(self):
        self._contexts: Dict[int, TaskContext] = {}
        self._ids = itertools.count(1)
        self._index: DependencyIndex[TaskContext] = DependencyIndex()
        self._invalid: List[TaskContext] = []
        self._updating = False

    def add(self, task: Task, inputs: Iterable = ()) -> int:
        """Register an entry task; it runs on the next update()."""
        context = TaskContext(task=task, inputs=list(inputs))
        task_id = next(self._ids)
        self._contexts[task_id] = context
        self._index_tree(context)
        self._mark_invalid(context)
        logger.debug("Added task %s (%d) with %d input(s)",
                     context.name, task_id, len(context.inputs))
        return task_id

    def context(self, task_id: int) -> TaskContext:
        try:
            return self._contexts[task_id]
        except KeyError:
            raise KeyError(f"Unknown task id {task_id!r}") from None

    def get_inputs(self, task_id: int) -> List[str]:
        return list(self.context(task_id).inputs)

    def set_inputs(self, task_id: int, inputs: Iterable) -> None:
        """Replace the inputs of an entry task and mark it invalid."""
        context = self.context(task_id)
        for path in context.paths():
            self._index.discard(path, context)
        context.inputs = list(inputs)
        for path in context.paths():
            self._index.add(path, context)
        self._mark_invalid(context)

    def remove(self, task_id: int) -> None:
        """Forget an entry task along with its whole sub-tree."""
        context = self.context(task_id)
        for node in context.walk():
            for path in node.paths():
                self._index.discard(path, node)
            self._discard_invalid(node)
        context.sub_tasks.clear()
        context.dependencies.clear()
        del self._contexts[task_id]
        logger.debug("Removed task %s (%d)", context.name, task_id)

    def invalidate_path(self, path, kind: ChangeKind = ChangeKind.CHANGE) -> List[TaskContext]:
        """Mark every context using path invalid.

        A DELETE also covers every indexed path beneath path and removes
        the deleted paths from the inputs of the contexts that list them.

        Returns:
            The contexts that matched, before dominance is applied
        """
        key = normalize_path(path)
        if kind is ChangeKind.DELETE:
            matches = list(self._index.iter_under(key))
        else:
            matches = [(key, self._index.get(key))]

        matched: List[TaskContext] = []
        for matched_key, contexts in matches:
            for context in contexts:
                if kind is ChangeKind.DELETE:
                    self._drop_input(context, matched_key)
                if context not in matched:
                    matched.append(context)

        for context in matched:
            self._mark_invalid(context)
        if matched:
            logger.debug("%s %s invalidated %d context(s)",
                         kind.value, key, len(matched))
        return matched

    @property
    def needs_update(self) -> bool:
        return bool(self._invalid)

    @property
    def invalid(self) -> List[TaskContext]:
        """Contexts waiting to run, in order (a copy)."""
        return list(self._invalid)

    @property
    def index(self) -> DependencyIndex[TaskContext]:
        return self._index

    @property
    def task_ids(self) -> List[int]:
        return list(self._contexts)

    async def update(self, cancel: Optional[asyncio.Event] = None) -> UpdateResult:
        """Run every context that is invalid when the pass starts.

        Args:
            cancel: Once set, no further contexts are started,
                    context.do() raises TaskCancelled and a context that
                    returns anyway stays invalid

        Returns:
            UpdateResult describing the pass

        Raises:
            UpdateInProgress: Another update() has not finished yet
            TaskExecutionError: A task raised; earlier contexts stay valid,
                                the failed one stays invalid
        """
        if self._updating:
            raise UpdateInProgress("update() is already running")

        self._updating = True
        result = UpdateResult()
        try:
            for context in list(self._invalid):
                # Superseded by an ancestor run or removed during this pass
                if context not in self._invalid:
                    continue
                if cancel is not None and cancel.is_set():
                    result.cancelled = True
                    break
                if not await self._execute(context, cancel):
                    result.cancelled = True
                    break
                result.executed.append(context.name)
        finally:
            self._updating = False
            result.pending = len(self._invalid)

        logger.debug("Update pass ran %d task(s), %d pending",
                     result.tasks_executed, result.pending)
        return result

    async def _execute(self, context: TaskContext,
                       cancel: Optional[asyncio.Event]) -> bool:
        """Run one invalid context; return False if it was cancelled."""
        for node in context.walk():
            for path in node.paths():
                self._index.discard(path, node)
            if node is not context:
                self._discard_invalid(node)
        context.sub_tasks.clear()
        context.dependencies.clear()
        context.cancel = cancel

        logger.debug("Running %s %s", context.name, context.inputs)
        try:
            await context.run()
        except TaskCancelled:
            logger.debug("Cancelled %s", context.name)
            return False
        except TaskExecutionError:
            raise
        except Exception as e:
            raise TaskExecutionError(context) from e
        else:
            if context.cancelled:
                # Returned early, so its dependencies may be incomplete
                logger.debug("Cancelled %s after it returned", context.name)
                return False
            self._discard_invalid(context)
            return True
        finally:
            self._index_tree(context)

    def _index_tree(self, context: TaskContext) -> None:
        for node in context.walk():
            for path in node.paths():
                self._index.add(path, node)

    def _drop_input(self, context: TaskContext, key: str) -> None:
        remaining = [p for p in context.inputs if normalize_path(p) != key]
        if len(remaining) == len(context.inputs):
            return
        context.inputs = remaining
        if key not in context.dependencies:
            self._index.discard(key, context)

    def _mark_invalid(self, context: TaskContext) -> None:
        """Add context to the invalid set, keeping only the outermost contexts."""
        for member in self._invalid:
            if member is context or member.is_ancestor_of(context):
                return

        if not any(context.is_ancestor_of(member) for member in self._invalid):
            self._invalid.append(context)
            return

        coarsened: List[TaskContext] = []
        for member in self._invalid:
            item = context if context.is_ancestor_of(member) else member
            if item not in coarsened:
                coarsened.append(item)
        self._invalid = coarsened

    def _discard_invalid(self, context: TaskContext) -> None:
        if context in self._invalid:
            self._invalid.remove(context)
