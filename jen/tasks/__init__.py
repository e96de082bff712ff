"""Dependency-tracking task runner.

Classes:
    TaskRunner: registers tasks, tracks invalidation, runs update passes
    TaskContext: one task execution (depend_on, do, cancelled)
    UpdateResult: outcome of an update pass
    DependencyIndex: path trie from paths to the contexts using them
    ChangeKind: ADD / CHANGE / DELETE
"""

from .context import Task, TaskContext
from .events import ChangeKind
from .index import DependencyIndex, normalize_path
from .runner import TaskRunner, UpdateResult

__all__ = [
    'TaskRunner',
    'TaskContext',
    'Task',
    'UpdateResult',
    'DependencyIndex',
    'ChangeKind',
    'normalize_path',
]
