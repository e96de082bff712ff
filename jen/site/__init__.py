"""Incremental site building on top of the task runner and walker.

Classes:
    SiteBuilder: entry pages as build_page tasks
    FileChange: a watched file system change

Functions:
    watch: rebuild on file changes until cancelled
"""

from .builder import SiteBuilder
from .watch import ChangeHandler, FileChange, apply_change, translate, watch

__all__ = [
    'SiteBuilder',
    'ChangeHandler',
    'FileChange',
    'apply_change',
    'translate',
    'watch',
]
