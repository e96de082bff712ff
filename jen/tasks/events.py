"""File change kinds understood by TaskRunner.invalidate_path."""

from enum import Enum


class ChangeKind(Enum):
    ADD = "add"
    CHANGE = "change"
    DELETE = "delete"
