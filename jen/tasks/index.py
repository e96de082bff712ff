"""Path trie mapping files to the task contexts that depend on them.

Keys are filesystem paths normalized with os.path.abspath, split into
components, so that a directory lookup can reach every path beneath it.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterator, List, Optional, Set, Tuple, TypeVar

T = TypeVar('T')


def normalize_path(path) -> str:
    """Absolute, normalized form of path used as an index key."""
    return os.path.abspath(os.fspath(path))


def _split(path: str) -> List[str]:
    return [part for part in path.replace('\\', '/').split('/') if part]


@dataclass
class PathNode(Generic[T]):
    """Node in the path trie.

    Attributes:
        children: Child nodes keyed by path component
        key: Full normalized path when values are stored here
        values: Values registered for exactly this path
    """
    children: Dict[str, 'PathNode[T]'] = field(default_factory=dict)
    key: Optional[str] = None
    values: Set[T] = field(default_factory=set)


class DependencyIndex(Generic[T]):
    """Reverse mapping from path to the set of values declaring it.

    A path whose last value is discarded stops being a key, and trie
    nodes left without values or children are removed.

    Example:
        index = DependencyIndex()
        index.add("site/index.html", context)
        index.get("site/index.html")     # {context}
        dict(index.iter_under("site"))   # {"/abs/site/index.html": {context}}
    """

    def __init__(self):
        self._root: PathNode[T] = PathNode()
        self._size = 0

    def add(self, path, value: T) -> None:
        key = normalize_path(path)
        node = self._root
        for part in _split(key):
            node = node.children.setdefault(part, PathNode())
        if not node.values:
            self._size += 1
            node.key = key
        node.values.add(value)

    def discard(self, path, value: T) -> None:
        """Remove value from path; a no-op when it is not registered."""
        key = normalize_path(path)
        trail: List[Tuple[PathNode[T], str]] = []
        node = self._root
        for part in _split(key):
            child = node.children.get(part)
            if child is None:
                return
            trail.append((node, part))
            node = child

        if value not in node.values:
            return
        node.values.discard(value)
        if not node.values:
            node.key = None
            self._size -= 1

        # Prune empty branches bottom-up
        for parent, part in reversed(trail):
            child = parent.children[part]
            if child.values or child.children:
                break
            del parent.children[part]

    def get(self, path) -> Set[T]:
        """Values registered for exactly path (a copy)."""
        node = self._find(normalize_path(path))
        return set(node.values) if node is not None else set()

    def iter_under(self, path) -> Iterator[Tuple[str, Set[T]]]:
        """Yield (key, values) for path and every indexed path beneath it."""
        node = self._find(normalize_path(path))
        if node is not None:
            yield from self._walk(node)

    def keys(self) -> List[str]:
        return [key for key, _ in self._walk(self._root)]

    def _walk(self, node: PathNode[T]) -> Iterator[Tuple[str, Set[T]]]:
        stack = [node]
        while stack:
            current = stack.pop()
            if current.values:
                yield current.key, set(current.values)
            stack.extend(current.children[part]
                         for part in sorted(current.children, reverse=True))

    def _find(self, key: str) -> Optional[PathNode[T]]:
        node = self._root
        for part in _split(key):
            node = node.children.get(part)
            if node is None:
                return None
        return node

    def __contains__(self, path) -> bool:
        node = self._find(normalize_path(path))
        return node is not None and bool(node.values)

    def __len__(self) -> int:
        return self._size
