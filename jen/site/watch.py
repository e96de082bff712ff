"""Rebuild on file changes using watchdog.

The watchdog observer runs in its own thread; its handler hands events
to the event loop with call_soon_threadsafe. The watch loop waits for a
change, drains every change queued behind it, applies them all and runs
one build pass.
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Callable, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from jen.exceptions import JenError
from jen.log import get_logger
from jen.tasks import ChangeKind

from .builder import SiteBuilder

logger = get_logger("watch")

_KINDS = {
    'created': ChangeKind.ADD,
    'modified': ChangeKind.CHANGE,
    'deleted': ChangeKind.DELETE,
}


@dataclass(frozen=True)
class FileChange:
    """A change reported by the observer; dest is set for moves."""
    path: str
    kind: ChangeKind
    dest: Optional[str] = None


def translate(event: FileSystemEvent) -> Optional[FileChange]:
    """Map a watchdog event to a FileChange, or None to ignore it."""
    path = os.fsdecode(event.src_path)
    if event.event_type == 'moved':
        return FileChange(path, ChangeKind.DELETE, dest=os.fsdecode(event.dest_path))
    # Directory mtimes change whenever their contents do
    if event.is_directory and event.event_type == 'modified':
        return None
    kind = _KINDS.get(event.event_type)
    if kind is None:
        return None
    return FileChange(path, kind)


class ChangeHandler(FileSystemEventHandler):
    """Forwards translated events into an asyncio queue."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: 'asyncio.Queue[FileChange]'):
        super().__init__()
        self._loop = loop
        self._queue = queue

    def on_any_event(self, event: FileSystemEvent) -> None:
        change = translate(event)
        if change is not None:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, change)


def apply_change(builder: SiteBuilder, change: FileChange) -> None:
    if change.dest is not None:
        builder.handle_move(change.path, change.dest)
    else:
        builder.handle_event(change.path, change.kind)


async def watch(builder: SiteBuilder, cancel: Optional[asyncio.Event] = None,
                observer_factory: Callable[[], Observer] = Observer) -> None:
    """Rebuild whenever files under the site root change.

    Runs until cancel is set. Build failures are logged and the loop
    keeps going; the failed pages are retried on the next change.
    """
    loop = asyncio.get_running_loop()
    queue: 'asyncio.Queue[FileChange]' = asyncio.Queue()
    observer = observer_factory()
    observer.schedule(ChangeHandler(loop, queue), str(builder.config.root), recursive=True)
    observer.start()
    logger.info("Watching %s", builder.config.root)

    try:
        while True:
            change = await _next_change(queue, cancel)
            if change is None:
                break
            changes = [change] + _drain(queue)
            for item in changes:
                apply_change(builder, item)
            logger.debug("Applied %d change(s)", len(changes))

            try:
                await builder.build(cancel)
            except JenError as e:
                cause = f": {e.__cause__}" if e.__cause__ is not None else ""
                logger.error("Build failed: %s%s", e, cause)
    finally:
        observer.stop()
        observer.join()


def _drain(queue: 'asyncio.Queue[FileChange]') -> List[FileChange]:
    changes = []
    while not queue.empty():
        changes.append(queue.get_nowait())
    return changes


async def _next_change(queue: 'asyncio.Queue[FileChange]',
                       cancel: Optional[asyncio.Event]) -> Optional[FileChange]:
    """Wait for the next change; None once cancel is set."""
    if cancel is None:
        return await queue.get()
    if cancel.is_set():
        return None

    get = asyncio.ensure_future(queue.get())
    stop = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({get, stop}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for future in (get, stop):
            if not future.done():
                future.cancel()
    if get.done() and not get.cancelled():
        return get.result()
    return None
