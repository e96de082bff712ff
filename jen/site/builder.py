"""Site builder: entry pages as tasks, file changes as invalidations.

Each entry page gets one build_page task. Building a page walks
everything it references, declares a dependency on every local file the
walk touched (missing ones included, so creating them triggers a
rebuild), writes the page to the output directory and copies its local
assets through copy_asset sub-tasks.
"""

import asyncio
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from jen.config import SiteConfig
from jen.content import ContentEntry, HtmlContent, MimeTable, SvgContent, UnknownContent
from jen.fetch import Fetcher, FetcherRegistry
from jen.log import get_logger
from jen.refs import Reference
from jen.tasks import ChangeKind, TaskContext, TaskRunner, UpdateResult, normalize_path
from jen.walker import ContentWalker

logger = get_logger("site")

PathLike = Union[str, Path]


def glob_regex(pattern: str) -> 're.Pattern[str]':
    """Compile an entry glob into a regex over root-relative POSIX paths.

    "*" and "?" stay within one path segment; "**/" spans any number of
    directories, including none, as in Path.glob().
    """
    if pattern.startswith('./'):
        pattern = pattern[2:]
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith('**/', i):
            parts.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i):
            parts.append('.*')
            i += 2
        elif pattern[i] == '*':
            parts.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            parts.append('[^/]')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile(''.join(parts))


class SiteBuilder:
    """Builds a site incrementally.

    Example:
        builder = SiteBuilder(load_config("jen.yaml"))
        builder.discover()
        await builder.build()
        builder.handle_event("site/header.html", ChangeKind.CHANGE)
        await builder.build()      # rebuilds only pages using header.html
    """

    def __init__(self, config: SiteConfig, fetcher: Optional[Fetcher] = None,
                 mime_table: Optional[MimeTable] = None):
        self.config = config
        if fetcher is None:
            fetcher = FetcherRegistry.default(s3_profile=config.s3_profile,
                                              s3_region=config.s3_region)
        self.fetcher = fetcher
        self.walker = ContentWalker(fetcher, mime_table)
        self.runner = TaskRunner()
        self._entries: Dict[str, int] = {}
        self._entry_patterns = [glob_regex(p) for p in config.entries]

    @property
    def entries(self) -> Dict[str, int]:
        """Normalized entry path -> task id (a copy)."""
        return dict(self._entries)

    def entry_paths(self) -> List[Path]:
        """Files under root matching the entry globs, sorted."""
        found: Set[Path] = set()
        for pattern in self.config.entries:
            for path in self.config.root.glob(pattern):
                if path.is_file() and not self._in_output(path):
                    found.add(path.resolve())
        return sorted(found)

    def discover(self) -> List[int]:
        """Register a build_page task for every entry file not yet known."""
        added = []
        for path in self.entry_paths():
            if normalize_path(path) not in self._entries:
                added.append(self.add_entry(path))
        logger.debug("Discovered %d new entry page(s)", len(added))
        return added

    def add_entry(self, path: PathLike) -> int:
        key = normalize_path(path)
        task_id = self.runner.add(self.build_page, [key])
        self._entries[key] = task_id
        return task_id

    def output_path(self, path: PathLike) -> Path:
        """Where the built copy of a file under root goes."""
        relative = Path(normalize_path(path)).relative_to(self.config.root)
        return self.config.output / relative

    async def build(self, cancel: Optional[asyncio.Event] = None) -> UpdateResult:
        """Run one update pass over every invalid page."""
        result = await self.runner.update(cancel)
        if result.tasks_executed:
            logger.info("Built %d task(s)%s", result.tasks_executed,
                        " (cancelled)" if result.cancelled else "")
        return result

    def handle_event(self, path: PathLike, kind: ChangeKind) -> None:
        """Apply one file change to the task graph."""
        key = normalize_path(path)
        if self._in_output(key):
            return
        self.runner.invalidate_path(key, kind)

        if kind is ChangeKind.ADD:
            if key not in self._entries and self._is_entry(key):
                logger.debug("New entry page %s", key)
                self.add_entry(key)
        elif kind is ChangeKind.DELETE:
            for entry_key, task_id in list(self._entries.items()):
                if not self.runner.get_inputs(task_id):
                    logger.debug("Entry page %s is gone", entry_key)
                    self.runner.remove(task_id)
                    del self._entries[entry_key]
                    self._remove_output(entry_key)

    def handle_move(self, src: PathLike, dest: PathLike) -> None:
        """Apply a rename; an entry page keeps its task under the new name."""
        src_key = normalize_path(src)
        dest_key = normalize_path(dest)
        task_id = self._entries.pop(src_key, None)
        if task_id is not None:
            self.runner.set_inputs(task_id, [dest_key])
            self._entries[dest_key] = task_id
            self._remove_output(src_key)
        self.handle_event(src_key, ChangeKind.DELETE)
        self.handle_event(dest_key, ChangeKind.ADD)

    async def build_page(self, context: TaskContext, inputs: List[str]) -> None:
        """Task: build every page in inputs."""
        for page in inputs:
            await self._build_page(context, page)

    async def copy_asset(self, context: TaskContext, inputs: List[str]) -> None:
        """Sub-task: copy files under root into the output directory."""
        for source in inputs:
            dest = self.output_path(source)
            await asyncio.to_thread(_copy_file, Path(source), dest)
            logger.debug("Copied %s", dest)

    async def _build_page(self, context: TaskContext, page: str) -> None:
        entry = Reference.create(page, root=self.config.root)

        def observe(ref: Reference) -> None:
            if ref.is_local:
                context.depend_on(ref.path)

        options = self.config.walk_options(observe=observe, cancel=context.cancel)
        assets: List[str] = []
        async for item in self.walker.walk(entry, options=options):
            if item.source is None:
                await self._write_entry(item)
            elif self._is_asset(item):
                path = item.content.ref.path
                if path not in assets:
                    assets.append(path)

        if assets:
            await context.do(self.copy_asset, assets)

    async def _write_entry(self, item: ContentEntry) -> None:
        content = item.content
        source = content.ref.path
        dest = self.output_path(source)
        if isinstance(content, (HtmlContent, SvgContent)):
            data = content.document.serialize()
            await asyncio.to_thread(_write_file, dest, data)
        else:
            await asyncio.to_thread(_copy_file, Path(source), dest)
        logger.debug("Wrote %s", dest)

    def _is_asset(self, item: ContentEntry) -> bool:
        content = item.content
        if not isinstance(content, (UnknownContent, SvgContent)):
            return False
        return content.ref.is_local and content.ref.is_inside_root

    def _is_entry(self, key: str) -> bool:
        """Match one new file against the entry globs without listing the root."""
        path = Path(key)
        if not path.is_relative_to(self.config.root) or not path.is_file():
            return False
        relative = path.relative_to(self.config.root).as_posix()
        return any(regex.fullmatch(relative) for regex in self._entry_patterns)

    def _remove_output(self, key: str) -> None:
        dest = self.output_path(key)
        if dest.is_file():
            dest.unlink()
            logger.debug("Removed %s", dest)

    def _in_output(self, path: PathLike) -> bool:
        return Path(normalize_path(path)).is_relative_to(self.config.output)


def _write_file(dest: Path, data: bytes) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)


def _copy_file(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
