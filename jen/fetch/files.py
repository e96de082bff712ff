"""Local file fetcher."""

import asyncio
import os
from pathlib import Path

from jen.exceptions import FetchError, PermissionDenied, ResourceNotFound
from jen.refs import Reference

from .base import Fetcher


class FileFetcher(Fetcher):
    """Reads file: references from disk in a worker thread."""

    schemes = ('file',)

    async def read(self, ref: Reference) -> bytes:
        path = self._path(ref)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise ResourceNotFound(ref) from e
        except PermissionError as e:
            raise PermissionDenied(ref) from e
        except OSError as e:
            raise FetchError(ref, f"Cannot read {path}: {e}") from e

    async def check(self, ref: Reference) -> None:
        await asyncio.to_thread(self._check, ref)

    def _check(self, ref: Reference) -> None:
        path = self._path(ref)
        try:
            if path.is_dir():
                raise ResourceNotFound(ref, f"Not a file: {path}")
            path.stat()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise ResourceNotFound(ref) from e
        except PermissionError as e:
            raise PermissionDenied(ref) from e
        except OSError as e:
            raise FetchError(ref, f"Cannot stat {path}: {e}") from e
        if not os.access(path, os.R_OK):
            raise PermissionDenied(ref)

    @staticmethod
    def _path(ref: Reference) -> Path:
        if not ref.is_local:
            raise FetchError(ref, f"Not a local file: {ref.target}")
        return Path(ref.path)
