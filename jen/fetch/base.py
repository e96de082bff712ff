"""Fetcher contract and scheme-based routing.

A Fetcher turns a Reference into bytes. Failures are reported through
the FetchError hierarchy so the walker can tell "does not exist" and
"permission denied" apart from everything else.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from jen.exceptions import FetchError
from jen.refs import Reference


class Fetcher(ABC):
    """Base class for fetchers.

    Subclasses list the URL schemes they serve in `schemes`.
    """

    schemes: Tuple[str, ...] = ()

    @abstractmethod
    async def read(self, ref: Reference) -> bytes:
        """Return the bytes of the resource at ref.

        Raises:
            ResourceNotFound: The resource does not exist
            PermissionDenied: The resource may not be read
            FetchError: Any other failure
        """
        pass

    @abstractmethod
    async def check(self, ref: Reference) -> None:
        """Confirm the resource exists and is readable, without reading it.

        Raises the same errors as read().
        """
        pass

    def supports(self, ref: Reference) -> bool:
        """Return True if this fetcher serves the scheme of ref."""
        return ref.scheme in self.schemes

    async def aclose(self) -> None:
        """Release any held connections."""
        return None


class FetcherRegistry(Fetcher):
    """Routes each reference to the fetcher registered for its scheme.

    Example:
        registry = FetcherRegistry()
        registry.register(FileFetcher())
        data = await registry.read(Reference.create("site/index.html"))
    """

    def __init__(self, fetchers: Iterable[Fetcher] = ()):
        self._by_scheme: Dict[str, Fetcher] = {}
        self._fetchers: List[Fetcher] = []
        for fetcher in fetchers:
            self.register(fetcher)

    @classmethod
    def default(cls, s3_profile: Optional[str] = None,
                s3_region: Optional[str] = None) -> 'FetcherRegistry':
        """Registry serving file:, http(s): and s3: references."""
        from .files import FileFetcher
        from .http import HttpFetcher
        from .s3 import S3Fetcher

        return cls([
            FileFetcher(),
            HttpFetcher(),
            S3Fetcher(profile=s3_profile, region=s3_region),
        ])

    def register(self, fetcher: Fetcher,
                 schemes: Optional[Iterable[str]] = None) -> None:
        """Serve the given schemes (default: fetcher.schemes) with fetcher.

        A later registration for the same scheme replaces the earlier one.
        """
        self._fetchers.append(fetcher)
        for scheme in (schemes if schemes is not None else fetcher.schemes):
            self._by_scheme[scheme.lower()] = fetcher

    def supports(self, ref: Reference) -> bool:
        return ref.scheme in self._by_scheme

    def _route(self, ref: Reference) -> Fetcher:
        fetcher = self._by_scheme.get(ref.scheme)
        if fetcher is None:
            raise FetchError(ref, f"No fetcher for scheme {ref.scheme!r}: {ref.target}")
        return fetcher

    async def read(self, ref: Reference) -> bytes:
        return await self._route(ref).read(ref)

    async def check(self, ref: Reference) -> None:
        await self._route(ref).check(ref)

    async def aclose(self) -> None:
        for fetcher in self._fetchers:
            await fetcher.aclose()

    @property
    def registered_schemes(self) -> List[str]:
        return sorted(self._by_scheme)
