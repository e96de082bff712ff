"""HTTP(S) fetcher built on httpx."""

from typing import Optional

import httpx

from jen.exceptions import FetchError, PermissionDenied, ResourceNotFound
from jen.refs import Reference

from .base import Fetcher

_NOT_FOUND = (404, 410)
_DENIED = (401, 403)


class HttpFetcher(Fetcher):
    """Fetches http: and https: references.

    A client passed in is used as-is and left open; otherwise the fetcher
    creates its own on first use and closes it in aclose().

    Example:
        fetcher = HttpFetcher(timeout=10.0)
        data = await fetcher.read(Reference.create("https://example.com/a.css"))
        await fetcher.aclose()
    """

    schemes = ('http', 'https')

    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 30.0):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True,
                                             timeout=self._timeout)
        return self._client

    async def read(self, ref: Reference) -> bytes:
        response = await self._send('GET', ref)
        self._raise_for_status('GET', ref, response)
        return response.content

    async def check(self, ref: Reference) -> None:
        response = await self._send('HEAD', ref)
        if response.status_code == 405:
            # Some servers refuse HEAD outright
            response = await self._send('GET', ref)
            self._raise_for_status('GET', ref, response)
        else:
            self._raise_for_status('HEAD', ref, response)

    async def _send(self, method: str, ref: Reference) -> httpx.Response:
        try:
            return await self._get_client().request(method, ref.location)
        except httpx.HTTPError as e:
            raise FetchError(ref, f"{method} {ref.location} failed: {e}") from e

    @staticmethod
    def _raise_for_status(method: str, ref: Reference,
                          response: httpx.Response) -> None:
        status = response.status_code
        if status in _NOT_FOUND:
            raise ResourceNotFound(ref)
        if status in _DENIED:
            raise PermissionDenied(ref)
        if status >= 400:
            raise FetchError(ref, f"{method} {ref.location} returned HTTP {status}")

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
