"""S3 fetcher for s3://bucket/key references.

Requires boto3 (lazy import). Calls run in a worker thread since boto3
is synchronous.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple
from urllib.parse import unquote, urlsplit

from jen.exceptions import FetchError, PermissionDenied, ResourceNotFound
from jen.refs import Reference

from .base import Fetcher

_NOT_FOUND_CODES = {'NoSuchKey', 'NoSuchBucket', 'NotFound', '404'}
_DENIED_CODES = {'AccessDenied', 'Forbidden', '403'}


@dataclass
class S3Fetcher(Fetcher):
    """Fetches objects from S3.

    Example:
        fetcher = S3Fetcher(profile='dev')
        data = await fetcher.read(Reference.create("s3://my-bucket/data/rows.csv"))

    Attributes:
        profile: AWS profile name (optional)
        region: AWS region (optional)
    """

    profile: Optional[str] = None
    region: Optional[str] = None
    _client: Any = field(init=False, repr=False, default=None)

    schemes = ('s3',)

    def _get_client(self):
        """Lazy-load boto3 and create S3 client."""
        if self._client is None:
            try:
                import boto3
            except ImportError:
                raise ImportError(
                    "boto3 required for S3Fetcher. Install: pip install 'jen[s3]'"
                )
            session_kwargs = {}
            if self.profile:
                session_kwargs['profile_name'] = self.profile
            if self.region:
                session_kwargs['region_name'] = self.region
            self._client = boto3.Session(**session_kwargs).client('s3')
        return self._client

    @staticmethod
    def locate(ref: Reference) -> Tuple[str, str]:
        """Return (bucket, key) for an s3:// reference."""
        parts = urlsplit(ref.location)
        key = unquote(parts.path.lstrip('/'))
        if parts.scheme != 's3' or not parts.netloc or not key:
            raise FetchError(ref, f"Not an S3 object URL: {ref.target}")
        return parts.netloc, key

    async def read(self, ref: Reference) -> bytes:
        return await asyncio.to_thread(self._get_object, ref)

    async def check(self, ref: Reference) -> None:
        await asyncio.to_thread(self._head_object, ref)

    def _get_object(self, ref: Reference) -> bytes:
        bucket, key = self.locate(ref)
        client = self._get_client()
        try:
            response = client.get_object(Bucket=bucket, Key=key)
            return response['Body'].read()
        except Exception as e:
            raise self._translate(ref, e) from e

    def _head_object(self, ref: Reference) -> None:
        bucket, key = self.locate(ref)
        client = self._get_client()
        try:
            client.head_object(Bucket=bucket, Key=key)
        except Exception as e:
            raise self._translate(ref, e) from e

    @staticmethod
    def _translate(ref: Reference, error: Exception) -> FetchError:
        """Map a botocore error onto the FetchError hierarchy."""
        response = getattr(error, 'response', None) or {}
        code = str(response.get('Error', {}).get('Code', ''))
        if code in _NOT_FOUND_CODES:
            return ResourceNotFound(ref)
        if code in _DENIED_CODES:
            return PermissionDenied(ref)
        return FetchError(ref, f"S3 request for {ref.target} failed: {error}")
