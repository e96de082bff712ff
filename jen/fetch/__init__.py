"""Fetchers: turn References into bytes.

Classes:
    Fetcher: ABC (read, check, aclose)
    FetcherRegistry: routes by URL scheme
    FileFetcher: file: URLs
    HttpFetcher: http: and https: URLs (httpx)
    S3Fetcher: s3:// URLs (requires boto3)
"""

from .base import Fetcher, FetcherRegistry
from .files import FileFetcher
from .http import HttpFetcher
from .s3 import S3Fetcher

__all__ = [
    'Fetcher',
    'FetcherRegistry',
    'FileFetcher',
    'HttpFetcher',
    'S3Fetcher',
]
