from __future__ import annotations

from .http_client import AiohttpFetcher, HttpFetcher, HttpResponse, RetryPolicy
from .thumbnail_cache import InMemoryThumbnailCache, ThumbnailCache
from .thumbnail_store import LocalThumbnailStore, ThumbnailStore

__all__ = [
    "AiohttpFetcher",
    "HttpFetcher",
    "HttpResponse",
    "RetryPolicy",
    "InMemoryThumbnailCache",
    "ThumbnailCache",
    "LocalThumbnailStore",
    "ThumbnailStore",
]
