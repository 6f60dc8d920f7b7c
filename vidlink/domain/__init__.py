from __future__ import annotations

from .models import (
    NormalizedUrl,
    PageMetadata,
    Platform,
    ScrapedPage,
    StoredThumbnail,
    ThumbnailResult,
    ThumbnailSource,
)
from .errors import (
    DomainError,
    FetchError,
    ThumbnailDownloadError,
    UnsupportedPlatformError,
    ValidationError,
)
from .urls import classify_platform, is_supported_url, normalize

__all__ = [
    "NormalizedUrl",
    "PageMetadata",
    "Platform",
    "ScrapedPage",
    "StoredThumbnail",
    "ThumbnailResult",
    "ThumbnailSource",
    "DomainError",
    "FetchError",
    "ThumbnailDownloadError",
    "UnsupportedPlatformError",
    "ValidationError",
    "classify_platform",
    "is_supported_url",
    "normalize",
]
