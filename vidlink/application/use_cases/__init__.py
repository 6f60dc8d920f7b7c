from __future__ import annotations

from .fetch_metadata import FetchMetadataUseCase
from .parse_link import ParseLinkUseCase
from .refresh_thumbnail import RefreshThumbnailUseCase
from .resolve_thumbnail import ResolveThumbnailUseCase

__all__ = [
    "FetchMetadataUseCase",
    "ParseLinkUseCase",
    "RefreshThumbnailUseCase",
    "ResolveThumbnailUseCase",
]
