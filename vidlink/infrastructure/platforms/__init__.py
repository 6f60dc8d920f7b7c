from __future__ import annotations

from .base import AbstractThumbnailStrategy, ThumbnailTarget
from .headers import page_headers, thumbnail_headers
from .oembed import OEmbedStrategy, fetch_oembed
from .open_graph import OpenGraphStrategy
from .registry import StrategyRegistry
from .youtube import YouTubeCdnStrategy

__all__ = [
    "AbstractThumbnailStrategy",
    "ThumbnailTarget",
    "page_headers",
    "thumbnail_headers",
    "OEmbedStrategy",
    "fetch_oembed",
    "OpenGraphStrategy",
    "StrategyRegistry",
    "YouTubeCdnStrategy",
]
