from __future__ import annotations

from typing import Sequence

from vidlink.domain.models import Platform
from vidlink.infrastructure.http_client import HttpFetcher
from .base import AbstractThumbnailStrategy
from .oembed import OEmbedStrategy
from .open_graph import OpenGraphStrategy
from .youtube import YouTubeCdnStrategy


class StrategyRegistry:
    """
    Maps Platform -> ordered thumbnail strategy chain.
    """

    def __init__(self, chains: dict[Platform, Sequence[AbstractThumbnailStrategy]]) -> None:
        missing = [p.value for p in Platform if p not in chains]
        if missing:
            raise ValueError(f"No thumbnail chain for: {', '.join(missing)}")
        self._chains = {platform: tuple(chain) for platform, chain in chains.items()}

    @classmethod
    def default(cls, *, fetcher: HttpFetcher) -> "StrategyRegistry":
        cdn = YouTubeCdnStrategy(fetcher=fetcher)
        oembed = OEmbedStrategy(fetcher=fetcher)
        og = OpenGraphStrategy(fetcher=fetcher)
        return cls(
            {
                Platform.YOUTUBE: (cdn, oembed),
                Platform.TIKTOK: (oembed, og),
                Platform.INSTAGRAM: (og,),
                Platform.SNAPCHAT: (og,),
                Platform.LOOM: (oembed, og),
            }
        )

    def get(self, platform: Platform) -> tuple[AbstractThumbnailStrategy, ...]:
        return self._chains[platform]
