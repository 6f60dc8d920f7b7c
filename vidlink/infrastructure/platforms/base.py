from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from vidlink.domain.models import Platform, ThumbnailSource
from vidlink.infrastructure.http_client import HttpFetcher


@dataclass(frozen=True, slots=True)
class ThumbnailTarget:
    platform: Platform
    canonical_url: str
    video_id: str | None = None


class AbstractThumbnailStrategy(ABC):
    """
    One step of a platform's thumbnail chain.
    """

    source: ThumbnailSource

    def __init__(self, *, fetcher: HttpFetcher) -> None:
        self._fetcher = fetcher

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def attempt(self, target: ThumbnailTarget) -> str | None:
        """
        Return a usable image URL, or None to fall through to the next strategy.
        Upstream failures are reported as None, not raised.
        """
        raise NotImplementedError
