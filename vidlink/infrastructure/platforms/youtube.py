from __future__ import annotations

from loguru import logger

from vidlink.domain.models import ThumbnailSource
from .base import AbstractThumbnailStrategy, ThumbnailTarget


# Highest resolution first; hqdefault exists for every public video.
YOUTUBE_CDN_PATTERNS: tuple[str, ...] = (
    "https://i.ytimg.com/vi/{video_id}/maxresdefault.jpg",
    "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
)


class YouTubeCdnStrategy(AbstractThumbnailStrategy):
    """
    Guess the image CDN URL from the video id and confirm it exists.
    """

    source = ThumbnailSource.CDN_GUESS

    async def attempt(self, target: ThumbnailTarget) -> str | None:
        if not target.video_id:
            return None

        for pattern in YOUTUBE_CDN_PATTERNS:
            url = pattern.format(video_id=target.video_id)
            resp = await self._fetcher.fetch(url, method="HEAD")
            if resp is not None and resp.ok:
                return url
            logger.debug("[youtube] cdn miss {} status={}", url, resp.status if resp else None)
        return None
