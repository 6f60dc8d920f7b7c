from __future__ import annotations

from loguru import logger

from vidlink.domain.models import ThumbnailSource
from vidlink.infrastructure.scraping import extract_image
from .base import AbstractThumbnailStrategy, ThumbnailTarget
from .headers import page_headers


class OpenGraphStrategy(AbstractThumbnailStrategy):
    """
    Fetch the public page and pull the preview image out of its markup.
    """

    source = ThumbnailSource.OPEN_GRAPH

    async def attempt(self, target: ThumbnailTarget) -> str | None:
        resp = await self._fetcher.fetch(target.canonical_url, headers=page_headers(target.platform))
        if resp is None or not resp.ok:
            logger.debug(
                "[{}] page unavailable {} status={}",
                target.platform.value,
                target.canonical_url,
                resp.status if resp else None,
            )
            return None

        return extract_image(resp.text(), target.platform)
