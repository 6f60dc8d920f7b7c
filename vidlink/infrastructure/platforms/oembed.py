from __future__ import annotations

from typing import Any
from urllib.parse import quote

from loguru import logger

from vidlink.domain.models import Platform, ThumbnailSource
from vidlink.infrastructure.http_client import HttpFetcher
from vidlink.infrastructure.scraping import clean_url
from .base import AbstractThumbnailStrategy, ThumbnailTarget


OEMBED_ENDPOINTS: dict[Platform, str] = {
    Platform.YOUTUBE: "https://www.youtube.com/oembed?url={url}&format=json",
    Platform.TIKTOK: "https://www.tiktok.com/oembed?url={url}",
    Platform.LOOM: "https://www.loom.com/v1/oembed?url={url}",
}


def oembed_url(platform: Platform, canonical_url: str) -> str | None:
    template = OEMBED_ENDPOINTS.get(platform)
    if template is None:
        return None
    return template.format(url=quote(canonical_url, safe=""))


async def fetch_oembed(fetcher: HttpFetcher, platform: Platform, canonical_url: str) -> dict[str, Any] | None:
    """Fetch and parse a platform's oEmbed document; None on any failure."""
    endpoint = oembed_url(platform, canonical_url)
    if endpoint is None:
        return None

    resp = await fetcher.fetch(endpoint, headers={"Accept": "application/json"})
    if resp is None or not resp.ok:
        logger.debug("[{}] oembed unavailable status={}", platform.value, resp.status if resp else None)
        return None

    try:
        data = resp.json()
    except ValueError:
        logger.debug("[{}] oembed body is not JSON", platform.value)
        return None
    return data if isinstance(data, dict) else None


class OEmbedStrategy(AbstractThumbnailStrategy):
    source = ThumbnailSource.OEMBED

    async def attempt(self, target: ThumbnailTarget) -> str | None:
        data = await fetch_oembed(self._fetcher, target.platform, target.canonical_url)
        if data is None:
            return None

        thumb = data.get("thumbnail_url")
        if not isinstance(thumb, str):
            return None
        return clean_url(thumb)
