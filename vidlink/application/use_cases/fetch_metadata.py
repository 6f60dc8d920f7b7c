from __future__ import annotations

from loguru import logger

from vidlink.application.use_cases.parse_link import ParseLinkUseCase
from vidlink.constants import MSG_FETCH_FAILED
from vidlink.domain.errors import FetchError
from vidlink.domain.models import NormalizedUrl, PageMetadata, Platform
from vidlink.infrastructure.http_client import HttpFetcher
from vidlink.infrastructure.platforms import fetch_oembed, page_headers
from vidlink.infrastructure.scraping import clean_url, scrape_page
from vidlink.infrastructure.scraping.cleanup import clean_text


class FetchMetadataUseCase:
    """
    Title, creator, preview image and tags for a shared link.

    TikTok answers its oEmbed endpoint far more reliably than its HTML, so it
    is asked first; everything else is scraped from the public page.
    """

    def __init__(self, *, parse_link: ParseLinkUseCase, fetcher: HttpFetcher, max_page_bytes: int) -> None:
        self._parse_link = parse_link
        self._fetcher = fetcher
        self._max_page_bytes = max_page_bytes

    async def execute(self, raw_url: str) -> PageMetadata:
        link = (await self._parse_link.execute(raw_url)).link
        logger.info("[{}] fetching metadata for {}", link.platform.value, link.canonical)

        if link.platform is Platform.TIKTOK:
            meta = await self._from_oembed(link)
            if meta is not None:
                return meta

        resp = await self._fetcher.fetch(
            link.canonical,
            headers=page_headers(link.platform),
            max_bytes=self._max_page_bytes,
        )
        if resp is None or not resp.ok:
            status = resp.status if resp else None
            logger.warning("[{}] page fetch failed {} status={}", link.platform.value, link.canonical, status)
            raise FetchError(MSG_FETCH_FAILED, status=status)

        html = resp.text()
        logger.debug("[{}] fetched {} chars", link.platform.value, len(html))

        page = scrape_page(html, link.platform)
        logger.info(
            "[{}] extracted title={!r} creator={!r} image={} tags={}",
            link.platform.value,
            page.title,
            page.creator,
            page.image,
            len(page.tags),
        )
        return PageMetadata(
            platform=link.platform,
            title=page.title,
            thumbnail_url=page.image,
            tags=page.tags,
            creator=page.creator,
        )

    async def _from_oembed(self, link: NormalizedUrl) -> PageMetadata | None:
        data = await fetch_oembed(self._fetcher, link.platform, link.canonical)
        if data is None:
            return None

        title = data.get("title")
        thumb = data.get("thumbnail_url")
        author = data.get("author_name")
        title = clean_text(title) if isinstance(title, str) else None
        thumb = clean_url(thumb) if isinstance(thumb, str) else None
        author = clean_text(author) if isinstance(author, str) else None
        if not title and not thumb:
            return None
        return PageMetadata(platform=link.platform, title=title, thumbnail_url=thumb, tags=(), creator=author)
