from __future__ import annotations

from loguru import logger

from vidlink.application.dto import RefreshResultDTO
from vidlink.application.services import ThumbnailResolver
from vidlink.application.use_cases.parse_link import ParseLinkUseCase
from vidlink.constants import MSG_THUMBNAIL_UNAVAILABLE, MSG_THUMBNAIL_UPDATED
from vidlink.domain.errors import ThumbnailDownloadError
from vidlink.infrastructure.http_client import HttpFetcher
from vidlink.infrastructure.platforms import thumbnail_headers
from vidlink.infrastructure.thumbnail_store import ThumbnailStore


class RefreshThumbnailUseCase:
    """
    Resolve a thumbnail, download it and keep our own copy.

    Upstream image URLs are transient (signed CDN links expire), so only the
    stored copy is meant to be referenced afterwards.
    """

    def __init__(
        self,
        *,
        parse_link: ParseLinkUseCase,
        resolver: ThumbnailResolver,
        fetcher: HttpFetcher,
        store: ThumbnailStore,
        max_image_bytes: int,
    ) -> None:
        self._parse_link = parse_link
        self._resolver = resolver
        self._fetcher = fetcher
        self._store = store
        self._max_image_bytes = max_image_bytes

    async def execute(self, raw_url: str) -> RefreshResultDTO:
        link = (await self._parse_link.execute(raw_url)).link
        logger.info("[{}] refreshing thumbnail for {}", link.platform.value, link.canonical)

        result = await self._resolver.resolve(link.platform, link.canonical, link.video_id)
        if result.thumb_url is None:
            logger.warning("[{}] no thumbnail found for {}", link.platform.value, link.canonical)
            return RefreshResultDTO(success=False, message=MSG_THUMBNAIL_UNAVAILABLE, source=result.source)

        resp = await self._fetcher.fetch(
            result.thumb_url,
            headers=thumbnail_headers(link.platform),
            max_bytes=self._max_image_bytes,
        )
        if resp is None or not resp.ok:
            raise ThumbnailDownloadError(
                f"Failed to download thumbnail (status={resp.status if resp else 'no response'})."
            )

        content_type = (resp.content_type or "").strip()
        if not content_type.lower().startswith("image/"):
            raise ThumbnailDownloadError(f"Invalid content type: {content_type or 'missing'}.")
        if resp.truncated:
            raise ThumbnailDownloadError(f"Thumbnail exceeds {self._max_image_bytes} bytes.")
        if not resp.body:
            raise ThumbnailDownloadError("Thumbnail is empty.")

        stored = await self._store.save(link, resp.body, content_type=content_type, source=result.source)
        return RefreshResultDTO(success=True, message=MSG_THUMBNAIL_UPDATED, source=result.source, stored=stored)
