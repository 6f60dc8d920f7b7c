from __future__ import annotations

from vidlink.application.services import ThumbnailResolver
from vidlink.application.use_cases.parse_link import ParseLinkUseCase
from vidlink.domain.models import NormalizedUrl, ThumbnailResult


class ResolveThumbnailUseCase:
    def __init__(self, *, parse_link: ParseLinkUseCase, resolver: ThumbnailResolver) -> None:
        self._parse_link = parse_link
        self._resolver = resolver

    async def execute(self, raw_url: str) -> tuple[NormalizedUrl, ThumbnailResult]:
        link = (await self._parse_link.execute(raw_url)).link
        result = await self._resolver.resolve(link.platform, link.canonical, link.video_id)
        return link, result
