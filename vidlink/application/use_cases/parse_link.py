from __future__ import annotations

from loguru import logger

from vidlink.application.dto import ParsedLinkDTO
from vidlink.constants import MSG_UNSUPPORTED_PLATFORM
from vidlink.domain.errors import UnsupportedPlatformError, ValidationError
from vidlink.domain.urls import normalize


class ParseLinkUseCase:
    async def execute(self, raw_text: str) -> ParsedLinkDTO:
        url = (raw_text or "").strip()
        if not url:
            raise ValidationError("Empty link.")

        link = normalize(url)
        if link is None:
            logger.info("Unsupported link rejected: {!r}", url[:200])
            raise UnsupportedPlatformError(MSG_UNSUPPORTED_PLATFORM)
        return ParsedLinkDTO(link=link)
