from __future__ import annotations

from dataclasses import dataclass

from vidlink.domain.models import NormalizedUrl, StoredThumbnail, ThumbnailSource


@dataclass(frozen=True, slots=True)
class ParsedLinkDTO:
    link: NormalizedUrl

    def to_dict(self) -> dict:
        return {
            "canonical": self.link.canonical,
            "platform": self.link.platform.value,
            "video_id": self.link.video_id,
        }


@dataclass(frozen=True, slots=True)
class RefreshResultDTO:
    success: bool
    message: str
    source: ThumbnailSource
    stored: StoredThumbnail | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "source": self.source.value,
            "key": self.stored.key if self.stored else None,
        }
