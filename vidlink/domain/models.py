from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Platform(str, Enum):
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    SNAPCHAT = "snapchat"
    LOOM = "loom"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[Platform, str] = {
    Platform.YOUTUBE: "YouTube",
    Platform.TIKTOK: "TikTok",
    Platform.INSTAGRAM: "Instagram",
    Platform.SNAPCHAT: "Snapchat",
    Platform.LOOM: "Loom",
}


class ThumbnailSource(str, Enum):
    CDN_GUESS = "cdn_guess"
    OEMBED = "oembed"
    OPEN_GRAPH = "open_graph"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class NormalizedUrl:
    """
    Canonical, tracking-free form of a supported platform URL.
    Re-normalizing `canonical` yields an equal object.
    """
    canonical: str
    platform: Platform
    video_id: str | None = None


@dataclass(frozen=True, slots=True)
class ThumbnailResult:
    thumb_url: str | None
    source: ThumbnailSource

    def __post_init__(self) -> None:
        if (self.thumb_url is None) != (self.source is ThumbnailSource.NONE):
            raise ValueError("thumb_url must be set if and only if source is not 'none'")

    @classmethod
    def none(cls) -> "ThumbnailResult":
        return cls(thumb_url=None, source=ThumbnailSource.NONE)

    @property
    def found(self) -> bool:
        return self.thumb_url is not None


@dataclass(frozen=True, slots=True)
class ScrapedPage:
    title: str | None = None
    image: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    creator: str | None = None


@dataclass(frozen=True, slots=True)
class PageMetadata:
    platform: Platform
    title: str | None
    thumbnail_url: str | None
    tags: tuple[str, ...] = field(default_factory=tuple)
    creator: str | None = None


@dataclass(frozen=True, slots=True)
class StoredThumbnail:
    """A persisted copy of a thumbnail image. `key` is relative to the store root."""
    key: str
    path: Path
    content_type: str
    size: int
    source: ThumbnailSource
