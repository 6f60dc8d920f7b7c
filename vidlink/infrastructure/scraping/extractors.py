"""
Platform-specific image extractors for server-rendered pages.

Each extractor is an independent callable `html -> str | None`. Chains are
ordered tuples; new patterns are appended without touching control flow.
The field names targeted here are undocumented upstream internals and are
expected to drift.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from loguru import logger

from vidlink.domain.models import Platform
from .cleanup import clean_url, looks_like_image


Extractor = Callable[[str], Optional[str]]

# Upper bound on candidate matches inspected per pattern.
MAX_MATCHES_PER_PATTERN = 5


@dataclass(frozen=True, slots=True)
class RegexExtractor:
    pattern: re.Pattern[str]
    accept: Callable[[str], bool]

    def __call__(self, html: str) -> str | None:
        for i, m in enumerate(self.pattern.finditer(html)):
            if i >= MAX_MATCHES_PER_PATTERN:
                break
            url = clean_url(m.group(1), allow_bare_host=True)
            if url and self.accept(url):
                return url
        return None


def regex_chain(patterns: Iterable[str], accept: Callable[[str], bool]) -> tuple[Extractor, ...]:
    return tuple(RegexExtractor(pattern=re.compile(p), accept=accept) for p in patterns)


def run_chain(extractors: Iterable[Extractor], html: str) -> str | None:
    for extractor in extractors:
        try:
            value = extractor(html)
        except Exception:
            logger.opt(exception=True).debug("extractor {!r} failed", extractor)
            continue
        if value:
            return value
    return None


def _accept_tiktok(url: str) -> bool:
    return "tiktokcdn.com" in url or "muscdn.com" in url or looks_like_image(url)


def _accept_instagram(url: str) -> bool:
    return (
        "instagram" in url
        or "scontent" in url
        or "cdninstagram" in url
        or looks_like_image(url)
    )


def _accept_snapchat(url: str) -> bool:
    return "snapchat" in url or "sc-cdn" in url or looks_like_image(url)


TIKTOK_PATTERNS: tuple[str, ...] = (
    r'"cover":"([^"]+)"',
    r'"originCover":"([^"]+)"',
    r'"dynamicCover":"([^"]+)"',
    r'"thumbnail":"([^"]+)"',
    r'"origin_cover":"([^"]+)"',
    r'"dynamic_cover":"([^"]+)"',
    r'"video":\s*\{\s*"cover":"([^"]+)"',
    r'"videoObjectPageProps":\s*\{[^}]*"cover":"([^"]+)"',
    r'"itemStruct":\s*\{[^}]*"video":\s*\{[^}]*"cover":"([^"]+)"',
    r'"video":\s*\{[^}]*"originCover":"([^"]+)"',
    r'"video":\s*\{[^}]*"dynamicCover":"([^"]+)"',
    r'"preloadList":\s*\[[^}]*"url":"([^"]*\.webp[^"]*)"',
    r'"preloadList":\s*\[[^}]*"url":"([^"]*\.jpg[^"]*)"',
    r'"coverLarge":"([^"]+)"',
    r'"coverMedium":"([^"]+)"',
    r'"coverThumb":"([^"]+)"',
    r'"cover_large":"([^"]+)"',
    r'"cover_medium":"([^"]+)"',
    r'"cover_thumb":"([^"]+)"',
)

INSTAGRAM_PATTERNS: tuple[str, ...] = (
    r'"display_url":"([^"]+)"',
    r'"src":"([^"]*\.jpg[^"]*)",',
    r'"src":"([^"]*\.jpeg[^"]*)",',
    r'"src":"([^"]*\.png[^"]*)",',
    r'"src":"([^"]*\.webp[^"]*)",',
    r'"thumbnail_src":"([^"]+)"',
    r'"image_versions2":\s*\{\s*"candidates":\s*\[\s*\{\s*"url":"([^"]+)"',
    r'"candidates":\s*\[\s*\{\s*"url":"([^"]+)"',
    r'"thumbnail_url":"([^"]+)"',
    r'"cover_media":\s*\{[^}]*"cropped_image_version":\s*\{[^}]*"url":"([^"]+)"',
    r'"image_url":"([^"]+)"',
    r'"media_url":"([^"]+)"',
    r'((?:https?:)?(?:\\?/){2}scontent[^"\s]*?\.jpg[^"\s]*)',
    r'((?:https?:)?(?:\\?/){2}[^"\s]*?cdninstagram\.com[^"\s]*?\.jpg[^"\s]*)',
)

SNAPCHAT_PATTERNS: tuple[str, ...] = (
    r'"thumbnailUrl":"([^"]+)"',
    r'"thumbnail":"([^"]+)"',
    r'"image":"([^"]+)"',
    r'"coverImageUrl":"([^"]+)"',
    r'"poster":"([^"]+)"',
    r'((?:https?:)?//cf-st\.sc-cdn\.net/[^"\s]*?\.jpg[^"\s]*)',
    r'((?:https?:)?//bolt-gcdn\.sc-cdn\.net/[^"\s]*?\.jpg[^"\s]*)',
)


PLATFORM_EXTRACTORS: Mapping[Platform, tuple[Extractor, ...]] = {
    Platform.TIKTOK: regex_chain(TIKTOK_PATTERNS, _accept_tiktok),
    Platform.INSTAGRAM: regex_chain(INSTAGRAM_PATTERNS, _accept_instagram),
    Platform.SNAPCHAT: regex_chain(SNAPCHAT_PATTERNS, _accept_snapchat),
}


def sniff_platform(html: str) -> Platform | None:
    """Guess which embedded-state dialect a page speaks when the caller doesn't know."""
    for platform in (Platform.TIKTOK, Platform.INSTAGRAM, Platform.SNAPCHAT):
        if platform.value in html:
            return platform
    return None


def extract_platform_image(html: str, platform: Platform | None = None) -> str | None:
    target = platform if platform is not None else sniff_platform(html)
    if target not in PLATFORM_EXTRACTORS:
        return None
    return run_chain(PLATFORM_EXTRACTORS[target], html)
