"""
URL classification and canonicalization for supported video platforms.

Supportability is decided by an exact-hostname allowlist compiled into this
module. Nothing here raises: every failure (malformed input, unsupported host,
disallowed scheme, supported host with an unusable path) returns None.
"""
from __future__ import annotations

import re
from typing import Callable
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit

from loguru import logger

from .models import NormalizedUrl, Platform


# Exact hostnames only. Every entry maps to exactly one platform.
ALLOWED_HOSTS: dict[str, Platform] = {
    "youtube.com": Platform.YOUTUBE,
    "www.youtube.com": Platform.YOUTUBE,
    "m.youtube.com": Platform.YOUTUBE,
    "youtu.be": Platform.YOUTUBE,
    "instagram.com": Platform.INSTAGRAM,
    "www.instagram.com": Platform.INSTAGRAM,
    "m.instagram.com": Platform.INSTAGRAM,
    "tiktok.com": Platform.TIKTOK,
    "www.tiktok.com": Platform.TIKTOK,
    "m.tiktok.com": Platform.TIKTOK,
    "vm.tiktok.com": Platform.TIKTOK,
    "vt.tiktok.com": Platform.TIKTOK,
    "snapchat.com": Platform.SNAPCHAT,
    "www.snapchat.com": Platform.SNAPCHAT,
    "story.snapchat.com": Platform.SNAPCHAT,
    "t.snapchat.com": Platform.SNAPCHAT,
    "loom.com": Platform.LOOM,
    "www.loom.com": Platform.LOOM,
}

ALLOWED_SCHEMES = frozenset({"http", "https"})

YOUTUBE_SHORT_HOST = "youtu.be"
SNAPCHAT_SHORT_HOST = "t.snapchat.com"

_TIKTOK_VIDEO_RE = re.compile(r"/video/(\d+)")
_INSTAGRAM_POST_RE = re.compile(r"/(?:p|reel)/([^/]+)")
_SNAPCHAT_SPOTLIGHT_RE = re.compile(r"/spotlight/([A-Za-z0-9_-]+)")
_LOOM_SHARE_RE = re.compile(r"/share/([A-Za-z0-9_-]+)")


def _split(url_string: object) -> SplitResult | None:
    if not isinstance(url_string, str):
        return None
    text = url_string.strip()
    if not text:
        return None
    try:
        parts = urlsplit(text)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc or not parts.hostname:
        return None
    # Browsers read "\" as "/" in http(s) URLs, so the host they resolve
    # would differ from the one checked here.
    if "\\" in parts.netloc or "\\" in parts.path:
        logger.debug("Rejected URL with backslash in authority or path: {!r}", text[:200])
        return None
    return parts


def classify_platform(url_string: str) -> Platform | None:
    parts = _split(url_string)
    if parts is None:
        return None

    host = (parts.hostname or "").lower()
    platform = ALLOWED_HOSTS.get(host)
    if platform is None:
        logger.debug("Hostname not in allowlist: {}", host)
    return platform


def is_supported_url(url_string: str) -> bool:
    return classify_platform(url_string) is not None


def _first_param(parts: SplitResult, name: str) -> str | None:
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key == name:
            return value
    return None


def _match_id(pattern: re.Pattern[str], path: str) -> str | None:
    m = pattern.search(path)
    return m.group(1) if m else None


def _normalize_youtube(parts: SplitResult, original: str) -> NormalizedUrl | None:
    host = (parts.hostname or "").lower()
    if host == YOUTUBE_SHORT_HOST:
        video_id = parts.path.lstrip("/").split("/")[0]
    else:
        video_id = _first_param(parts, "v")

    if not video_id:
        # supported platform, but no canonical form can be produced
        return None

    query = [("v", video_id)]
    timestamp = _first_param(parts, "t")
    if timestamp:
        query.append(("t", timestamp))

    canonical = f"https://www.youtube.com/watch?{urlencode(query)}"
    return NormalizedUrl(canonical=canonical, platform=Platform.YOUTUBE, video_id=video_id)


def _normalize_tiktok(parts: SplitResult, original: str) -> NormalizedUrl:
    return NormalizedUrl(
        canonical=f"https://www.tiktok.com{parts.path}",
        platform=Platform.TIKTOK,
        video_id=_match_id(_TIKTOK_VIDEO_RE, parts.path),
    )


def _normalize_instagram(parts: SplitResult, original: str) -> NormalizedUrl:
    return NormalizedUrl(
        canonical=f"https://www.instagram.com{parts.path}",
        platform=Platform.INSTAGRAM,
        video_id=_match_id(_INSTAGRAM_POST_RE, parts.path),
    )


def _normalize_snapchat(parts: SplitResult, original: str) -> NormalizedUrl:
    host = (parts.hostname or "").lower()
    segments = [s for s in parts.path.split("/") if s]

    # Short links are single-use redirects and are never rewritten.
    if parts.path.startswith("/t/"):
        code = segments[1] if len(segments) > 1 else None
        return NormalizedUrl(canonical=original, platform=Platform.SNAPCHAT, video_id=code)
    if host == SNAPCHAT_SHORT_HOST:
        code = segments[0] if segments else None
        return NormalizedUrl(canonical=original, platform=Platform.SNAPCHAT, video_id=code)

    return NormalizedUrl(
        canonical=f"https://www.snapchat.com{parts.path}",
        platform=Platform.SNAPCHAT,
        video_id=_match_id(_SNAPCHAT_SPOTLIGHT_RE, parts.path),
    )


def _normalize_loom(parts: SplitResult, original: str) -> NormalizedUrl:
    return NormalizedUrl(
        canonical=f"https://www.loom.com{parts.path}",
        platform=Platform.LOOM,
        video_id=_match_id(_LOOM_SHARE_RE, parts.path),
    )


_NORMALIZERS: dict[Platform, Callable[[SplitResult, str], NormalizedUrl | None]] = {
    Platform.YOUTUBE: _normalize_youtube,
    Platform.TIKTOK: _normalize_tiktok,
    Platform.INSTAGRAM: _normalize_instagram,
    Platform.SNAPCHAT: _normalize_snapchat,
    Platform.LOOM: _normalize_loom,
}


def normalize(url_string: str) -> NormalizedUrl | None:
    parts = _split(url_string)
    if parts is None:
        return None

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        logger.debug("Rejected URL scheme: {}", parts.scheme)
        return None

    platform = classify_platform(url_string)
    if platform is None:
        return None

    try:
        return _NORMALIZERS[platform](parts, url_string.strip())
    except Exception:
        logger.opt(exception=True).debug("URL normalization failed: {!r}", url_string)
        return None
