from __future__ import annotations

from vidlink.constants import BROWSER_USER_AGENT
from vidlink.domain.models import Platform


_BASE_HEADERS: dict[str, str] = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

_NAVIGATION_HEADERS: dict[str, str] = {
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

_PLATFORM_HEADERS: dict[Platform, dict[str, str]] = {
    Platform.INSTAGRAM: {
        "Referer": "https://www.instagram.com/",
        "Sec-Fetch-Site": "cross-site",
        "X-Instagram-AJAX": "1",
        "X-ASBD-ID": "129477",
        "X-IG-App-ID": "936619743392459",
    },
    Platform.TIKTOK: {
        "Referer": "https://www.tiktok.com/",
        "Sec-Fetch-Site": "none",
    },
    Platform.SNAPCHAT: {
        "Referer": "https://www.snapchat.com/",
        "Sec-Fetch-Site": "none",
    },
}


def page_headers(platform: Platform) -> dict[str, str]:
    """Browser-like request headers; platforms serve Open Graph tags only to these."""
    headers = dict(_BASE_HEADERS)
    extra = _PLATFORM_HEADERS.get(platform)
    if extra:
        headers.update(_NAVIGATION_HEADERS)
        headers.update(extra)
    return headers


_IMAGE_ACCEPT = "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8"

# Image CDNs that check where a request came from.
_THUMBNAIL_REFERERS: dict[Platform, str] = {
    Platform.INSTAGRAM: "https://www.instagram.com/",
}


def thumbnail_headers(platform: Platform) -> dict[str, str]:
    headers = {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": _IMAGE_ACCEPT,
        "Accept-Language": _BASE_HEADERS["Accept-Language"],
    }
    referer = _THUMBNAIL_REFERERS.get(platform)
    if referer:
        headers["Referer"] = referer
    return headers
