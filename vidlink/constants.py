from __future__ import annotations

from vidlink.domain.models import Platform


DEFAULT_USER_AGENT: str = "VidLink/1.0"

# Some platforms only serve Open Graph tags to real browsers.
BROWSER_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# User-facing, short messages (no stack traces)
MSG_UNSUPPORTED_PLATFORM: str = (
    "This video site isn't supported yet. Currently supported: "
    + ", ".join(p.display_name for p in Platform)
    + "."
)
MSG_BAD_REQUEST: str = "Request body must be JSON with a \"url\" string."
MSG_FETCH_FAILED: str = "Failed to fetch URL."
MSG_THUMBNAIL_UNAVAILABLE: str = (
    "We couldn't fetch a thumbnail for this video. "
    "The video may be private or the platform is temporarily unavailable."
)
MSG_THUMBNAIL_UPDATED: str = "Thumbnail updated successfully."
MSG_INTERNAL_ERROR: str = "An unexpected error occurred."
