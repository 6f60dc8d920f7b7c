from __future__ import annotations

import html
import re


_IMAGE_EXT_RE = re.compile(r"\.(?:jpg|jpeg|png|webp)(?:$|\?)", re.IGNORECASE)

# Only terminated references; bare "&para=1" in a query string must survive.
_ENTITY_RE = re.compile(r"&(?:#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

_ABSOLUTE_URL_RE = re.compile(r"^https?://[^/\s?#]+", re.IGNORECASE)

# "cdn.example.com/path" with no scheme, as found in some JSON state blobs.
_BARE_HOST_RE = re.compile(r"^[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+(?:[/?:]|$)")

# Escapes as they appear inside server-rendered JSON state blobs.
_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\u002F", "/"),
    ("\\u002f", "/"),
    ("\\u0026", "&"),
    ("\\/", "/"),
)


def decode_entities(raw: str) -> str:
    return _ENTITY_RE.sub(lambda m: html.unescape(m.group(0)), raw)


def unescape_json_string(raw: str) -> str:
    value = raw
    for needle, repl in _ESCAPES:
        value = value.replace(needle, repl)
    return value.replace("\\", "")


def clean_url(raw: str | None, *, allow_bare_host: bool = False) -> str | None:
    """
    Turn an extracted URL-ish string into an absolute http(s) URL.

    Decodes HTML entities and JSON escapes and upgrades protocol-relative
    URLs. With `allow_bare_host`, a value starting with a dotted hostname
    ("p16.tiktokcdn.com/...") is prefixed with https://. Anything else
    (placeholders like "undefined", site-relative paths, data: URIs)
    returns None.
    """
    if raw is None:
        return None

    value = decode_entities(unescape_json_string(raw.strip()))
    if not value:
        return None

    if value.startswith("//"):
        value = "https:" + value
    elif allow_bare_host and _BARE_HOST_RE.match(value):
        value = "https://" + value

    return value if _ABSOLUTE_URL_RE.match(value) else None


def clean_text(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = decode_entities(raw).strip()
    return value or None


def looks_like_image(url: str) -> bool:
    return bool(_IMAGE_EXT_RE.search(url))
