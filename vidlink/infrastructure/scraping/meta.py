from __future__ import annotations

import json
import re
from typing import Any, Iterable, Iterator

from bs4 import BeautifulSoup
from loguru import logger

from vidlink.domain.models import Platform, ScrapedPage
from .cleanup import clean_text, clean_url
from .extractors import extract_platform_image


MAX_TAGS = 25

TITLE_KEYS: tuple[str, ...] = ("og:title", "title", "twitter:title")

IMAGE_KEYS: tuple[str, ...] = (
    "og:image:secure_url",
    "og:image:url",
    "og:image",
    "twitter:image:src",
    "twitter:image",
    "image",
    "thumbnail",
    "thumbnail_url",
)

VIDEO_THUMB_KEYS: tuple[str, ...] = ("og:video:thumbnail",)

TAG_KEYS = frozenset({"og:video:tag", "video:tag", "article:tag"})

CREATOR_KEYS: tuple[str, ...] = ("og:video:author", "author", "twitter:creator")

# Instagram titles carry the author as "Caption (@handle) on Instagram".
_TITLE_HANDLE_RE = re.compile(r"\(@([^()\s]+)\)")

_HASHTAG_RE = re.compile(r"(?<![\w&/])#([A-Za-z0-9_][A-Za-z0-9_\-]{0,59})")


class _MetaIndex:
    """Flattened view of a page's <meta> tags keyed by property/name/itemprop."""

    def __init__(self, soup: BeautifulSoup | None) -> None:
        self._entries: list[tuple[str, str]] = []
        if soup is None:
            return
        for tag in soup.find_all("meta"):
            attrs = {k.lower(): v for k, v in tag.attrs.items() if isinstance(v, str)}
            key = (attrs.get("property") or attrs.get("name") or attrs.get("itemprop") or "").strip().lower()
            content = attrs.get("content") or attrs.get("value")
            if key and content and content.strip():
                self._entries.append((key, content))

    def ranked(self, *keys: str) -> Iterator[str]:
        """Contents in key-priority order, document order within a key."""
        for wanted in keys:
            for key, content in self._entries:
                if key == wanted:
                    yield content

    def first(self, *keys: str) -> str | None:
        return next(self.ranked(*keys), None)

    def first_url(self, *keys: str) -> str | None:
        """Highest-priority content that cleans up to an absolute URL."""
        for content in self.ranked(*keys):
            url = clean_url(content)
            if url:
                return url
        return None

    def all(self, keys: Iterable[str]) -> list[str]:
        wanted = set(keys)
        return [content for key, content in self._entries if key in wanted]


def _soup(html: str) -> BeautifulSoup | None:
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception:
        logger.opt(exception=True).debug("HTML parse failed; falling back to pattern extractors")
        return None


def _title(soup: BeautifulSoup | None, metas: _MetaIndex) -> str | None:
    title = clean_text(metas.first(*TITLE_KEYS))
    if title:
        return title
    if soup is not None and soup.title is not None:
        return clean_text(soup.title.get_text())
    return None


def _creator(metas: _MetaIndex, title: str | None) -> str | None:
    creator = clean_text(metas.first(*CREATOR_KEYS))
    if creator:
        return creator
    m = _TITLE_HANDLE_RE.search(title or "")
    return "@" + m.group(1) if m else None


def _ld_image(node: Any) -> str | None:
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        for item in node:
            found = _ld_image(item)
            if found:
                return found
        return None
    if isinstance(node, dict):
        for key in ("url", "contentUrl", "thumbnailUrl"):
            value = node.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _ld_nodes(data: Any) -> Iterable[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _ld_nodes(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from _ld_nodes(graph)


def _json_ld_image(soup: BeautifulSoup | None) -> str | None:
    if soup is None:
        return None
    for script in soup.find_all("script", attrs={"type": re.compile(r"application/ld\+json", re.I)}):
        try:
            data = json.loads(script.string or script.get_text() or "")
        except (TypeError, ValueError):
            continue
        for node in _ld_nodes(data):
            video = node.get("video")
            candidates = (
                node.get("image"),
                node.get("thumbnailUrl"),
                video.get("thumbnailUrl") if isinstance(video, dict) else None,
            )
            for candidate in candidates:
                url = clean_url(_ld_image(candidate))
                if url:
                    return url
    return None


def extract_image(html: str, platform: Platform | None = None, *, soup: BeautifulSoup | None = None) -> str | None:
    """
    Best-guess preview image: Open Graph, then Twitter card and generic meta,
    then platform embedded-state patterns, then JSON-LD.
    """
    if soup is None:
        soup = _soup(html)
    metas = _MetaIndex(soup)

    image = metas.first_url(*IMAGE_KEYS, *VIDEO_THUMB_KEYS)
    if image:
        return image

    try:
        image = extract_platform_image(html, platform)
    except Exception:
        logger.opt(exception=True).debug("platform extractors failed")
        image = None
    if image:
        return image

    try:
        return _json_ld_image(soup)
    except Exception:
        logger.opt(exception=True).debug("JSON-LD extraction failed")
        return None


def _tags(soup: BeautifulSoup | None, metas: _MetaIndex) -> tuple[str, ...]:
    raw: list[str] = []

    keywords = metas.first("keywords")
    if keywords:
        raw.extend(keywords.split(","))
    raw.extend(metas.all(TAG_KEYS))

    text_parts = [metas.first("og:description", "description", "twitter:description") or ""]
    if soup is not None:
        for node in soup(["script", "style", "noscript"]):
            node.decompose()
        text_parts.append(soup.get_text(" "))
    for part in text_parts:
        raw.extend(_HASHTAG_RE.findall(part))

    seen: dict[str, None] = {}
    for tag in raw:
        t = tag.strip().lower()
        if t and t not in seen:
            seen[t] = None
        if len(seen) >= MAX_TAGS:
            break
    return tuple(seen)


def scrape_page(html: str, platform: Platform | None = None) -> ScrapedPage:
    """
    Extract title, creator, image and tags from raw, possibly truncated HTML.
    Missing stages fall through; this never raises.
    """
    if not html:
        return ScrapedPage()

    soup = _soup(html)
    metas = _MetaIndex(soup)

    try:
        title = _title(soup, metas)
    except Exception:
        logger.opt(exception=True).debug("title extraction failed")
        title = None

    try:
        creator = _creator(metas, title)
    except Exception:
        logger.opt(exception=True).debug("creator extraction failed")
        creator = None

    image = extract_image(html, platform, soup=soup)

    try:
        tags = _tags(soup, metas)
    except Exception:
        logger.opt(exception=True).debug("tag extraction failed")
        tags = ()

    return ScrapedPage(title=title, image=image, tags=tags, creator=creator)
