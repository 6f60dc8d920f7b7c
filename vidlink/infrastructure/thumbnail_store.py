from __future__ import annotations

import asyncio
import hashlib
import re
import time
from pathlib import Path
from typing import Protocol

from loguru import logger

from vidlink.domain.models import NormalizedUrl, StoredThumbnail, ThumbnailSource


_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/avif": "avif",
}

_SAFE_SEGMENT_RE = re.compile(r"[^A-Za-z0-9_-]")


class ThumbnailStoreError(RuntimeError):
    pass


class ThumbnailStore(Protocol):
    async def save(
        self,
        link: NormalizedUrl,
        data: bytes,
        *,
        content_type: str,
        source: ThumbnailSource,
    ) -> StoredThumbnail: ...


def extension_for(content_type: str) -> str:
    mime = content_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(mime, "jpg")


def storage_segment(link: NormalizedUrl) -> str:
    """Per-video directory name: the video id when known, else a hash of the canonical URL."""
    if link.video_id:
        segment = _SAFE_SEGMENT_RE.sub("_", link.video_id)[:64]
        if segment.strip("_"):
            return segment
    return hashlib.sha1(link.canonical.encode("utf-8")).hexdigest()[:16]


class LocalThumbnailStore:
    """
    Persists thumbnail copies under `{root}/{platform}/{video}/{timestamp}.{ext}`.
    """

    def __init__(self, *, root: Path) -> None:
        self._root = root

    async def start(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    async def stop(self) -> None:
        return None

    async def save(
        self,
        link: NormalizedUrl,
        data: bytes,
        *,
        content_type: str,
        source: ThumbnailSource,
    ) -> StoredThumbnail:
        if not data:
            raise ThumbnailStoreError("refusing to store an empty image")

        timestamp_ms = int(time.time() * 1000)
        key = f"{link.platform.value}/{storage_segment(link)}/{timestamp_ms}.{extension_for(content_type)}"
        path = self._root / key

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.info("Stored thumbnail {} ({} bytes)", key, len(data))

        return StoredThumbnail(
            key=key,
            path=path,
            content_type=content_type,
            size=len(data),
            source=source,
        )
