from __future__ import annotations

import asyncio

from loguru import logger

from vidlink.domain.models import Platform, ThumbnailResult
from vidlink.domain.urls import normalize
from vidlink.infrastructure.platforms import StrategyRegistry, ThumbnailTarget
from vidlink.infrastructure.thumbnail_cache import ThumbnailCache


class ThumbnailResolver:
    """
    Runs a platform's thumbnail strategies in priority order and returns the
    first usable image URL.

    IMPORTANT:
      - resolve() never raises for upstream trouble; "no thumbnail" is a
        normal outcome reported as source == none.
      - The whole chain is bounded by `ceiling_sec`.
      - Caller cancellation propagates.
    """

    def __init__(
        self,
        *,
        registry: StrategyRegistry,
        ceiling_sec: float,
        cache: ThumbnailCache | None = None,
    ) -> None:
        self._registry = registry
        self._ceiling_sec = ceiling_sec
        self._cache = cache

    async def resolve(
        self,
        platform: Platform,
        canonical_url: str,
        video_id: str | None = None,
    ) -> ThumbnailResult:
        key = (platform, canonical_url)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("[{}] thumbnail cache hit {}", platform.value, canonical_url)
                return cached

        if video_id is None:
            link = normalize(canonical_url)
            if link is not None and link.platform is platform:
                video_id = link.video_id

        target = ThumbnailTarget(platform=platform, canonical_url=canonical_url, video_id=video_id)
        try:
            result = await asyncio.wait_for(self._run_chain(target), timeout=self._ceiling_sec)
        except asyncio.TimeoutError:
            logger.warning(
                "[{}] thumbnail chain exceeded {}s for {}",
                platform.value,
                self._ceiling_sec,
                canonical_url,
            )
            return ThumbnailResult.none()

        if result.found and self._cache is not None:
            self._cache.set(key, result)
        return result

    async def _run_chain(self, target: ThumbnailTarget) -> ThumbnailResult:
        for strategy in self._registry.get(target.platform):
            try:
                thumb_url = await strategy.attempt(target)
            except Exception:
                logger.exception("[{}] {} failed", target.platform.value, strategy.name)
                continue

            if thumb_url:
                logger.info(
                    "[{}] thumbnail via {} for {}",
                    target.platform.value,
                    strategy.source.value,
                    target.canonical_url,
                )
                return ThumbnailResult(thumb_url=thumb_url, source=strategy.source)

        logger.info("[{}] no thumbnail for {}", target.platform.value, target.canonical_url)
        return ThumbnailResult.none()
