import asyncio
import time

import pytest

from vidlink.application.services import ThumbnailResolver
from vidlink.domain.models import Platform, ThumbnailResult, ThumbnailSource
from vidlink.infrastructure.platforms import (
    AbstractThumbnailStrategy,
    OpenGraphStrategy,
    StrategyRegistry,
    ThumbnailTarget,
)
from vidlink.infrastructure.platforms.oembed import oembed_url
from vidlink.infrastructure.thumbnail_cache import InMemoryThumbnailCache


YT_ID = "dQw4w9WgXcQ"
YT_CANONICAL = f"https://www.youtube.com/watch?v={YT_ID}"
YT_MAXRES = f"https://i.ytimg.com/vi/{YT_ID}/maxresdefault.jpg"
YT_HQ = f"https://i.ytimg.com/vi/{YT_ID}/hqdefault.jpg"

TIKTOK_CANONICAL = "https://www.tiktok.com/@user/video/123456"
INSTAGRAM_CANONICAL = "https://www.instagram.com/reel/Cx9abc/"
SNAPCHAT_CANONICAL = "https://t.snapchat.com/AbC123"
LOOM_CANONICAL = "https://www.loom.com/share/abc123"


def make_resolver(fetcher, *, ceiling_sec=2.0, cache=None):
    return ThumbnailResolver(
        registry=StrategyRegistry.default(fetcher=fetcher),
        ceiling_sec=ceiling_sec,
        cache=cache,
    )


def test_result_invariant():
    with pytest.raises(ValueError):
        ThumbnailResult(thumb_url=None, source=ThumbnailSource.OEMBED)
    with pytest.raises(ValueError):
        ThumbnailResult(thumb_url="https://x/y.jpg", source=ThumbnailSource.NONE)
    assert not ThumbnailResult.none().found


def test_registry_requires_every_platform(fetcher):
    og = OpenGraphStrategy(fetcher=fetcher)
    with pytest.raises(ValueError, match="loom"):
        StrategyRegistry({p: (og,) for p in Platform if p is not Platform.LOOM})


def test_default_chains(fetcher):
    registry = StrategyRegistry.default(fetcher=fetcher)
    sources = {p: [s.source for s in registry.get(p)] for p in Platform}
    assert sources == {
        Platform.YOUTUBE: [ThumbnailSource.CDN_GUESS, ThumbnailSource.OEMBED],
        Platform.TIKTOK: [ThumbnailSource.OEMBED, ThumbnailSource.OPEN_GRAPH],
        Platform.INSTAGRAM: [ThumbnailSource.OPEN_GRAPH],
        Platform.SNAPCHAT: [ThumbnailSource.OPEN_GRAPH],
        Platform.LOOM: [ThumbnailSource.OEMBED, ThumbnailSource.OPEN_GRAPH],
    }


@pytest.mark.asyncio
async def test_youtube_cdn_guess_prefers_maxres(fetcher):
    fetcher.add(YT_MAXRES, content_type="image/jpeg")
    fetcher.add(YT_HQ, content_type="image/jpeg")

    result = await make_resolver(fetcher).resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)

    assert result == ThumbnailResult(thumb_url=YT_MAXRES, source=ThumbnailSource.CDN_GUESS)
    assert fetcher.calls == [("HEAD", YT_MAXRES)]


@pytest.mark.asyncio
async def test_youtube_cdn_falls_back_to_hqdefault(fetcher):
    fetcher.add(YT_MAXRES, status=404)
    fetcher.add(YT_HQ, content_type="image/jpeg")

    result = await make_resolver(fetcher).resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)

    assert result.thumb_url == YT_HQ
    assert result.source is ThumbnailSource.CDN_GUESS


@pytest.mark.asyncio
async def test_youtube_cdn_miss_falls_back_to_oembed(fetcher):
    fetcher.add(YT_MAXRES, status=404)
    fetcher.add(YT_HQ, status=404)
    fetcher.add_json(
        oembed_url(Platform.YOUTUBE, YT_CANONICAL),
        '{"title": "Never", "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/sddefault.jpg"}',
    )

    result = await make_resolver(fetcher).resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)

    assert result.source is ThumbnailSource.OEMBED
    assert result.thumb_url == "https://i.ytimg.com/vi/dQw4w9WgXcQ/sddefault.jpg"


@pytest.mark.asyncio
async def test_youtube_video_id_is_derived_when_missing(fetcher):
    fetcher.add(YT_MAXRES, content_type="image/jpeg")

    result = await make_resolver(fetcher).resolve(Platform.YOUTUBE, YT_CANONICAL)

    assert result.source is ThumbnailSource.CDN_GUESS


@pytest.mark.asyncio
async def test_everything_failing_resolves_to_none(fetcher):
    started = time.monotonic()
    result = await make_resolver(fetcher).resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)

    assert result == ThumbnailResult.none()
    assert time.monotonic() - started < 1.0
    assert fetcher.called(oembed_url(Platform.YOUTUBE, YT_CANONICAL))


@pytest.mark.asyncio
async def test_tiktok_empty_oembed_falls_back_to_page(fetcher):
    fetcher.add_json(oembed_url(Platform.TIKTOK, TIKTOK_CANONICAL), '{"title": "no thumb"}')
    fetcher.add(
        TIKTOK_CANONICAL,
        body='<html><meta property="og:image" content="https://p16.tiktokcdn.com/og.jpeg"></html>',
        content_type="text/html",
    )

    result = await make_resolver(fetcher).resolve(Platform.TIKTOK, TIKTOK_CANONICAL)

    assert result.source is ThumbnailSource.OPEN_GRAPH
    assert result.thumb_url == "https://p16.tiktokcdn.com/og.jpeg"
    assert fetcher.headers_seen[TIKTOK_CANONICAL]["Referer"] == "https://www.tiktok.com/"


@pytest.mark.asyncio
async def test_malformed_oembed_is_a_miss(fetcher):
    fetcher.add(oembed_url(Platform.LOOM, LOOM_CANONICAL), body="<html>nope</html>", content_type="text/html")
    fetcher.add(
        LOOM_CANONICAL,
        body='<meta property="og:image" content="https://cdn.loom.com/sessions/thumbnails/abc.gif">',
    )

    result = await make_resolver(fetcher).resolve(Platform.LOOM, LOOM_CANONICAL)

    assert result.source is ThumbnailSource.OPEN_GRAPH


@pytest.mark.asyncio
async def test_loom_oembed(fetcher):
    fetcher.add_json(
        oembed_url(Platform.LOOM, LOOM_CANONICAL),
        '{"thumbnail_url": "https://cdn.loom.com/sessions/thumbnails/abc-00001.gif"}',
    )

    result = await make_resolver(fetcher).resolve(Platform.LOOM, LOOM_CANONICAL)

    assert result.source is ThumbnailSource.OEMBED
    assert not fetcher.called(LOOM_CANONICAL)


@pytest.mark.asyncio
async def test_instagram_page_scrape(fetcher):
    fetcher.add(
        INSTAGRAM_CANONICAL,
        body='<script>{"display_url":"https:\\/\\/scontent.cdninstagram.com\\/v\\/abc.jpg"}</script>',
    )

    result = await make_resolver(fetcher).resolve(Platform.INSTAGRAM, INSTAGRAM_CANONICAL)

    assert result.thumb_url == "https://scontent.cdninstagram.com/v/abc.jpg"
    assert result.source is ThumbnailSource.OPEN_GRAPH
    assert fetcher.headers_seen[INSTAGRAM_CANONICAL]["X-IG-App-ID"]


@pytest.mark.asyncio
async def test_snapchat_uses_page_only(fetcher):
    fetcher.add(SNAPCHAT_CANONICAL, status=403)

    result = await make_resolver(fetcher).resolve(Platform.SNAPCHAT, SNAPCHAT_CANONICAL)

    assert result.source is ThumbnailSource.NONE
    assert fetcher.calls == [("GET", SNAPCHAT_CANONICAL)]


@pytest.mark.asyncio
async def test_chain_is_bounded_by_ceiling(fetcher):
    fetcher.add(YT_MAXRES, delay=5.0)

    started = time.monotonic()
    result = await make_resolver(fetcher, ceiling_sec=0.05).resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)

    assert result.source is ThumbnailSource.NONE
    assert time.monotonic() - started < 1.0


class ExplodingStrategy(AbstractThumbnailStrategy):
    source = ThumbnailSource.CDN_GUESS

    async def attempt(self, target: ThumbnailTarget) -> str | None:
        raise RuntimeError("upstream parser blew up")


@pytest.mark.asyncio
async def test_strategy_exception_falls_through(fetcher):
    fetcher.add(INSTAGRAM_CANONICAL, body='<meta property="og:image" content="https://scontent.x/y.jpg">')
    boom = ExplodingStrategy(fetcher=fetcher)
    og = OpenGraphStrategy(fetcher=fetcher)
    resolver = ThumbnailResolver(registry=StrategyRegistry({p: (boom, og) for p in Platform}), ceiling_sec=1.0)

    result = await resolver.resolve(Platform.INSTAGRAM, INSTAGRAM_CANONICAL)

    assert result.source is ThumbnailSource.OPEN_GRAPH


@pytest.mark.asyncio
async def test_cancellation_propagates(fetcher):
    fetcher.add(YT_MAXRES, delay=5.0)
    task = asyncio.ensure_future(make_resolver(fetcher, ceiling_sec=10).resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_found_results_are_cached(fetcher):
    fetcher.add(YT_MAXRES, content_type="image/jpeg")
    resolver = make_resolver(fetcher, cache=InMemoryThumbnailCache(max_entries=8, ttl_sec=60))

    first = await resolver.resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)
    second = await resolver.resolve(Platform.YOUTUBE, YT_CANONICAL, YT_ID)

    assert first == second
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_misses_are_not_cached(fetcher):
    resolver = make_resolver(fetcher, cache=InMemoryThumbnailCache(max_entries=8, ttl_sec=60))

    await resolver.resolve(Platform.SNAPCHAT, SNAPCHAT_CANONICAL)
    await resolver.resolve(Platform.SNAPCHAT, SNAPCHAT_CANONICAL)

    assert len(fetcher.calls) == 2


def test_cache_ttl_and_lru_eviction():
    now = [0.0]
    cache = InMemoryThumbnailCache(max_entries=2, ttl_sec=10, clock=lambda: now[0])
    hit = ThumbnailResult(thumb_url="https://x/a.jpg", source=ThumbnailSource.OEMBED)

    cache.set((Platform.LOOM, "a"), hit)
    cache.set((Platform.LOOM, "b"), hit)
    assert cache.get((Platform.LOOM, "a")) == hit
    cache.set((Platform.LOOM, "c"), hit)
    assert cache.get((Platform.LOOM, "b")) is None
    assert len(cache) == 2

    now[0] = 11.0
    assert cache.get((Platform.LOOM, "a")) is None
