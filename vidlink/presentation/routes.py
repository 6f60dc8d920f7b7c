from __future__ import annotations

from typing import Any, Awaitable, Callable

from aiohttp import web
from loguru import logger

from vidlink.application.use_cases import (
    FetchMetadataUseCase,
    ParseLinkUseCase,
    RefreshThumbnailUseCase,
    ResolveThumbnailUseCase,
)
from vidlink.constants import MSG_BAD_REQUEST, MSG_INTERNAL_ERROR
from vidlink.di import Container
from vidlink.domain.errors import (
    DomainError,
    FetchError,
    ThumbnailDownloadError,
    UnsupportedPlatformError,
    ValidationError,
)


CONTAINER_KEY = web.AppKey("container", Container)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _error(code: int, message: str, /, **extra: Any) -> web.Response:
    return web.json_response({"error": message, **extra}, status=code)


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as exc:
        return _error(400, str(exc))
    except UnsupportedPlatformError as exc:
        return _error(422, str(exc))
    except FetchError as exc:
        logger.warning("Upstream fetch failed for {}: {}", request.path, exc)
        return _error(502, str(exc), upstream_status=exc.status)
    except ThumbnailDownloadError as exc:
        logger.warning("Thumbnail download failed: {}", exc)
        return _error(502, str(exc))
    except DomainError as exc:
        return _error(400, str(exc))
    except Exception:
        logger.exception("Unhandled error while handling {} {}", request.method, request.path)
        return _error(500, MSG_INTERNAL_ERROR)


async def _read_url(request: web.Request) -> str:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise ValidationError(MSG_BAD_REQUEST) from exc
    url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str) or not url.strip():
        raise ValidationError(MSG_BAD_REQUEST)
    return url


def _use_case(request: web.Request, name: str) -> Any:
    return request.app[CONTAINER_KEY].get(name)


async def health(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def normalize_link(request: web.Request) -> web.Response:
    parse_link: ParseLinkUseCase = _use_case(request, "parse_link_uc")
    parsed = await parse_link.execute(await _read_url(request))
    return web.json_response(parsed.to_dict())


async def link_metadata(request: web.Request) -> web.Response:
    fetch_metadata: FetchMetadataUseCase = _use_case(request, "fetch_metadata_uc")
    meta = await fetch_metadata.execute(await _read_url(request))
    return web.json_response(
        {
            "platform": meta.platform.value,
            "title": meta.title,
            "creator": meta.creator,
            "thumbnail_url": meta.thumbnail_url,
            "tags": list(meta.tags),
        }
    )


async def resolve_thumbnail(request: web.Request) -> web.Response:
    resolve: ResolveThumbnailUseCase = _use_case(request, "resolve_thumbnail_uc")
    link, result = await resolve.execute(await _read_url(request))
    return web.json_response(
        {
            "platform": link.platform.value,
            "canonical": link.canonical,
            "thumb_url": result.thumb_url,
            "source": result.source.value,
        }
    )


async def refresh_thumbnail(request: web.Request) -> web.Response:
    refresh: RefreshThumbnailUseCase = _use_case(request, "refresh_thumbnail_uc")
    result = await refresh.execute(await _read_url(request))
    return web.json_response(result.to_dict())


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/health", health)
    app.router.add_post("/v1/links/normalize", normalize_link)
    app.router.add_post("/v1/links/metadata", link_metadata)
    app.router.add_post("/v1/thumbnails/resolve", resolve_thumbnail)
    app.router.add_post("/v1/thumbnails/refresh", refresh_thumbnail)
