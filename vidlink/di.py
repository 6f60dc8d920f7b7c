from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .application.services import ThumbnailResolver
from .application.use_cases import (
    FetchMetadataUseCase,
    ParseLinkUseCase,
    RefreshThumbnailUseCase,
    ResolveThumbnailUseCase,
)
from .config.settings import AppSettings, get_settings
from .infrastructure.http_client import AiohttpFetcher, HttpFetcher, RetryPolicy
from .infrastructure.platforms import StrategyRegistry
from .infrastructure.thumbnail_cache import InMemoryThumbnailCache, ThumbnailCache
from .infrastructure.thumbnail_store import LocalThumbnailStore, ThumbnailStore


class DIError(RuntimeError):
    pass


@runtime_checkable
class AsyncStartStop(Protocol):
    async def start(self) -> None: ...
    async def stop(self) -> None: ...


@dataclass(slots=True)
class Container:
    settings: AppSettings
    _components: dict[str, Any]

    @classmethod
    def build(cls, settings: AppSettings | None = None) -> "Container":
        return cls(settings=settings or get_settings(), _components={})

    def register(self, name: str, component: Any) -> None:
        if not name or not name.strip():
            raise DIError("Component name must be non-empty")
        if name in self._components:
            raise DIError(f"Component already registered: {name}")
        self._components[name] = component

    def get(self, name: str) -> Any:
        try:
            return self._components[name]
        except KeyError as exc:
            raise DIError(f"Unknown component: {name}") from exc

    def all_components(self) -> list[tuple[str, Any]]:
        return list(self._components.items())


def build_graph(
    container: Container,
    *,
    fetcher: HttpFetcher | None = None,
    store: ThumbnailStore | None = None,
    cache: ThumbnailCache | None = None,
) -> None:
    """
    Build the whole dependency graph.
    Collaborators may be injected (tests); anything missing is built from settings.
    Any init error must crash at startup.
    """

    s = container.settings

    if fetcher is None:
        fetcher = AiohttpFetcher(
            policy=RetryPolicy(
                timeout_sec=s.http_timeout_sec,
                max_retries=s.http_max_retries,
                backoff_base_sec=s.http_backoff_base_sec,
                backoff_factor=s.http_backoff_factor,
            ),
            user_agent=s.user_agent,
            max_bytes=s.http_max_page_bytes,
        )
    if store is None:
        store = LocalThumbnailStore(root=Path(s.thumbnail_dir).expanduser().resolve())
    if cache is None and s.thumbnail_cache_size > 0 and s.thumbnail_cache_ttl_sec > 0:
        cache = InMemoryThumbnailCache(max_entries=s.thumbnail_cache_size, ttl_sec=s.thumbnail_cache_ttl_sec)

    registry = StrategyRegistry.default(fetcher=fetcher)
    resolver = ThumbnailResolver(registry=registry, ceiling_sec=s.thumbnail_ceiling_sec, cache=cache)

    # Use cases
    parse_link = ParseLinkUseCase()
    resolve_thumbnail = ResolveThumbnailUseCase(parse_link=parse_link, resolver=resolver)
    fetch_metadata = FetchMetadataUseCase(
        parse_link=parse_link,
        fetcher=fetcher,
        max_page_bytes=s.http_max_page_bytes,
    )
    refresh_thumbnail = RefreshThumbnailUseCase(
        parse_link=parse_link,
        resolver=resolver,
        fetcher=fetcher,
        store=store,
        max_image_bytes=s.thumbnail_max_bytes,
    )

    # Register (lifecycle starts AsyncStartStop components in this order)
    container.register("http_fetcher", fetcher)
    container.register("thumbnail_store", store)
    container.register("thumbnail_resolver", resolver)

    container.register("parse_link_uc", parse_link)
    container.register("resolve_thumbnail_uc", resolve_thumbnail)
    container.register("fetch_metadata_uc", fetch_metadata)
    container.register("refresh_thumbnail_uc", refresh_thumbnail)
