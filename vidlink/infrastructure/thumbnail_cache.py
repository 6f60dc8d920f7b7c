from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable, Protocol

from vidlink.domain.models import Platform, ThumbnailResult


CacheKey = tuple[Platform, str]


class ThumbnailCache(Protocol):
    def get(self, key: CacheKey) -> ThumbnailResult | None: ...
    def set(self, key: CacheKey, value: ThumbnailResult) -> None: ...


class InMemoryThumbnailCache:
    """
    Bounded LRU with per-entry TTL. Owned by whoever builds it; never global.
    """

    def __init__(
        self,
        *,
        max_entries: int,
        ttl_sec: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max = max_entries
        self._ttl = ttl_sec
        self._clock = clock
        self._items: OrderedDict[CacheKey, tuple[float, ThumbnailResult]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: CacheKey) -> ThumbnailResult | None:
        item = self._items.get(key)
        if item is None:
            return None
        stored_at, value = item
        if self._clock() - stored_at > self._ttl:
            del self._items[key]
            return None
        self._items.move_to_end(key)
        return value

    def set(self, key: CacheKey, value: ThumbnailResult) -> None:
        if self._max <= 0:
            return
        self._items[key] = (self._clock(), value)
        self._items.move_to_end(key)
        while len(self._items) > self._max:
            self._items.popitem(last=False)
