from __future__ import annotations

import os
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from loguru import logger

from .di import AsyncStartStop, Container
from .di import build_graph as build_di_graph


class LifecycleError(RuntimeError):
    pass


def _preflight(container: Container) -> None:
    """Fail fast on settings that would only surface on the first request."""
    s = container.settings

    thumb_dir = Path(s.thumbnail_dir).expanduser()
    try:
        thumb_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise LifecycleError(f"THUMBNAIL_DIR cannot be created: {thumb_dir} ({exc})") from exc
    if not os.access(thumb_dir, os.W_OK | os.X_OK):
        raise LifecycleError(f"THUMBNAIL_DIR is not writable: {thumb_dir}")

    if s.thumbnail_ceiling_sec < s.http_timeout_sec:
        logger.warning(
            "THUMBNAIL_CEILING_SEC={} is below HTTP_TIMEOUT_SEC={}; slow attempts will be cut off",
            s.thumbnail_ceiling_sec,
            s.http_timeout_sec,
        )


@dataclass(slots=True)
class AppLifecycle:
    """
    Builds the component graph and owns the start/stop of every
    AsyncStartStop component in it. Components are stopped in reverse
    start order, including when a later one fails to start.
    """

    container: Container
    graph_builder: Callable[[Container], None] = build_di_graph
    _stack: AsyncExitStack | None = field(default=None, init=False)

    @property
    def started(self) -> bool:
        return self._stack is not None

    async def startup(self) -> None:
        if self._stack is not None:
            raise LifecycleError("startup() called twice")

        logger.info("startup: begin")
        _preflight(self.container)
        self.graph_builder(self.container)

        stack = AsyncExitStack()
        try:
            for name, component in self.container.all_components():
                if isinstance(component, AsyncStartStop):
                    await self._start(stack, name, component)
        except BaseException:
            await stack.aclose()
            raise

        self._stack = stack
        logger.info("startup: done")

    async def shutdown(self) -> None:
        if self._stack is None:
            logger.info("shutdown: skipped (not started)")
            return

        logger.info("shutdown: begin")
        stack, self._stack = self._stack, None
        await stack.aclose()
        logger.info("shutdown: done")

    @staticmethod
    async def _start(stack: AsyncExitStack, name: str, component: AsyncStartStop) -> None:
        logger.info("component.start: {}", name)
        try:
            await component.start()
        except Exception as exc:
            raise LifecycleError(f"Component failed to start: {name}") from exc

        async def _stop() -> None:
            logger.info("component.stop: {}", name)
            try:
                await component.stop()
            except Exception:
                logger.exception("component.stop failed: {}", name)

        stack.push_async_callback(_stop)
