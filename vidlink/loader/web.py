from aiohttp import web
from loguru import logger

from vidlink.di import Container
from vidlink.lifecycle import AppLifecycle
from vidlink.presentation.routes import CONTAINER_KEY, error_middleware, setup_routes


LIFECYCLE_KEY = web.AppKey("lifecycle", AppLifecycle)


async def on_startup(app: web.Application):
    await app[LIFECYCLE_KEY].startup()
    logger.info("Web app ready")


async def on_shutdown(app: web.Application):
    await app[LIFECYCLE_KEY].shutdown()
    logger.info("Web app stopped")


def create_web_app(lifecycle: AppLifecycle) -> web.Application:
    app = web.Application(middlewares=[error_middleware])

    app[LIFECYCLE_KEY] = lifecycle
    app[CONTAINER_KEY] = lifecycle.container

    setup_routes(app)

    app.on_startup.append(on_startup)
    app.on_shutdown.append(on_shutdown)

    return app
