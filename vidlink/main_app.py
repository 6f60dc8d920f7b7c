from aiohttp import web

from vidlink.config.settings import AppSettings
from vidlink.di import Container
from vidlink.lifecycle import AppLifecycle
from vidlink.loader.web import create_web_app


async def create_app(settings: AppSettings | None = None) -> web.Application:
    container = Container.build(settings)
    lifecycle = AppLifecycle(container=container)
    return create_web_app(lifecycle)
