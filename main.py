import asyncio

import uvloop
from aiohttp import web
from loguru import logger

from vidlink.main_app import create_app
from vidlink.config.settings import get_settings
from vidlink.loader.logging import setup_logging


def main():
    setup_logging()
    settings = get_settings()

    logger.info("Starting app on {}:{}", settings.webapp_host, settings.webapp_port)

    async def _run():
        app = await create_app(settings)
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, host=settings.webapp_host, port=settings.webapp_port)
        await site.start()
        logger.info("App started")
        try:
            # Block forever; shutdown hooks run on cleanup
            while True:
                await asyncio.sleep(3600)
        finally:
            await runner.cleanup()

    try:
        uvloop.run(_run())
    except KeyboardInterrupt:
        logger.info("App stopped")


if __name__ == "__main__":
    main()
