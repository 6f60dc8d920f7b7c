import logging
import sys

from loguru import logger

from vidlink.config.settings import get_settings


# Stdlib loggers never emit below these levels, whatever LOG_LEVEL says.
# aiohttp.client reports every redirect and connection at DEBUG; the access
# log gives one line per request.
LIBRARY_LEVEL_FLOORS: dict[str, int] = {
    "aiohttp.access": logging.INFO,
    "aiohttp.server": logging.INFO,
    "aiohttp.client": logging.WARNING,
    "aiohttp.internal": logging.WARNING,
    "asyncio": logging.WARNING,
    "tenacity": logging.WARNING,
}

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Re-emit stdlib records through loguru from the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _route_stdlib(level: int) -> None:
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)

    for name, floor in LIBRARY_LEVEL_FLOORS.items():
        lib = logging.getLogger(name)
        lib.handlers.clear()
        lib.propagate = True
        lib.setLevel(max(level, floor))


def setup_logging(level: str | None = None, *, json_logs: bool | None = None) -> None:
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_logs is None:
        json_logs = settings.log_json

    _route_stdlib(logging.getLevelName(level))

    logger.remove()
    if json_logs:
        logger.add(sys.stdout, level=level, serialize=True, backtrace=False, diagnose=False)
    else:
        logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT, backtrace=True, diagnose=False)

    logger.info("Logging configured: level={} json={}", level, json_logs)
