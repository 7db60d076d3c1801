"""
Logging Configuration
=====================

All output goes through loguru. Records from the standard library
loggers used underneath the service (uvicorn, SQLAlchemy, asyncpg,
httpx) are forwarded into the same sink.
"""

import logging
import sys
from typing import Iterable

from loguru import logger

from rentgeo.core.config import Settings, settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

FORWARDED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy.engine",
    "asyncpg",
    "httpx",
)


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _level(config: Settings) -> str:
    if config.LOG_LEVEL:
        return config.LOG_LEVEL.upper()
    return "DEBUG" if config.DEBUG else "INFO"


def _forward(names: Iterable[str]) -> None:
    handler = InterceptHandler()
    logging.basicConfig(handlers=[handler], level=0, force=True)
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False


def setup_logging(config: Settings = settings) -> None:
    """Install the loguru sink for the current environment.

    Production (or ``LOG_JSON=true``) writes one serialized JSON record
    per line; everything else gets the colored console format.
    """
    logger.remove()

    json_output = config.LOG_JSON if config.LOG_JSON is not None else config.APP_ENV == "production"
    if json_output:
        logger.add(
            sys.stderr,
            serialize=True,
            level=_level(config),
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=_level(config), colorize=True)

    _forward(FORWARDED_LOGGERS)
    logger.debug(f"Logging configured (env={config.APP_ENV}, json={json_output})")
