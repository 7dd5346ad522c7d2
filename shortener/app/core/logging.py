"""Loguru sink setup per environment.

`local` logs human-readable text at DEBUG, `dev` logs JSON at DEBUG and
`prod` logs JSON at INFO. uvicorn's stdlib loggers are forwarded into loguru
so every line reaches the same sink.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

from loguru import logger

from shortener.app.constants import ENV_DEV, ENV_LOCAL, ENV_PROD
from shortener.app.core import SERVICE_NAME

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "{extra[event]} | <level>{message}</level> {extra}"
)

_SINK_OPTIONS: dict[str, dict[str, Any]] = {
    ENV_LOCAL: {"level": "DEBUG", "format": _TEXT_FORMAT, "colorize": False},
    ENV_DEV: {"level": "DEBUG", "serialize": True},
    ENV_PROD: {"level": "INFO", "serialize": True},
}


class InterceptHandler(logging.Handler):
    """Forward stdlib log records (uvicorn, asyncio) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(service_name=SERVICE_NAME, event=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def setup_logger(env: str, *, sink: TextIO | None = None) -> None:
    """Replace loguru's default handler with the sink for `env`."""
    options = _SINK_OPTIONS.get(env)
    if options is None:
        raise ValueError(f"Unsupported environment: {env}")

    logger.remove()
    logger.configure(extra={"service_name": SERVICE_NAME, "event": ""})
    logger.add(sink or sys.stdout, **options)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = []
        std_logger.propagate = True
