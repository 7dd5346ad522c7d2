import asyncio
import sys
from typing import Any

from loguru import logger

from shortener.app.core import SERVICE_NAME
from shortener.app.lifecycle import LifecycleCoordinator


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def main() -> None:
    coordinator = LifecycleCoordinator()
    try:
        exit_code = asyncio.run(coordinator.run())
    except KeyboardInterrupt:
        _log("service_interrupted")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
