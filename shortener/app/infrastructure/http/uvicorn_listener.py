"""HTTP listener built on uvicorn.Server.

Signal handling is left to the lifecycle coordinator: the server never
installs its own SIGINT/SIGTERM handlers and stops only when drained.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Iterator

import uvicorn
from fastapi import FastAPI
from loguru import logger

from shortener.app.core import SERVICE_NAME
from shortener.app.core.errors import ListenerError, ShutdownTimeoutError
from shortener.app.infrastructure.http.constants import ListenerState


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class _CoordinatedServer(uvicorn.Server):
    def install_signal_handlers(self) -> None:
        return

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class UvicornListener:
    """Listener implementation: binds host:port and serves the FastAPI app."""

    def __init__(self, app: FastAPI, *, host: str, port: int) -> None:
        self._config = uvicorn.Config(
            app,
            host=host,
            port=port,
            lifespan="off",
            log_config=None,
            access_log=False,
        )
        self._server = _CoordinatedServer(self._config)
        self._state = ListenerState.IDLE
        self._stopped = asyncio.Event()

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def started(self) -> bool:
        return self._server.started

    @property
    def bound_port(self) -> int | None:
        """Actual port once bound; differs from the configured one when that is 0."""
        for server in getattr(self._server, "servers", []):
            for sock in server.sockets:
                return sock.getsockname()[1]
        return None

    async def serve(self) -> None:
        if self._state == ListenerState.STOPPED:
            _log("listener_skipped", reason="drained_before_start")
            return
        if self._state != ListenerState.IDLE:
            raise RuntimeError(f"listener cannot serve from state {self._state.value}")
        self._state = ListenerState.RUNNING
        _log("listener_starting", host=self._config.host, port=self._config.port)
        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn reports a failed bind by calling sys.exit(1) from startup
            self._state = ListenerState.FAILED
            raise ListenerError(f"http server exited with code {e.code}") from e
        except Exception as e:
            self._state = ListenerState.FAILED
            raise ListenerError(f"http server failed: {e}") from e
        finally:
            self._stopped.set()
        self._state = ListenerState.STOPPED
        _log("listener_stopped")

    async def drain(self, timeout: float) -> None:
        if self._state == ListenerState.IDLE:
            self._state = ListenerState.STOPPED
            return
        if self._state in (ListenerState.STOPPED, ListenerState.FAILED):
            return

        self._state = ListenerState.DRAINING
        _log("listener_draining", timeout=timeout)
        self._server.should_exit = True
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ShutdownTimeoutError(timeout) from e
