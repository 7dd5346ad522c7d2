from __future__ import annotations

import asyncio
import time
from typing import Any

import pytest
from fastapi import FastAPI
from loguru import logger

from shortener.app.config.settings import Settings
from shortener.app.core.errors import DependencyAcquisitionError, ReleaseError, ShutdownTimeoutError
from shortener.app.infrastructure.http.constants import ListenerState
from shortener.app.routers.health import health_router
from shortener.app.routers.index import create_index_router
from shortener.app.services.index_page import PageTemplate

VALID_ENV = {
    "PG_HOST": "localhost",
    "PG_PORT": "5432",
    "PG_USER": "t",
    "PG_NAME": "t",
    "PG_PASSWORD": "t",
    "SSL_MODE": "disable",
    "ENV": "local",
    "HTTP_PORT": "8080",
}


def make_settings(**overrides: Any) -> Settings:
    return Settings(_env_file=None, **{**VALID_ENV, **overrides})


class EventLog:
    """Ordered, timestamped record of calls made on fakes."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, float]] = []

    def record(self, name: str) -> None:
        self.entries.append((name, time.monotonic()))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.entries]

    def at(self, name: str) -> float:
        for entry_name, ts in self.entries:
            if entry_name == name:
                return ts
        raise KeyError(name)


class FakeDatabase:
    """Implements DatabaseConnection for tests. Full protocol so connect/close/ready won't break callers."""

    def __init__(
        self,
        events: EventLog | None = None,
        *,
        ping_ok: bool = True,
        fail_connect: bool = False,
        fail_close: bool = False,
    ) -> None:
        self._events = events or EventLog()
        self._ping_ok = ping_ok
        self._fail_connect = fail_connect
        self._fail_close = fail_close
        self._ready = False
        self.connect_calls = 0
        self.close_calls = 0

    @property
    def ready(self) -> bool:
        return self._ready

    async def connect(self) -> None:
        self.connect_calls += 1
        self._events.record("db_connect")
        if self._fail_connect:
            raise DependencyAcquisitionError("connection refused")
        self._ready = True

    async def ping(self) -> bool:
        return self._ping_ok

    async def close(self) -> None:
        self.close_calls += 1
        self._events.record("db_close")
        self._ready = False
        if self._fail_close:
            raise ReleaseError("close failed")


class FakeListener:
    """Implements Listener for tests; drain simulates in-flight work lasting `drain_delay` seconds."""

    def __init__(
        self,
        events: EventLog | None = None,
        *,
        drain_delay: float = 0.0,
        serve_error: Exception | None = None,
    ) -> None:
        self._events = events or EventLog()
        self._drain_delay = drain_delay
        self._serve_error = serve_error
        self._state = ListenerState.IDLE
        self._stop = asyncio.Event()
        self.serve_calls = 0

    @property
    def state(self) -> ListenerState:
        return self._state

    async def serve(self) -> None:
        self.serve_calls += 1
        self._events.record("listener_serve")
        if self._state != ListenerState.IDLE:
            return
        self._state = ListenerState.RUNNING
        if self._serve_error is not None:
            self._state = ListenerState.FAILED
            raise self._serve_error
        await self._stop.wait()
        self._state = ListenerState.STOPPED

    async def drain(self, timeout: float) -> None:
        self._events.record("listener_drain")
        if self._state in (ListenerState.IDLE, ListenerState.STOPPED, ListenerState.FAILED):
            self._state = ListenerState.STOPPED if self._state == ListenerState.IDLE else self._state
            return
        self._state = ListenerState.DRAINING

        async def _finish_in_flight() -> None:
            await asyncio.sleep(self._drain_delay)
            self._stop.set()

        try:
            await asyncio.wait_for(_finish_in_flight(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ShutdownTimeoutError(timeout) from e
        self._events.record("listener_drained")


@pytest.fixture()
def events() -> EventLog:
    return EventLog()


@pytest.fixture()
def log_records():
    """Capture loguru records emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture()
def page_template() -> PageTemplate:
    return PageTemplate(source="<title>$title</title><table>\n$rows\n</table>", title="Test")


@pytest.fixture()
def test_app(page_template: PageTemplate) -> FastAPI:
    app = FastAPI()
    app.state.settings = make_settings()
    app.state.database = FakeDatabase()
    app.include_router(health_router)
    app.include_router(create_index_router(page_template))
    return app
