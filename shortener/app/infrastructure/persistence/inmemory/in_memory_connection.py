"""In-memory database connection for local mode and tests.
Holds no external resource; lets the service start without PostgreSQL.
"""
from __future__ import annotations

from shortener.app.infrastructure.persistence.constants import ConnectionState


class InMemoryConnection:
    def __init__(self) -> None:
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    async def connect(self) -> None:
        self._state = ConnectionState.CONNECTED

    async def ping(self) -> bool:
        return self.ready

    async def close(self) -> None:
        self._state = ConnectionState.CLOSED
