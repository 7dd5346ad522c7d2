from typing import Any

import asyncpg
from loguru import logger

from shortener.app.core import SERVICE_NAME
from shortener.app.core.errors import DependencyAcquisitionError, ReleaseError
from shortener.app.domain.models import ConnectionParams
from shortener.app.infrastructure.persistence.constants import ConnectionState


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class PostgresConnection:
    """DatabaseConnection implementation backed by an asyncpg pool.

    Connect is a single attempt: a cold-start failure is reported to the
    caller, which decides whether the process survives it.
    """

    def __init__(self, params: ConnectionParams, *, connect_timeout_seconds: float = 5.0) -> None:
        self._params = params
        self._connect_timeout_seconds = connect_timeout_seconds
        self._state = ConnectionState.DISCONNECTED
        self._pool: asyncpg.Pool | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("db_not_connected")
        return self._pool

    async def connect(self) -> None:
        self._state = ConnectionState.CONNECTING
        _log("db_connecting", dsn=self._params.dsn(mask_password=True))
        try:
            self._pool = await asyncpg.create_pool(
                host=self._params.host,
                port=self._params.port,
                user=self._params.username,
                database=self._params.dbname,
                password=self._params.password,
                ssl=self._params.sslmode,
                timeout=self._connect_timeout_seconds,
                min_size=1,
            )
            await self._pool.fetchval("SELECT 1")
        except Exception as e:
            logger.warning("db connect failed: {}", e)
            await self._discard_pool()
            self._state = ConnectionState.DISCONNECTED
            raise DependencyAcquisitionError(f"storage.pg.connect: {e}") from e
        self._state = ConnectionState.CONNECTED
        _log("db_connected")

    async def ping(self) -> bool:
        """Return True if the database answers SELECT 1; False if not connected or any error."""
        if self._pool is None:
            return False
        try:
            return await self._pool.fetchval("SELECT 1") == 1
        except Exception:
            return False

    async def close(self) -> None:
        if self._pool is None:
            self._state = ConnectionState.CLOSED
            return
        self._state = ConnectionState.CLOSING
        pool, self._pool = self._pool, None
        try:
            await pool.close()
        except Exception as e:
            raise ReleaseError(f"storage.pg.close: {e}") from e
        finally:
            self._state = ConnectionState.CLOSED
        _log("db_closed")

    async def _discard_pool(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        pool.terminate()
