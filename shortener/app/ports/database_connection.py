"""Port: database connection lifecycle and ping. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Protocol


class DatabaseConnection(Protocol):
    """Interface for DB connection lifecycle and ping.

    `connect` opens the handle and raises DependencyAcquisitionError on
    failure. `close` releases it and raises ReleaseError on failure; calling
    it on a handle that was never opened is a no-op.
    """

    @property
    def ready(self) -> bool: ...

    async def connect(self) -> None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
