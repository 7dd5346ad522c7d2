"""Port: HTTP listener that serves the router until drained."""
from __future__ import annotations

from typing import Protocol

from shortener.app.infrastructure.http.constants import ListenerState


class Listener(Protocol):
    @property
    def state(self) -> ListenerState: ...

    async def serve(self) -> None:
        """Bind and serve until stopped. Raises ListenerError on a transport fault."""
        ...

    async def drain(self, timeout: float) -> None:
        """Stop accepting connections and wait for in-flight requests.

        Raises ShutdownTimeoutError when requests are still running after `timeout`.
        """
        ...
