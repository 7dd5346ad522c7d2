"""Process lifecycle: startup, wait for a termination signal, bounded shutdown.

Order is fixed: load settings, open the database, start the listener in the
background, block until SIGINT/SIGTERM, drain the listener within the
shutdown budget, then release the database. Startup failures are fatal.
Everything after startup is logged and the sequence continues; nothing is
retried.
"""
from __future__ import annotations

import asyncio
import signal
from typing import Any, Callable, Sequence

from loguru import logger

from shortener.app.composition import ServiceDependencies, create_service_dependencies
from shortener.app.config.settings import Settings, load_settings
from shortener.app.core import SERVICE_NAME
from shortener.app.core.errors import (
    ConfigurationError,
    FatalStartupError,
    ShutdownTimeoutError,
)
from shortener.app.core.logging import setup_logger
from shortener.app.lifecycle.constants import LifecycleState

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

_ALLOWED_TRANSITIONS: dict[LifecycleState, tuple[LifecycleState, ...]] = {
    LifecycleState.IDLE: (LifecycleState.STARTING,),
    LifecycleState.STARTING: (LifecycleState.RUNNING, LifecycleState.FAILED),
    LifecycleState.RUNNING: (LifecycleState.SHUTTING_DOWN,),
    LifecycleState.SHUTTING_DOWN: (LifecycleState.STOPPED,),
    LifecycleState.STOPPED: (),
    LifecycleState.FAILED: (),
}


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class LifecycleCoordinator:
    """Owns the database handle and the listener boundary for one process run."""

    def __init__(
        self,
        *,
        settings_loader: Callable[[], Settings] = load_settings,
        dependencies_factory: Callable[[Settings], ServiceDependencies] = create_service_dependencies,
        configure_logging: Callable[[str], None] | None = setup_logger,
        shutdown_signals: Sequence[signal.Signals] = SHUTDOWN_SIGNALS,
    ) -> None:
        self._settings_loader = settings_loader
        self._dependencies_factory = dependencies_factory
        self._configure_logging = configure_logging
        self._shutdown_signals = tuple(shutdown_signals)

        self._state = LifecycleState.IDLE
        self.history: list[LifecycleState] = [self._state]
        self._shutdown = asyncio.Event()
        self._installed_signals: list[signal.Signals] = []

        self._settings: Settings | None = None
        self._dependencies: ServiceDependencies | None = None
        self._database_open = False
        self._listener_task: asyncio.Task | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            raise RuntimeError("settings are not loaded")
        return self._settings

    @property
    def dependencies(self) -> ServiceDependencies:
        if self._dependencies is None:
            raise RuntimeError("dependencies are not built")
        return self._dependencies

    @property
    def listener_task(self) -> asyncio.Task | None:
        return self._listener_task

    def _transition(self, new_state: LifecycleState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self._state]:
            raise RuntimeError(f"illegal lifecycle transition {self._state.value} -> {new_state.value}")
        logger.bind(service_name=SERVICE_NAME, event="lifecycle_transition").debug(
            "{} -> {}", self._state.value, new_state.value
        )
        self._state = new_state
        self.history.append(new_state)

    def load_configuration(self) -> Settings:
        """Load settings, set up logging and wire dependencies. Raises ConfigurationError."""
        settings = self._settings_loader()
        if self._configure_logging is not None:
            self._configure_logging(settings.env)
        _log("service_starting", env=settings.env, version=settings.service_version)
        logger.bind(service_name=SERVICE_NAME, event="debug_enabled").debug("debug messages are enabled")

        try:
            dependencies = self._dependencies_factory(settings)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"cannot build service dependencies: {e}") from e

        self._settings = settings
        self._dependencies = dependencies
        return settings

    async def acquire_dependencies(self) -> None:
        """Open the database handle. Raises DependencyAcquisitionError; never retried."""
        await self.dependencies.database.connect()
        self._database_open = True
        _log("db_acquired")

    def start_listener(self) -> asyncio.Task:
        """Run the listener as a background task; its failures are logged, not raised."""
        if self._listener_task is not None:
            raise RuntimeError("listener already started")
        self._listener_task = asyncio.create_task(self.dependencies.listener.serve(), name="http-listener")
        self._listener_task.add_done_callback(self._on_listener_done)
        return self._listener_task

    def _on_listener_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.bind(service_name=SERVICE_NAME, event="listener_failed").error(
                "Error occurred while running http server: {}", exc
            )

    def request_shutdown(self, sig: signal.Signals | None = None) -> None:
        if not self._shutdown.is_set():
            _log("shutdown_signal", signal=sig.name if sig is not None else None)
            self._shutdown.set()

    async def await_shutdown_signal(self) -> None:
        await self._shutdown.wait()

    async def drain(self, timeout: float) -> None:
        """Drain the listener within `timeout`; a timeout or failure is logged only."""
        _log("shutdown_started", timeout=timeout)
        try:
            await self.dependencies.listener.drain(timeout)
        except ShutdownTimeoutError as e:
            logger.bind(service_name=SERVICE_NAME, event="shutdown_timeout").warning("Failed to stop server: {}", e)
        except Exception as e:
            logger.bind(service_name=SERVICE_NAME, event="listener_stop_failed").error("Failed to stop server: {}", e)
        else:
            _log("listener_drained")

    async def release_dependencies(self) -> None:
        """Close the database handle exactly once; a failure is logged only."""
        if not self._database_open:
            return
        self._database_open = False
        try:
            await self.dependencies.database.close()
        except Exception as e:
            logger.bind(service_name=SERVICE_NAME, event="db_release_failed").error("Failed to close database: {}", e)
        else:
            _log("db_released")

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._shutdown_signals:
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig)
            except (NotImplementedError, RuntimeError, ValueError):
                continue
            self._installed_signals.append(sig)

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        while self._installed_signals:
            loop.remove_signal_handler(self._installed_signals.pop())

    async def run(self) -> int:
        """Run the whole lifecycle. Returns the process exit code."""
        self._transition(LifecycleState.STARTING)
        self._install_signal_handlers()
        try:
            try:
                settings = self.load_configuration()
                await self.acquire_dependencies()
            except FatalStartupError as e:
                logger.bind(service_name=SERVICE_NAME, event="startup_failed").error("{}", e)
                self._transition(LifecycleState.FAILED)
                return 1

            self.start_listener()
            self._transition(LifecycleState.RUNNING)
            _log("server_started", port=settings.http_port)

            await self.await_shutdown_signal()

            self._transition(LifecycleState.SHUTTING_DOWN)
            await self.drain(settings.shutdown_timeout_seconds)
            await self.release_dependencies()
        finally:
            self._remove_signal_handlers()

        self._transition(LifecycleState.STOPPED)
        _log("service_stopped")
        return 0
