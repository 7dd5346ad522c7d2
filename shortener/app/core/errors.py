"""Exceptions raised across the service lifecycle.

Fatal startup errors end the process with a non-zero exit code. Every other
error is logged by the coordinator and shutdown carries on.
"""
from __future__ import annotations


class LifecycleError(Exception):
    """Base class for lifecycle failures."""


class FatalStartupError(LifecycleError):
    """Raised before the service serves traffic; the process must exit."""


class ConfigurationError(FatalStartupError):
    """Configuration is missing a required field or holds an invalid value."""


class DependencyAcquisitionError(FatalStartupError):
    """The database handle could not be opened at startup."""


class ListenerError(LifecycleError):
    """The HTTP listener stopped for a reason other than a requested close."""


class ShutdownTimeoutError(LifecycleError):
    """In-flight requests did not finish inside the drain window."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"listener drain exceeded {timeout:.1f}s")
        self.timeout = timeout


class ReleaseError(LifecycleError):
    """The database handle reported an error while closing."""
