"""Service-level constants shared across modules."""
from __future__ import annotations

ENV_LOCAL = "local"
ENV_DEV = "dev"
ENV_PROD = "prod"

ENVIRONMENTS = (ENV_LOCAL, ENV_DEV, ENV_PROD)

DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 5.0
