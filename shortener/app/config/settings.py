"""Settings for the URL shortener service."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortener.app.constants import DEFAULT_SHUTDOWN_TIMEOUT_SECONDS, ENVIRONMENTS
from shortener.app.core.errors import ConfigurationError
from shortener.app.domain.models import ConnectionParams

DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "index.html"

SSLMode = Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    pg_host: str = Field(..., min_length=1, validation_alias="PG_HOST")
    pg_port: int = Field(..., gt=0, lt=65536, validation_alias="PG_PORT")
    pg_user: str = Field(..., min_length=1, validation_alias="PG_USER")
    pg_name: str = Field(..., min_length=1, validation_alias="PG_NAME")
    pg_password: str = Field(..., validation_alias="PG_PASSWORD")
    ssl_mode: SSLMode = Field(..., validation_alias="SSL_MODE")

    env: str = Field(..., validation_alias="ENV")
    http_port: int = Field(..., ge=0, lt=65536, validation_alias="HTTP_PORT")
    http_host: str = Field("0.0.0.0", validation_alias="HTTP_HOST")

    shutdown_timeout_seconds: float = Field(
        DEFAULT_SHUTDOWN_TIMEOUT_SECONDS, gt=0, validation_alias="SHUTDOWN_TIMEOUT_SECONDS"
    )
    database_connect_timeout_seconds: float = Field(
        5.0, gt=0, validation_alias="DATABASE_CONNECT_TIMEOUT_SECONDS"
    )
    database_backend: Literal["postgres", "inmemory"] = Field("postgres", validation_alias="DATABASE_BACKEND")
    readiness_ping_timeout_seconds: float = Field(2.0, gt=0, validation_alias="READINESS_PING_TIMEOUT_SECONDS")

    template_path: Path = Field(DEFAULT_TEMPLATE_PATH, validation_alias="TEMPLATE_PATH")
    service_version: str = Field("0.1.0", validation_alias="SERVICE_VERSION")

    @field_validator("env")
    @classmethod
    def _known_env(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ENVIRONMENTS:
            raise ValueError(f"ENV must be one of {', '.join(ENVIRONMENTS)}")
        return value

    def connection_params(self) -> ConnectionParams:
        return ConnectionParams(
            host=self.pg_host,
            port=self.pg_port,
            username=self.pg_user,
            dbname=self.pg_name,
            password=self.pg_password,
            sslmode=self.ssl_mode,
        )


def load_settings(**overrides: object) -> Settings:
    """Build Settings from the environment, failing fast on missing or invalid fields."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise ConfigurationError(f"invalid configuration: {', '.join(fields)}") from exc
