"""Database connection factory: selects implementation from config. Only place that imports concrete connections."""
from __future__ import annotations

from shortener.app.config.settings import Settings
from shortener.app.ports.database_connection import DatabaseConnection
from shortener.app.infrastructure.persistence.inmemory.in_memory_connection import InMemoryConnection
from shortener.app.infrastructure.persistence.postgres.postgres_connection import PostgresConnection


def create_database_connection(settings: Settings) -> DatabaseConnection:
    backend = settings.database_backend.strip().lower()

    if backend == "postgres":
        return PostgresConnection(
            settings.connection_params(),
            connect_timeout_seconds=settings.database_connect_timeout_seconds,
        )

    if backend == "inmemory":
        return InMemoryConnection()

    raise ValueError(f"Unsupported database backend: {backend}")
