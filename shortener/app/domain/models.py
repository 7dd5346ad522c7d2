"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Row shown on the index page."""

    id: int
    name: str


@dataclass(frozen=True)
class ConnectionParams:
    """Connection fields the database provider consumes (value object)."""

    host: str
    port: int
    username: str
    dbname: str
    password: str
    sslmode: str

    def dsn(self, *, mask_password: bool = False) -> str:
        """Render a libpq keyword/value connection string."""
        password = "***" if mask_password and self.password else self.password
        return (
            f"host={self.host} port={self.port} user={self.username} "
            f"dbname={self.dbname} password={password} sslmode={self.sslmode}"
        )


DEFAULT_USERS: tuple[User, ...] = (
    User(id=1, name="Alice"),
    User(id=2, name="Bob"),
)
