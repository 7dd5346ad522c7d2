"""
Composition root: single place where concrete implementations are wired.

Builds the database connection, page template, FastAPI router and HTTP
listener from settings. Explicit wiring only. The lifecycle coordinator
owns when these are connected, served, drained and released.
"""
from __future__ import annotations

from fastapi import FastAPI

from shortener.app.config.settings import Settings
from shortener.app.infrastructure.http.uvicorn_listener import UvicornListener
from shortener.app.infrastructure.persistence.factory import create_database_connection
from shortener.app.ports.database_connection import DatabaseConnection
from shortener.app.ports.listener import Listener
from shortener.app.routers.health import health_router
from shortener.app.routers.index import create_index_router
from shortener.app.services.index_page import PageTemplate


class ServiceDependencies:
    """Holds wired dependencies. Built only in composition root."""

    def __init__(
        self,
        *,
        settings: Settings,
        database: DatabaseConnection,
        listener: Listener,
        app: FastAPI | None = None,
    ) -> None:
        self._settings = settings
        self._database = database
        self._listener = listener
        self._app = app

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def database(self) -> DatabaseConnection:
        return self._database

    @property
    def listener(self) -> Listener:
        return self._listener

    @property
    def app(self) -> FastAPI | None:
        return self._app


def create_app(*, settings: Settings, database: DatabaseConnection, template: PageTemplate) -> FastAPI:
    """Router factory: the template and database are handed in, never looked up globally."""
    app = FastAPI(title="URL Shortener", version=settings.service_version)
    app.state.settings = settings
    app.state.database = database
    app.include_router(health_router)
    app.include_router(create_index_router(template))
    return app


def create_service_dependencies(settings: Settings) -> ServiceDependencies:
    """
    Build all service dependencies in one place.
    Raises OSError when the page template cannot be read and ValueError when
    it is malformed; the caller treats both as startup failures.
    """
    database = create_database_connection(settings)
    template = PageTemplate.from_path(settings.template_path)
    app = create_app(settings=settings, database=database, template=template)
    listener = UvicornListener(app, host=settings.http_host, port=settings.http_port)
    return ServiceDependencies(settings=settings, database=database, listener=listener, app=app)


