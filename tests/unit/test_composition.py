import asyncio

import pytest
from fastapi.testclient import TestClient

from shortener.app.composition import create_service_dependencies
from shortener.app.infrastructure.http.constants import ListenerState
from shortener.app.infrastructure.http.uvicorn_listener import UvicornListener
from shortener.app.infrastructure.persistence.factory import create_database_connection
from shortener.app.infrastructure.persistence.inmemory.in_memory_connection import InMemoryConnection
from shortener.app.infrastructure.persistence.postgres.postgres_connection import PostgresConnection
from tests.conftest import make_settings


def test_factory_selects_postgres_by_default():
    assert isinstance(create_database_connection(make_settings()), PostgresConnection)


def test_factory_selects_inmemory_backend():
    assert isinstance(create_database_connection(make_settings(DATABASE_BACKEND="inmemory")), InMemoryConnection)


def test_service_dependencies_are_wired():
    deps = create_service_dependencies(make_settings(DATABASE_BACKEND="inmemory", HTTP_PORT="0"))

    assert isinstance(deps.listener, UvicornListener)
    assert deps.listener.state == ListenerState.IDLE
    assert deps.app.state.database is deps.database
    assert deps.app.state.settings is deps.settings


def test_wired_app_serves_index_and_readiness():
    deps = create_service_dependencies(make_settings(DATABASE_BACKEND="inmemory"))
    client = TestClient(deps.app)

    assert client.get("/health/ready").status_code == 503
    asyncio.run(deps.database.connect())
    assert client.get("/health/ready").status_code == 200
    assert "Alice" in client.get("/").text


def test_missing_template_path_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        create_service_dependencies(make_settings(TEMPLATE_PATH=str(tmp_path / "nope.html")))
