import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient

from shortener.app.routers.health import health_router
from tests.conftest import FakeDatabase, make_settings


class _SlowPingDatabase(FakeDatabase):
    async def ping(self) -> bool:
        await asyncio.sleep(1.0)
        return True


def test_live_is_always_200(test_app):
    client = TestClient(test_app)
    r = client.get("/health/live")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_ready_503_when_database_missing():
    app = FastAPI()
    app.include_router(health_router)
    client = TestClient(app)
    r = client.get("/health/ready")
    assert r.status_code == 503


def test_ready_503_when_db_ping_fails(test_app):
    test_app.state.database = FakeDatabase(ping_ok=False)
    client = TestClient(test_app)
    r = client.get("/health/ready")
    assert r.status_code == 503
    assert r.text == "Database not ready"


def test_ready_503_when_db_ping_times_out(test_app):
    test_app.state.settings = make_settings(READINESS_PING_TIMEOUT_SECONDS="0.05")
    test_app.state.database = _SlowPingDatabase()
    client = TestClient(test_app)
    r = client.get("/health/ready")
    assert r.status_code == 503


def test_ready_200_when_ready(test_app):
    test_app.state.database = FakeDatabase(ping_ok=True)
    client = TestClient(test_app)
    r = client.get("/health/ready")
    assert r.status_code == 200
    assert r.text == "OK"
