"""Health route tests — liveness always up, readiness follows the database."""

import sitefeed.infrastructure.database as db_module
from sitefeed.infrastructure.database import DatabaseSessionManager


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_without_database(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_readiness_with_database(client, monkeypatch):
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    monkeypatch.setattr(db_module, "db_manager", manager)

    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"
    await manager.dispose()
