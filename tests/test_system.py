"""Tests for system / health endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from app.config import settings
from app.db.session import get_db, get_read_db
from app.dependencies import get_query_cache
from app.main import app
from app.services.cache import QueryCache

from tests.fakes import BrokenRedis, FakeRedis


@pytest.fixture
def status_db():
    result = MagicMock()
    result.scalar_one.return_value = 8760
    session = MagicMock()
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def read_db():
    session = MagicMock()
    session.execute = AsyncMock(return_value=MagicMock())
    return session


@pytest.fixture
def override_status(status_db, read_db):
    def _apply(redis_client):
        app.dependency_overrides[get_db] = lambda: status_db
        app.dependency_overrides[get_read_db] = lambda: read_db
        app.dependency_overrides[get_query_cache] = lambda: QueryCache(client=redis_client)

    yield _apply
    app.dependency_overrides.clear()


# ── GET /health ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_health_returns_200(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ── GET /api/wire/v1/status (auth required) ────────────────────────────────────

@pytest.mark.asyncio
async def test_status_rejects_missing_key(client: AsyncClient):
    response = await client.get("/api/wire/v1/status")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_status_rejects_wrong_key(client: AsyncClient):
    response = await client.get(
        "/api/wire/v1/status",
        headers={"X-API-Key": "wrong-key"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_status_with_valid_key(client: AsyncClient, auth_headers: dict, override_status):
    override_status(FakeRedis())
    response = await client.get("/api/wire/v1/status", headers=auth_headers)
    assert response.status_code == 200

    data = response.json()
    assert data["service"] == settings.app_name
    assert data["version"] == settings.app_version
    assert data["status"] == "healthy"
    assert data["db"] == "ok"
    assert data["db_read"] == "ok"
    assert data["cache"] == "ok"
    assert data["readings_loaded"] == 8760

    cfg = data["config"]
    assert cfg["aggregate_cache_ttl_seconds"] == 300
    assert cfg["history_limit"] == 10


@pytest.mark.asyncio
async def test_status_reports_cache_outage(
    client: AsyncClient, auth_headers: dict, override_status
):
    override_status(BrokenRedis())
    response = await client.get("/api/wire/v1/status", headers=auth_headers)
    assert response.status_code == 503
    data = response.json()
    assert data["cache"] == "error"
    assert data["status"] == "unhealthy"


@pytest.mark.asyncio
async def test_status_reports_db_outage(
    client: AsyncClient, auth_headers: dict, override_status, status_db
):
    status_db.execute = AsyncMock(side_effect=OSError("connection refused"))
    override_status(FakeRedis())
    response = await client.get("/api/wire/v1/status", headers=auth_headers)
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["db"] == "error"
    assert data["readings_loaded"] is None


@pytest.mark.asyncio
async def test_status_degraded_when_read_replica_down(
    client: AsyncClient, auth_headers: dict, override_status, read_db
):
    read_db.execute = AsyncMock(side_effect=OSError("connection refused"))
    override_status(FakeRedis())
    response = await client.get("/api/wire/v1/status", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["db"] == "ok"
    assert data["db_read"] == "error"


# ── GET /docs and /redoc (OpenAPI UI) ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_openapi_docs_accessible(client: AsyncClient):
    response = await client.get("/docs")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_openapi_lists_energy_routes(client: AsyncClient):
    response = await client.get("/openapi.json")
    paths = response.json()["paths"]
    assert "/api/wire/v1/energy/aggregate" in paths
    assert "/api/wire/v1/energy/history" in paths


# ── Config validation ──────────────────────────────────────────────────────────

def test_cache_ttl_default():
    assert settings.aggregate_cache_ttl_seconds == 300


def test_history_limit_bounds():
    from pydantic import ValidationError

    from app.config import Settings

    with pytest.raises(ValidationError):
        Settings(history_limit=11)
    with pytest.raises(ValidationError):
        Settings(aggregate_cache_ttl_seconds=0)


def test_log_level_normalised():
    from app.config import Settings

    assert Settings(log_level="debug").log_level == "DEBUG"
