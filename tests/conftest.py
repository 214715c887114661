"""Shared pytest fixtures for the energy aggregation API test suite."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.db.session import get_db, get_read_db
from app.dependencies import get_query_cache
from app.main import app
from app.services.cache import QueryCache

from tests.fakes import FakeRedis, RecordingSession


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> QueryCache:
    return QueryCache(client=fake_redis)


@pytest.fixture
def db_session() -> RecordingSession:
    return RecordingSession()


@pytest.fixture
def override_dependencies(db_session: RecordingSession, cache: QueryCache):
    """Route get_db / get_read_db / get_query_cache to in-memory doubles."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_read_db] = lambda: db_session
    app.dependency_overrides[get_query_cache] = lambda: cache
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client() -> AsyncClient:
    """Async test client that talks directly to the ASGI app (no network required)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac


@pytest.fixture
def api_key() -> str:
    """The API key configured in settings (defaults to 'dev-api-key' in tests)."""
    return settings.api_key


@pytest.fixture
def auth_headers(api_key: str) -> dict[str, str]:
    """Ready-made headers dict with X-API-Key set."""
    return {"X-API-Key": api_key}
