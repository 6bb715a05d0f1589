"""
Basic tests for the pgbridge API
Run with: pytest

ASGITransport does not run the lifespan, so each test wires a
DatabaseService built on fakes through a dependency override.
"""
import pytest
from fakes import FakeAdapter, FakeFactory
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pgbridge import main
from pgbridge.api.deps import get_database_service
from pgbridge.api.error_handlers import add_exception_handlers
from pgbridge.core.config import settings
from pgbridge.core.exceptions import (AdapterNotInitializedError,
                                      DatabaseConfigurationError,
                                      DatabaseNotHealthyError,
                                      UnsupportedOrmTypeError)
from pgbridge.main import app
from pgbridge.models.database import OrmType
from pgbridge.services.database_service import DatabaseService


async def connected_service(**adapter_options) -> DatabaseService:
    orm_type = adapter_options.pop("orm_type", OrmType.SQLALCHEMY)
    adapter = FakeAdapter(orm_type=orm_type, **adapter_options)
    service = DatabaseService(FakeFactory(adapter, orm_type=orm_type))
    await service.on_init()
    return service


@pytest.fixture
def override_service():
    def _override(service):
        app.dependency_overrides[get_database_service] = lambda: service

    yield _override
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_root_endpoint():
    """Test root endpoint returns API info"""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "pgbridge API"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_check_healthy(override_service):
    """Test health check endpoint with a reachable database"""
    override_service(await connected_service())

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["environment"] == settings.ENVIRONMENT
    assert data["uptime"] >= 0
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_check_unhealthy_still_200(override_service):
    """An unreachable database is reported in the body, not as an error status"""
    service = await connected_service()
    service.get_adapter().healthy = False
    override_service(service)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"


@pytest.mark.asyncio
async def test_health_check_before_init(override_service):
    """A service that never connected reports unhealthy"""
    override_service(DatabaseService(FakeFactory()))

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"


@pytest.mark.asyncio
async def test_detailed_health_check(override_service):
    """Test detailed health check reports ORM, database and runtime"""
    override_service(await connected_service(orm_type=OrmType.ASYNCPG))

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"]["status"] == "connected"
    assert data["database"]["orm"] == "asyncpg"
    assert data["database"]["info"]["name"] == "testdb"
    assert data["database"]["info"]["type"] == "PostgreSQL"
    assert data["database"]["info"]["version"].startswith("PostgreSQL 16.2")
    assert data["system"]["cpu_cores"] >= 1
    assert data["system"]["python_version"]
    memory = data["system"]["memory"]
    assert memory["used"] > 0
    assert memory["total"] >= memory["free"] >= 0
    assert data["services"] == {"database": True, "config": True}


@pytest.mark.asyncio
async def test_detailed_health_check_database_down(override_service):
    """Database identity degrades to 'unknown' when it cannot be read"""
    service = await connected_service(info_error=RuntimeError("gone"))
    service.get_adapter().healthy = False
    override_service(service)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"]["status"] == "disconnected"
    assert data["database"]["orm"] == "sqlalchemy"
    assert data["database"]["info"]["name"] == "unknown"
    assert data["services"]["database"] is False


@pytest.mark.asyncio
async def test_health_without_service_returns_503():
    """Without the lifespan there is no service on app.state"""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["detail"] == "Database service not initialized"


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Test Prometheus metrics endpoint"""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.get("/")
        response = await client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "http_requests_total" in response.text
    assert "db_query_duration_seconds" in response.text


@pytest.mark.asyncio
async def test_lifespan_in_testing_mode_skips_database():
    """TESTING=true registers the service without connecting"""
    assert settings.TESTING is True

    async with main.lifespan(app):
        service = app.state.database_service
        assert isinstance(service, DatabaseService)
        assert service.get_adapter() is None

    del app.state.database_service


@pytest.mark.asyncio
async def test_lifespan_connects_and_disconnects(monkeypatch):
    calls = []

    async def on_init(self):
        calls.append("init")

    async def on_destroy(self):
        calls.append("destroy")

    monkeypatch.setattr(settings, "TESTING", False)
    monkeypatch.setattr(DatabaseService, "on_init", on_init)
    monkeypatch.setattr(DatabaseService, "on_destroy", on_destroy)

    async with main.lifespan(app):
        assert calls == ["init"]

    assert calls == ["init", "destroy"]
    del app.state.database_service


@pytest.mark.asyncio
async def test_lifespan_aborts_when_database_is_unhealthy(monkeypatch):
    """Startup fails, but the client opened by connect() is still closed"""
    adapter = FakeAdapter(healthy=False)
    monkeypatch.setattr(settings, "TESTING", False)
    monkeypatch.setattr(main, "DatabaseFactory", lambda _settings: FakeFactory(adapter))

    with pytest.raises(DatabaseNotHealthyError):
        async with main.lifespan(app):
            pass

    assert adapter.disconnect_calls == 1
    assert adapter.connected is False

    del app.state.database_service


@pytest.mark.asyncio
async def test_lifespan_closes_client_when_connect_fails(monkeypatch):
    adapter = FakeAdapter(connect_error=ConnectionRefusedError("connection refused"))
    monkeypatch.setattr(settings, "TESTING", False)
    monkeypatch.setattr(main, "DatabaseFactory", lambda _settings: FakeFactory(adapter))

    with pytest.raises(ConnectionRefusedError):
        async with main.lifespan(app):
            pass

    assert adapter.disconnect_calls == 1

    del app.state.database_service


@pytest.mark.asyncio
@pytest.mark.parametrize("error,status_code", [
    (AdapterNotInitializedError("asyncpg pool not initialized"), 503),
    (DatabaseNotHealthyError("Database is not functioning correctly"), 503),
    (DatabaseConfigurationError("DATABASE_URL is not defined"), 500),
    (UnsupportedOrmTypeError("Unsupported ORM type: prisma"), 400),
])
async def test_exception_handlers(error, status_code):
    """Database errors map to HTTP responses without leaking credentials"""
    test_app = FastAPI()
    add_exception_handlers(test_app)

    @test_app.get("/boom")
    async def boom():
        raise error

    transport = ASGITransport(app=test_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/boom")

    assert response.status_code == status_code
    assert "detail" in response.json()
