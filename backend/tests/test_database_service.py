"""Tests for DatabaseService lifecycle and delegation."""
import pytest
from fakes import FakeAdapter, FakeFactory
from pgbridge.core.exceptions import (DatabaseConfigurationError,
                                      DatabaseNotHealthyError)
from pgbridge.models.database import DatabaseStatus, OrmType
from pgbridge.services.database_service import DatabaseService


def test_new_service_has_no_adapter():
    service = DatabaseService(FakeFactory())

    assert service.get_adapter() is None
    assert service.get_status() == DatabaseStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_on_init_connects_adapter():
    adapter = FakeAdapter()
    service = DatabaseService(FakeFactory(adapter))

    await service.on_init()

    assert adapter.connected is True
    assert service.get_adapter() is adapter
    assert service.get_status() == DatabaseStatus.CONNECTED


@pytest.mark.asyncio
async def test_on_init_unhealthy_database_raises():
    service = DatabaseService(FakeFactory(FakeAdapter(healthy=False)))

    with pytest.raises(DatabaseNotHealthyError, match="not functioning correctly"):
        await service.on_init()

    assert service.get_status() == DatabaseStatus.ERROR


@pytest.mark.asyncio
async def test_on_init_propagates_connect_error_unchanged():
    error = ConnectionRefusedError("connection refused")
    service = DatabaseService(FakeFactory(FakeAdapter(connect_error=error)))

    with pytest.raises(ConnectionRefusedError) as exc_info:
        await service.on_init()

    assert exc_info.value is error
    assert service.get_status() == DatabaseStatus.ERROR


@pytest.mark.asyncio
async def test_on_init_propagates_configuration_error():
    factory = FakeFactory(create_error=DatabaseConfigurationError("DATABASE_URL is not defined"))
    service = DatabaseService(factory)

    with pytest.raises(DatabaseConfigurationError):
        await service.on_init()

    assert service.get_adapter() is None


@pytest.mark.asyncio
async def test_on_destroy_disconnects():
    adapter = FakeAdapter()
    service = DatabaseService(FakeFactory(adapter))
    await service.on_init()

    await service.on_destroy()

    assert adapter.connected is False
    assert adapter.disconnect_calls == 1
    assert service.get_status() == DatabaseStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_on_destroy_without_adapter():
    service = DatabaseService(FakeFactory())

    await service.on_destroy()

    assert service.get_status() == DatabaseStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_on_destroy_swallows_disconnect_errors():
    adapter = FakeAdapter(disconnect_error=RuntimeError("close failed"))
    service = DatabaseService(FakeFactory(adapter))
    await service.on_init()

    await service.on_destroy()

    assert adapter.disconnect_calls == 1


@pytest.mark.asyncio
async def test_health_check_without_adapter():
    service = DatabaseService(FakeFactory())

    assert await service.health_check() is False


@pytest.mark.asyncio
async def test_health_check_delegates_to_adapter():
    adapter = FakeAdapter()
    service = DatabaseService(FakeFactory(adapter))
    await service.on_init()

    assert await service.health_check() is True

    adapter.healthy = False
    assert await service.health_check() is False


@pytest.mark.asyncio
async def test_health_check_swallows_adapter_errors():
    adapter = FakeAdapter()
    service = DatabaseService(FakeFactory(adapter))
    await service.on_init()
    adapter.health_error = RuntimeError("boom")

    assert await service.health_check() is False


@pytest.mark.asyncio
async def test_get_database_info_without_adapter():
    service = DatabaseService(FakeFactory())

    assert await service.get_database_info() is None


@pytest.mark.asyncio
async def test_get_database_info_delegates_to_adapter():
    adapter = FakeAdapter()
    service = DatabaseService(FakeFactory(adapter))
    await service.on_init()

    info = await service.get_database_info()

    assert info.database_name == "testdb"


@pytest.mark.asyncio
async def test_get_database_info_swallows_adapter_errors():
    adapter = FakeAdapter(info_error=RuntimeError("boom"))
    service = DatabaseService(FakeFactory(adapter))
    await service.on_init()

    assert await service.get_database_info() is None


@pytest.mark.parametrize("orm_type,sqlalchemy,asyncpg", [
    (OrmType.SQLALCHEMY, True, False),
    (OrmType.ASYNCPG, False, True),
])
def test_orm_type_comes_from_factory(orm_type, sqlalchemy, asyncpg):
    # The adapter's own type is deliberately different; the factory decides
    adapter = FakeAdapter(orm_type=OrmType.SQLALCHEMY if asyncpg else OrmType.ASYNCPG)
    service = DatabaseService(FakeFactory(adapter, orm_type=orm_type))

    assert service.get_orm_type() is orm_type
    assert service.is_sqlalchemy() is sqlalchemy
    assert service.is_asyncpg() is asyncpg
