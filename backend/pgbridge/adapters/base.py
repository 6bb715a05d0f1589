"""
Database Adapter Protocol

Defines the contract every ORM backend adapter satisfies. Adapters do not
share a base class; they conform structurally so the factory, the service
and the health routes can stay ORM-agnostic.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable

from pgbridge.core.config import Settings
from pgbridge.core.error_utils import safe_url
from pgbridge.core.exceptions import DatabaseConfigurationError
from pgbridge.models.database import (DatabaseAdapterConfig, DatabaseInfo,
                                      DatabaseStatus, OrmType)

POSTGRES_URL_SCHEMES = (
    "postgresql://",
    "postgres://",
    "postgresql+asyncpg://",
    "postgres+asyncpg://",
)
HEALTH_CHECK_QUERY = "SELECT 1"
DATABASE_INFO_QUERY = (
    "SELECT current_database() AS database_name, current_user, "
    "version() AS postgres_version"
)


@runtime_checkable
class DatabaseAdapter(Protocol):
    """
    Uniform lifecycle, health-check and raw-query interface over one ORM client.

    An adapter owns exactly one client (engine or pool) between connect()
    and disconnect(). Nothing else holds a reference to that client except
    through get_orm_instance().
    """

    orm_type: OrmType

    async def connect(self) -> None:
        """
        Build the client and verify it with a round-trip query.

        Raises:
            Whatever the driver raises. Status is ERROR afterwards.
        """
        ...

    async def disconnect(self) -> None:
        """Close the client, drop the reference and mark DISCONNECTED."""
        ...

    async def health_check(self) -> bool:
        """Run the probe query. Never raises; failures return False."""
        ...

    async def get_database_info(self) -> Optional[DatabaseInfo]:
        """Return name, user and server version, or None if unavailable."""
        ...

    async def execute_raw_query(self, query: str) -> List[dict]:
        """
        Send a literal SQL string to the driver's raw execution primitive.

        The string is not parameterized or escaped. Never pass user input.

        Raises:
            AdapterNotInitializedError: If the adapter has no client.
        """
        ...

    def get_orm_instance(self) -> Any:
        """The underlying engine/pool, or None while disconnected."""
        ...

    def get_status(self) -> DatabaseStatus:
        ...

    def get_config(self) -> DatabaseAdapterConfig:
        ...


def adapter_config_from_settings(
    settings: Settings, orm_type: OrmType
) -> DatabaseAdapterConfig:
    """
    Capture connection settings for an adapter.

    Raises:
        DatabaseConfigurationError: If DATABASE_URL is not set.
    """
    database_url = (settings.DATABASE_URL or "").strip()
    if not database_url:
        raise DatabaseConfigurationError(
            f"DATABASE_URL is not defined for {orm_type.value} connection."
        )
    if not database_url.startswith(POSTGRES_URL_SCHEMES):
        raise DatabaseConfigurationError(
            "Invalid DATABASE_URL format. Must start with 'postgresql://' or "
            f"'postgres://'. Got: {safe_url(database_url)[:50]}..."
        )

    return DatabaseAdapterConfig(
        connection_string=database_url,
        max_connections=settings.DB_MAX_CONNECTIONS,
        idle_timeout=settings.DB_IDLE_TIMEOUT,
        connection_timeout=settings.DB_CONNECTION_TIMEOUT,
    )


def database_name_from_url(url: str) -> str:
    """Extract the database name from a connection URL ('' if absent)."""
    tail = url.split("@")[-1]
    if "/" not in tail:
        return ""
    return tail.split("/", 1)[1].split("?")[0]
