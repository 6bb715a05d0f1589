"""
Database service: lifecycle owner and facade for the database layer.

The service creates the adapter through the factory at startup, verifies it,
and tears it down at shutdown. Routes and repositories talk to the service,
never to an adapter class.
"""

import logging
from typing import Optional

from pgbridge.adapters.base import DatabaseAdapter
from pgbridge.adapters.factory import DatabaseFactory
from pgbridge.core.error_utils import truncate_error_message
from pgbridge.core.exceptions import DatabaseNotHealthyError
from pgbridge.models.database import DatabaseInfo, DatabaseStatus, OrmType

logger = logging.getLogger(__name__)


class DatabaseService:
    """Owns the process's database adapter between startup and shutdown."""

    def __init__(self, factory: DatabaseFactory):
        self._factory = factory
        self._adapter: Optional[DatabaseAdapter] = None
        self._status = DatabaseStatus.DISCONNECTED

    async def on_init(self) -> None:
        """
        Connect the configured adapter and verify it.

        Raises:
            DatabaseConfigurationError: If DATABASE_URL is missing.
            DatabaseNotHealthyError: If the post-connect health check fails.
            Any connection error raised by the adapter, unchanged.
        """
        logger.info("Initializing database service...")

        try:
            self._adapter = self._factory.create_adapter()
            await self._adapter.connect()

            self._status = DatabaseStatus.CONNECTED
            logger.info(
                f"✓ Database connection established "
                f"(orm={self._adapter.orm_type.value})"
            )

            if not await self.health_check():
                raise DatabaseNotHealthyError("Database is not functioning correctly")
            logger.info("✓ Database health check passed")
        except Exception as e:
            self._status = DatabaseStatus.ERROR
            logger.error(
                f"Failed to initialize the database: {truncate_error_message(e)}"
            )
            raise

    async def on_destroy(self) -> None:
        """Disconnect the adapter. Errors are logged, never raised."""
        logger.info("Closing database connection...")
        try:
            if self._adapter is not None:
                await self._adapter.disconnect()
            self._status = DatabaseStatus.DISCONNECTED
            logger.info("✓ Database connection closed")
        except Exception as e:
            logger.error(
                f"Error closing database connection: {truncate_error_message(e)}"
            )

    async def health_check(self) -> bool:
        """`True` only if an adapter exists and its probe succeeds."""
        if self._adapter is None:
            return False
        try:
            return await self._adapter.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {truncate_error_message(e)}")
            return False

    async def get_database_info(self) -> Optional[DatabaseInfo]:
        """Database identity, or `None` when no adapter or the query fails."""
        if self._adapter is None:
            return None
        try:
            return await self._adapter.get_database_info()
        except Exception as e:
            logger.error(
                f"Failed to get database info: {truncate_error_message(e)}"
            )
            return None

    def get_adapter(self) -> Optional[DatabaseAdapter]:
        return self._adapter

    def get_status(self) -> DatabaseStatus:
        return self._status

    # ORM type is configuration, so these ask the factory, not the adapter.

    def get_orm_type(self) -> OrmType:
        return self._factory.get_orm_type()

    def is_sqlalchemy(self) -> bool:
        return self._factory.is_sqlalchemy()

    def is_asyncpg(self) -> bool:
        return self._factory.is_asyncpg()
