"""
SQLAlchemy Database Adapter

Runs the database layer on a SQLAlchemy async engine with the asyncpg
driver. Pooling is left to the engine's defaults; repositories that want the
ORM get the `AsyncEngine` from `get_orm_instance()` and build sessions on it.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pgbridge.adapters.base import (DATABASE_INFO_QUERY, HEALTH_CHECK_QUERY,
                                    adapter_config_from_settings)
from pgbridge.core.config import Settings
from pgbridge.core.config import settings as default_settings
from pgbridge.core.error_utils import safe_url, truncate_error_message
from pgbridge.core.exceptions import AdapterNotInitializedError
from pgbridge.core.metrics import db_adapter_connected, track_db_query
from pgbridge.models.database import (DatabaseAdapterConfig, DatabaseInfo,
                                      DatabaseStatus, OrmType)
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

logger = logging.getLogger(__name__)


def to_sqlalchemy_url(url: str) -> str:
    """Convert a standard postgresql:// URL to the asyncpg dialect URL."""
    if url.startswith("postgresql+asyncpg://"):
        return url
    for prefix in ("postgres+asyncpg://", "postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def engine_options(url: str) -> Tuple[URL, Dict[str, Any]]:
    """
    Build the engine URL and asyncpg connect args from a connection URL.

    asyncpg.connect() has no `sslmode` keyword, so the libpq-style query
    parameter is moved into `connect_args["ssl"]`, which accepts the same
    mode names ("disable", "require", "verify-full", ...).
    """
    engine_url = make_url(to_sqlalchemy_url(url))
    connect_args: Dict[str, Any] = {}

    sslmode = engine_url.query.get("sslmode")
    if isinstance(sslmode, tuple):
        sslmode = sslmode[-1]
    if sslmode is not None:
        engine_url = engine_url.difference_update_query(["sslmode"])
        connect_args["ssl"] = sslmode

    return engine_url, connect_args


class SQLAlchemyAdapter:
    """
    SQLAlchemy async engine adapter.

    The engine is created on connect() and disposed on disconnect(). Raw
    queries run through `AsyncConnection.exec_driver_sql` inside a
    transaction that commits when the statement succeeds.
    """

    orm_type = OrmType.SQLALCHEMY

    def __init__(self, settings: Optional[Settings] = None):
        """
        Args:
            settings: Configuration source. Defaults to the process settings.

        Raises:
            DatabaseConfigurationError: If DATABASE_URL is missing or not a
                Postgres URL.
        """
        self._settings = settings or default_settings
        self._config = adapter_config_from_settings(self._settings, self.orm_type)
        self._engine: Optional[AsyncEngine] = None
        self._status = DatabaseStatus.DISCONNECTED

    async def connect(self) -> None:
        """
        Creates the async engine and verifies it with `SELECT 1`.

        The engine connects lazily, so the probe is what actually opens the
        first connection.

        Raises:
            Any driver or network error. The status is ERROR afterwards.
        """
        try:
            self._status = DatabaseStatus.CONNECTING
            engine_url, connect_args = engine_options(self._config.connection_string)
            self._engine = create_async_engine(engine_url, connect_args=connect_args)

            await self.execute_raw_query(HEALTH_CHECK_QUERY)

            self._status = DatabaseStatus.CONNECTED
            db_adapter_connected.labels(orm_type=self.orm_type.value).set(1)
            logger.info(
                f"✓ SQLAlchemy adapter connected to "
                f"{safe_url(self._config.connection_string)}"
            )
        except Exception as e:
            self._status = DatabaseStatus.ERROR
            logger.error(
                f"Failed to connect SQLAlchemy adapter: {truncate_error_message(e)}"
            )
            raise

    async def disconnect(self) -> None:
        """Disposes of the engine and its pooled connections."""
        if self._engine is None:
            logger.debug("SQLAlchemy adapter already disconnected")
            self._status = DatabaseStatus.DISCONNECTED
            return

        try:
            await self._engine.dispose()
        except Exception as e:
            self._status = DatabaseStatus.ERROR
            logger.error(
                f"Error disposing SQLAlchemy engine: {truncate_error_message(e)}"
            )
            raise
        finally:
            self._engine = None
            db_adapter_connected.labels(orm_type=self.orm_type.value).set(0)

        self._status = DatabaseStatus.DISCONNECTED
        logger.info("✓ SQLAlchemy adapter disconnected")

    async def health_check(self) -> bool:
        """
        Perform a health check on the engine.

        Returns:
            True if the database answered the probe query
        """
        if self._engine is None:
            self._status = DatabaseStatus.ERROR
            return False

        try:
            await self.execute_raw_query(HEALTH_CHECK_QUERY)
        except Exception as e:
            logger.warning(
                f"SQLAlchemy health check failed: {truncate_error_message(e)}"
            )
            self._status = DatabaseStatus.ERROR
            return False

        self._status = DatabaseStatus.CONNECTED
        return True

    async def get_database_info(self) -> Optional[DatabaseInfo]:
        """
        Get name, user and version of the connected database.

        Returns:
            DatabaseInfo, or None if the engine is missing or the query fails
        """
        if self._engine is None:
            return None

        try:
            rows = await self.execute_raw_query(DATABASE_INFO_QUERY)
        except Exception as e:
            logger.error(
                f"Failed to read database info via SQLAlchemy: "
                f"{truncate_error_message(e)}"
            )
            return None

        if not rows:
            return None
        return DatabaseInfo.from_row(rows[0])

    async def execute_raw_query(self, query: str) -> List[Dict[str, Any]]:
        """
        Execute a literal SQL string through the driver.

        Args:
            query: SQL text, sent as is. Not parameterized.

        Returns:
            Result rows as dictionaries (empty for statements without rows)

        Raises:
            AdapterNotInitializedError: If connect() has not created an engine
        """
        if self._engine is None:
            raise AdapterNotInitializedError("SQLAlchemy engine not initialized")

        with track_db_query(self.orm_type.value):
            async with self._engine.begin() as conn:
                result = await conn.exec_driver_sql(query)
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings()]

    def get_orm_instance(self) -> Optional[AsyncEngine]:
        return self._engine

    def get_status(self) -> DatabaseStatus:
        return self._status

    def get_config(self) -> DatabaseAdapterConfig:
        return self._config
