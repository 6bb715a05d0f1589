"""
This module provides the asyncpg database adapter.

`AsyncpgAdapter` drives a plain asyncpg connection pool. Unlike the
SQLAlchemy backend it sizes the pool explicitly from settings (max
connections, idle lifetime and connect timeout) and hands the raw
`asyncpg.Pool` to callers that want to write SQL against the driver.
"""

import logging
import ssl
from typing import Any, Dict, List, Optional

import asyncpg  # type: ignore[import-untyped]
from pgbridge.adapters.base import (DATABASE_INFO_QUERY, HEALTH_CHECK_QUERY,
                                    adapter_config_from_settings)
from pgbridge.core.config import Settings
from pgbridge.core.config import settings as default_settings
from pgbridge.core.error_utils import safe_url, truncate_error_message
from pgbridge.core.exceptions import AdapterNotInitializedError
from pgbridge.core.metrics import db_adapter_connected, track_db_query
from pgbridge.models.database import (DatabaseAdapterConfig, DatabaseInfo,
                                      DatabaseStatus, OrmType)

logger = logging.getLogger(__name__)


def to_asyncpg_dsn(url: str) -> str:
    """Strip a SQLAlchemy driver suffix so asyncpg accepts the URL."""
    for prefix in ("postgresql+asyncpg://", "postgres+asyncpg://"):
        if url.startswith(prefix):
            return "postgresql://" + url[len(prefix):]
    return url


class AsyncpgAdapter:
    """
    asyncpg pool adapter.

    The pool is created on connect() and closed on disconnect(). Production
    deployments connect over TLS without certificate verification, which
    matches managed Postgres providers that terminate TLS with private CAs.
    """

    orm_type = OrmType.ASYNCPG

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
        self._pool: Optional[asyncpg.Pool] = None
        self._status = DatabaseStatus.DISCONNECTED

    def _pool_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "min_size": 1,
            "max_size": self._config.max_connections,
            "max_inactive_connection_lifetime": self._config.idle_timeout,
            "timeout": self._config.connection_timeout,
            # Compatible with transaction-mode poolers (PgBouncer, Supabase, Neon)
            "statement_cache_size": 0,
        }
        if self._settings.is_production:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            options["ssl"] = context
        return options

    async def connect(self) -> None:
        """
        Creates the connection pool and verifies it with `SELECT 1`.

        Raises:
            Any driver or network error. The status is ERROR afterwards.
        """
        try:
            self._status = DatabaseStatus.CONNECTING
            self._pool = await asyncpg.create_pool(
                to_asyncpg_dsn(self._config.connection_string),
                **self._pool_options(),
            )

            await self.execute_raw_query(HEALTH_CHECK_QUERY)

            self._status = DatabaseStatus.CONNECTED
            db_adapter_connected.labels(orm_type=self.orm_type.value).set(1)
            logger.info(
                f"✓ asyncpg adapter connected to "
                f"{safe_url(self._config.connection_string)} "
                f"(pool max={self._config.max_connections})"
            )
        except Exception as e:
            self._status = DatabaseStatus.ERROR
            logger.error(
                f"Failed to connect asyncpg adapter: {truncate_error_message(e)}"
            )
            raise

    async def disconnect(self) -> None:
        """Closes the pool and releases it."""
        if self._pool is None:
            logger.debug("asyncpg adapter already disconnected")
            self._status = DatabaseStatus.DISCONNECTED
            return

        try:
            await self._pool.close()
        except Exception as e:
            self._status = DatabaseStatus.ERROR
            logger.error(
                f"Error closing asyncpg pool: {truncate_error_message(e)}"
            )
            raise
        finally:
            self._pool = None
            db_adapter_connected.labels(orm_type=self.orm_type.value).set(0)

        self._status = DatabaseStatus.DISCONNECTED
        logger.info("✓ asyncpg adapter disconnected")

    async def health_check(self) -> bool:
        """
        Runs the probe query against the pool.

        Returns:
            `True` if the database answered, `False` otherwise (including
            when no pool exists).
        """
        if self._pool is None:
            self._status = DatabaseStatus.ERROR
            return False

        try:
            await self.execute_raw_query(HEALTH_CHECK_QUERY)
        except Exception as e:
            logger.warning(
                f"asyncpg health check failed: {truncate_error_message(e)}"
            )
            self._status = DatabaseStatus.ERROR
            return False

        self._status = DatabaseStatus.CONNECTED
        return True

    async def get_database_info(self) -> Optional[DatabaseInfo]:
        if self._pool is None:
            return None

        try:
            rows = await self.execute_raw_query(DATABASE_INFO_QUERY)
        except Exception as e:
            logger.error(
                f"Failed to read database info via asyncpg: "
                f"{truncate_error_message(e)}"
            )
            return None

        if not rows:
            return None
        return DatabaseInfo.from_row(rows[0])

    async def execute_raw_query(self, query: str) -> List[Dict[str, Any]]:
        """
        Executes a literal SQL string on a pooled connection.

        Args:
            query: SQL text, sent as is. Not parameterized.

        Returns:
            Result rows as dictionaries (empty for statements without rows).

        Raises:
            AdapterNotInitializedError: If connect() has not created a pool.
        """
        if self._pool is None:
            raise AdapterNotInitializedError("asyncpg pool not initialized")

        with track_db_query(self.orm_type.value):
            rows = await self._pool.fetch(query)
        return [dict(row) for row in rows]

    def get_orm_instance(self) -> Optional[asyncpg.Pool]:
        return self._pool

    def get_status(self) -> DatabaseStatus:
        return self._status

    def get_config(self) -> DatabaseAdapterConfig:
        return self._config
