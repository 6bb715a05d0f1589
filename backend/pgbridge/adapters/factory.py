"""
This module defines the `DatabaseFactory`, the single place where the
configured ORM backend is turned into a concrete database adapter.

Everything outside this module (the database service, health routes,
repositories) programs against the `DatabaseAdapter` protocol and never
branches on the ORM type itself.
"""

import logging
from typing import Dict, Optional, Type, Union

from pgbridge.adapters.asyncpg_adapter import AsyncpgAdapter
from pgbridge.adapters.base import DatabaseAdapter
from pgbridge.adapters.sqlalchemy_adapter import SQLAlchemyAdapter
from pgbridge.core.config import Settings
from pgbridge.core.config import settings as default_settings
from pgbridge.core.exceptions import UnsupportedOrmTypeError
from pgbridge.models.database import OrmType

logger = logging.getLogger(__name__)

DEFAULT_ORM_TYPE = OrmType.SQLALCHEMY

ADAPTERS: Dict[OrmType, Type] = {
    OrmType.SQLALCHEMY: SQLAlchemyAdapter,
    OrmType.ASYNCPG: AsyncpgAdapter,
}


class DatabaseFactory:
    """
    Creates database adapters from configuration.

    The ORM type is read from `DATABASE_ORM` every time it is asked for, so
    `create_adapter()` and the `is_*` predicates always agree with the
    settings object the factory was built with.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or default_settings

    def get_orm_type(self) -> OrmType:
        """
        Returns the configured ORM type.

        Unknown or empty values fall back to SQLAlchemy with a warning; this
        never raises.
        """
        configured = self._settings.DATABASE_ORM or ""

        for orm_type in OrmType:
            if configured == orm_type.value:
                return orm_type

        logger.warning(
            f"Invalid DATABASE_ORM value: {configured!r}. "
            f"Defaulting to {DEFAULT_ORM_TYPE.value}"
        )
        return DEFAULT_ORM_TYPE

    def create_adapter(self) -> DatabaseAdapter:
        """Creates the adapter for the configured ORM type."""
        adapter_class = ADAPTERS.get(self.get_orm_type(), ADAPTERS[DEFAULT_ORM_TYPE])
        return adapter_class(self._settings)

    def create_adapter_by_type(self, orm_type: Union[OrmType, str]) -> DatabaseAdapter:
        """
        Creates the adapter for an explicit ORM type.

        Args:
            orm_type: An `OrmType` or its string value.

        Raises:
            UnsupportedOrmTypeError: If `orm_type` is not a supported backend.
        """
        try:
            resolved = OrmType(orm_type)
        except ValueError:
            raise UnsupportedOrmTypeError(
                f"Unsupported ORM type: {orm_type}. "
                f"Supported types: {[t.value for t in OrmType]}"
            ) from None

        return ADAPTERS[resolved](self._settings)

    def is_sqlalchemy(self) -> bool:
        return self.get_orm_type() is OrmType.SQLALCHEMY

    def is_asyncpg(self) -> bool:
        return self.get_orm_type() is OrmType.ASYNCPG
