from pgbridge.adapters.base import DatabaseAdapter
from pgbridge.adapters.asyncpg_adapter import AsyncpgAdapter
from pgbridge.adapters.sqlalchemy_adapter import SQLAlchemyAdapter
from pgbridge.adapters.factory import DatabaseFactory

__all__ = [
    "DatabaseAdapter",
    "AsyncpgAdapter",
    "SQLAlchemyAdapter",
    "DatabaseFactory",
]
