"""Database layer models"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class OrmType(str, Enum):
    """Supported ORM backends."""
    SQLALCHEMY = "sqlalchemy"
    ASYNCPG = "asyncpg"


class DatabaseStatus(str, Enum):
    """Connection state of a database adapter."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class DatabaseAdapterConfig(BaseModel):
    """Connection settings captured by an adapter when it is constructed."""

    model_config = {"frozen": True}

    connection_string: str
    max_connections: Optional[int] = None
    idle_timeout: Optional[float] = None  # seconds
    connection_timeout: Optional[float] = None  # seconds


class DatabaseInfo(BaseModel):
    """Identity of the database an adapter is connected to."""
    database_name: str = "unknown"
    current_user: str = "unknown"
    postgres_version: str = "unknown"

    model_config = {
        "json_schema_extra": {
            "example": {
                "database_name": "app_db",
                "current_user": "app",
                "postgres_version": "PostgreSQL 16.2 on x86_64-pc-linux-gnu",
            }
        }
    }

    @classmethod
    def from_row(cls, row: dict) -> "DatabaseInfo":
        """Build from a result row, replacing NULL columns with 'unknown'."""
        return cls(**{
            field: str(row[field]) if row.get(field) is not None else "unknown"
            for field in ("database_name", "current_user", "postgres_version")
        })
