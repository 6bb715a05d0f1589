"""
Models package initialization.
Exports the database layer value types and health DTOs.
"""

from .database import DatabaseAdapterConfig, DatabaseInfo, DatabaseStatus, OrmType
from .health import (DatabaseHealth, DatabaseInfoSummary,
                     DetailedHealthResponse, HealthResponse, MemoryInfo,
                     ServicesHealth, SystemInfo)
