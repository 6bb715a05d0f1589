"""Health endpoint response models"""
from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Basic liveness report."""
    status: str  # "healthy" | "unhealthy"
    timestamp: str
    environment: str
    uptime: float

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00+00:00",
                "environment": "production",
                "uptime": 123.456,
            }
        }
    }


class DatabaseInfoSummary(BaseModel):
    name: str
    type: str = "PostgreSQL"
    version: Optional[str] = None


class DatabaseHealth(BaseModel):
    status: str  # "connected" | "disconnected"
    orm: str
    info: DatabaseInfoSummary


class MemoryInfo(BaseModel):
    """Megabytes: process resident set, host total and host available."""
    used: int
    total: int
    free: int


class SystemInfo(BaseModel):
    python_version: str
    platform: str
    cpu_cores: int
    memory: MemoryInfo


class ServicesHealth(BaseModel):
    database: bool
    config: bool


class DetailedHealthResponse(HealthResponse):
    """Health report with database, system and service details."""
    database: DatabaseHealth
    system: SystemInfo
    services: ServicesHealth
