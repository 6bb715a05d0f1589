"""Health check routes.

Both endpoints always answer 200; an unreachable database shows up as
`"status": "unhealthy"` in the body so load balancers and dashboards can
tell a degraded service from a crashed one.
"""

import os
import platform
import time
from datetime import datetime, timezone
from typing import Optional

import psutil
from fastapi import APIRouter, Depends
from pgbridge.api.deps import get_database_service
from pgbridge.core.config import settings
from pgbridge.models.database import DatabaseInfo
from pgbridge.models.health import (DatabaseHealth, DatabaseInfoSummary,
                                    DetailedHealthResponse, HealthResponse,
                                    MemoryInfo, ServicesHealth, SystemInfo)
from pgbridge.services.database_service import DatabaseService

router = APIRouter(prefix="/health", tags=["health"])

_started_at = time.monotonic()

_MB = 1024 * 1024


def _uptime() -> float:
    return round(time.monotonic() - _started_at, 3)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _memory() -> MemoryInfo:
    host = psutil.virtual_memory()
    return MemoryInfo(
        used=round(psutil.Process().memory_info().rss / _MB),
        total=round(host.total / _MB),
        free=round(host.available / _MB),
    )


def _summarize(info: Optional[DatabaseInfo]) -> DatabaseInfoSummary:
    if info is None:
        return DatabaseInfoSummary(name="unknown", version="unknown")
    return DatabaseInfoSummary(name=info.database_name, version=info.postgres_version)


@router.get("", response_model=HealthResponse)
async def health_check(
    database: DatabaseService = Depends(get_database_service),
) -> HealthResponse:
    """
    Basic health check: is the API up and can it reach the database?
    """
    healthy = await database.health_check()
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        timestamp=_timestamp(),
        environment=settings.ENVIRONMENT,
        uptime=_uptime(),
    )


@router.get("/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(
    database: DatabaseService = Depends(get_database_service),
) -> DetailedHealthResponse:
    """
    Detailed health check with database identity, runtime and service flags.
    """
    healthy = await database.health_check()
    info = await database.get_database_info()

    return DetailedHealthResponse(
        status="healthy" if healthy else "unhealthy",
        timestamp=_timestamp(),
        environment=settings.ENVIRONMENT,
        uptime=_uptime(),
        database=DatabaseHealth(
            status="connected" if healthy else "disconnected",
            orm=database.get_orm_type().value,
            info=_summarize(info),
        ),
        system=SystemInfo(
            python_version=platform.python_version(),
            platform=platform.system().lower(),
            cpu_cores=os.cpu_count() or 1,
            memory=_memory(),
        ),
        services=ServicesHealth(
            database=healthy,
            config=bool(settings.DATABASE_URL),
        ),
    )
