import logging

from fastapi import HTTPException, Request, status
from pgbridge.services.database_service import DatabaseService

logger = logging.getLogger(__name__)


async def get_database_service(request: Request) -> DatabaseService:
    """
    Return the database service created by the application lifespan.

    The service lives on `app.state` rather than in a module global so tests
    and alternative entry points can supply their own instance.
    """
    service = getattr(request.app.state, "database_service", None)
    if service is None:
        logger.warning("Database service requested before application startup")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not initialized",
        )
    return service
