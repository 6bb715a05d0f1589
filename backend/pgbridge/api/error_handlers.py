"""Global exception handlers for the FastAPI application."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pgbridge.core.error_utils import sanitize_error_message
from pgbridge.core.exceptions import (AdapterNotInitializedError,
                                      DatabaseConfigurationError,
                                      DatabaseError, DatabaseNotHealthyError,
                                      UnsupportedOrmTypeError)


async def database_error_handler(request: Request, exc: DatabaseError):
    """Base handler for database layer errors."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": sanitize_error_message(str(exc))},
    )


async def database_unavailable_error_handler(request: Request, exc: DatabaseError):
    """Handler for a database that is not connected or not healthy."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Database unavailable: {sanitize_error_message(str(exc))}"},
    )


async def database_configuration_error_handler(
    request: Request, exc: DatabaseConfigurationError
):
    """Handler for missing or invalid database configuration."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database is not configured"},
    )


async def unsupported_orm_type_error_handler(
    request: Request, exc: UnsupportedOrmTypeError
):
    """Handler for requests naming an unknown ORM backend."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


def add_exception_handlers(app: FastAPI):
    """Add all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(AdapterNotInitializedError, database_unavailable_error_handler)
    app.add_exception_handler(DatabaseNotHealthyError, database_unavailable_error_handler)
    app.add_exception_handler(DatabaseConfigurationError, database_configuration_error_handler)
    app.add_exception_handler(UnsupportedOrmTypeError, unsupported_orm_type_error_handler)
