"""Main FastAPI application

Startup builds the database factory and service from settings and connects
before any request is served; a database that cannot be reached or fails
its health probe aborts startup. Shutdown disconnects best-effort.
"""
import logging
import time
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pgbridge import __version__
from pgbridge.adapters.factory import DatabaseFactory
from pgbridge.api.error_handlers import add_exception_handlers
from pgbridge.api.health import router as health_router
from pgbridge.core.config import settings
from pgbridge.core.metrics import PrometheusMiddleware, get_metrics_response
from pgbridge.services.database_service import DatabaseService
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    """Initialize Sentry error tracking if DSN is configured."""
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            # 100% in debug, 10% in production
            traces_sample_rate=1.0 if settings.DEBUG else 0.1,
            environment=settings.ENVIRONMENT,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=logging.INFO,  # Capture info and above as breadcrumbs
                    event_level=logging.ERROR  # Send errors and above as events
                ),
            ],
        )
        logger.info("✓ Sentry error tracking initialized")
    else:
        logger.info("Sentry DSN not configured - error tracking disabled")


# Initialize Sentry as early as possible (before FastAPI app creation)
init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager"""
    database_service = DatabaseService(DatabaseFactory(settings))
    app.state.database_service = database_service

    if settings.TESTING:
        logger.info("Running in TESTING mode - skipping database initialization")
        yield
        return

    try:
        await database_service.on_init()
    except Exception:
        logger.critical("Database initialization failed - refusing to start")
        # A failed health query leaves the engine or pool attached to the adapter
        await database_service.on_destroy()
        raise

    try:
        yield
    finally:
        await database_service.on_destroy()
        logger.info("✓ Shutdown complete")


app = FastAPI(
    title="pgbridge API",
    description="Postgres REST backend running on SQLAlchemy or asyncpg, "
                "selected with DATABASE_ORM.",
    version=__version__,
    lifespan=lifespan,
)

# Add custom exception handlers
add_exception_handlers(app)

# Add Prometheus metrics middleware
app.add_middleware(PrometheusMiddleware)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log request method, path, and response status/duration."""
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"{response.status_code} ({process_time:.3f}s)"
        )
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            f"{request.method} {request.url.path} ERROR after "
            f"{process_time:.3f}s: {e}",
            exc_info=True,
        )
        raise


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["*"] if settings.DEBUG else ["Content-Type", "Authorization", "Accept", "Origin"],
    max_age=3600,  # Cache preflight requests for 1 hour
)

app.include_router(health_router)


@app.get("/")
async def root():
    return {"name": "pgbridge API", "version": __version__}


@app.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.
    Returns metrics in Prometheus text format.
    """
    return get_metrics_response()
