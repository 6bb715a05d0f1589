"""Prometheus metrics for monitoring application performance and health."""
import re
import time
from contextlib import contextmanager

from fastapi import Request, Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Gauge, Histogram,
                               generate_latest)
from starlette.middleware.base import BaseHTTPMiddleware

# HTTP Request Metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

# Database Adapter Metrics
db_adapter_connected = Gauge(
    'db_adapter_connected',
    'Whether the database adapter for an ORM backend is connected (1) or not (0)',
    ['orm_type']
)

db_query_duration_seconds = Histogram(
    'db_query_duration_seconds',
    'Database query duration in seconds',
    ['orm_type', 'query_type'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

db_query_errors_total = Counter(
    'db_query_errors_total',
    'Total number of database query errors',
    ['orm_type', 'error_type']
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        endpoint = self._normalize_path(request.url.path)

        try:
            response = await call_next(request)
            status_code = response.status_code

            duration = time.time() - start_time
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

            return response
        except Exception:
            duration = time.time() - start_time
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=500
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)
            raise

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing IDs with placeholders."""
        path = re.sub(
            r'/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '/{id}', path)
        path = re.sub(r'/\d+', '/{id}', path)
        return path


def get_metrics_response() -> Response:
    """Get Prometheus metrics in text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@contextmanager
def track_db_query(orm_type: str, query_type: str = "raw"):
    """Time a database call and count its failures by exception type."""
    start_time = time.time()
    try:
        yield
    except Exception as e:
        db_query_errors_total.labels(
            orm_type=orm_type,
            error_type=type(e).__name__
        ).inc()
        raise
    finally:
        db_query_duration_seconds.labels(
            orm_type=orm_type,
            query_type=query_type
        ).observe(time.time() - start_time)
