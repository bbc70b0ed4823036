"""
Health, readiness, and metrics endpoints for operational visibility.

This module provides:
- /health: Liveness probe (is the app running?)
- /ready: Readiness probe (is MongoDB reachable?)
- /metrics: Prometheus-compatible request metrics

Design Choices:
- No authentication required (internal/infrastructure use)
- Machine-readable JSON responses
- Prometheus text format for metrics
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.dependencies import get_database
from core.middleware import get_metrics_collector
from repositories import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

SERVICE_NAME = "Clinic Service API"
SERVICE_VERSION = "1.0.0"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str  # "ok", "unavailable"
    latency_ms: float | None = None
    message: str | None = None


class ReadyResponse(BaseModel):
    """Response model for /ready endpoint."""
    status: str  # "ready", "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class MetricsResponse(BaseModel):
    """Response model for JSON metrics endpoint."""
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# HEALTH ENDPOINT (LIVENESS)
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Check if the application is running. Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    """
    Liveness probe - is the application process alive?

    Always returns 200 if the app is running; dependencies are checked by /ready.
    """
    return HealthResponse(status="healthy", version=SERVICE_VERSION, timestamp=_timestamp())


# =============================================================================
# READINESS ENDPOINT
# =============================================================================

def _check_database(db: Database) -> DependencyStatus:
    """Ping MongoDB and report latency."""
    start = time.perf_counter()
    try:
        db.ping()
        latency_ms = (time.perf_counter() - start) * 1000
        return DependencyStatus(
            name="database",
            status="ok",
            latency_ms=round(latency_ms, 2),
            message="MongoDB connection healthy"
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.error("Database health check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="database",
            status="unavailable",
            latency_ms=round(latency_ms, 2),
            message=f"Connection failed: {type(e).__name__}"
        )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Check if the application can serve requests. Returns 503 if MongoDB is unreachable."
)
def readiness_check(response: Response, db: Database = Depends(get_database)) -> ReadyResponse:
    """
    Readiness probe - can the application handle requests?

    Returns:
    - 200 with status="ready" if MongoDB answers a ping
    - 503 with status="not_ready" otherwise
    """
    db_status = _check_database(db)

    if db_status.status == "unavailable":
        status = "not_ready"
        response.status_code = 503
    else:
        status = "ready"

    return ReadyResponse(status=status, dependencies=[db_status], timestamp=_timestamp())


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Export request counts and latency in Prometheus text format."
)
async def get_metrics() -> Response:
    """
    Export metrics in Prometheus text format.

    Metrics exposed:
    - http_requests_total: Total request count
    - http_requests_by_status{status="2xx|4xx|5xx"}: Requests by status category
    - http_request_duration_ms{quantile="0.5|0.95|0.99"}: Latency percentiles
    """
    collector = get_metrics_collector()
    return Response(
        content=collector.get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics",
)
async def get_metrics_json() -> MetricsResponse:
    """Export metrics in JSON format."""
    return MetricsResponse(**get_metrics_collector().get_summary())


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@router.get(
    "/",
    summary="API root",
    description="Root endpoint with basic API information."
)
async def root() -> Dict[str, Any]:
    """Returns service name, version, and links to documentation."""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics"
    }
