"""
FastAPI middleware for observability.

This module provides:
- Request/Response logging with request_id propagation
- Request timing for latency tracking
- In-memory metrics collection exposed by /metrics

Design Choices:
- In-memory metrics with a fixed-size latency buffer (no unbounded growth)
- Request ID taken from an incoming X-Request-ID header when present,
  generated otherwise, and echoed in the response headers

Middleware Stack Order (in main.py):
    1. LoggingMiddleware (outermost - captures everything)
    2. CORS Middleware
    3. Application routes
"""

import logging
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


# =============================================================================
# IN-MEMORY METRICS COLLECTOR
# =============================================================================

@dataclass
class MetricsCollector:
    """
    In-memory metrics collector.

    Keeps request counters by status class and the durations of the last
    ``max_history`` requests for percentile calculation.
    """
    max_history: int = 1000
    total_requests: int = 0
    by_status_class: Counter = field(default_factory=Counter)
    _durations: Deque[float] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self._durations = deque(maxlen=self.max_history)

    def record_request(self, status_code: int, duration_ms: float) -> None:
        """Record a completed request."""
        self.total_requests += 1
        self.by_status_class[f"{status_code // 100}xx"] += 1
        self._durations.append(duration_ms)

    def get_latency_percentiles(self) -> Dict[str, float]:
        """
        Calculate p50/p95/p99 latencies in milliseconds.

        Returns 0 for every percentile when no request was recorded yet.
        """
        if not self._durations:
            return {"p50": 0, "p95": 0, "p99": 0}

        durations = sorted(self._durations)
        n = len(durations)

        def percentile(p: float) -> float:
            return durations[min(int(n * p / 100), n - 1)]

        return {
            "p50": round(percentile(50), 2),
            "p95": round(percentile(95), 2),
            "p99": round(percentile(99), 2),
        }

    def get_summary(self) -> Dict:
        """Get metrics summary for the /metrics endpoints."""
        latencies = self.get_latency_percentiles()
        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.by_status_class["2xx"],
            "http_requests_4xx_total": self.by_status_class["4xx"],
            "http_requests_5xx_total": self.by_status_class["5xx"],
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
        }

    def get_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format."""
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f'http_requests_total {summary["http_requests_total"]}',
            "",
            "# HELP http_requests_by_status HTTP requests by status category",
            "# TYPE http_requests_by_status counter",
            f'http_requests_by_status{{status="2xx"}} {summary["http_requests_2xx_total"]}',
            f'http_requests_by_status{{status="4xx"}} {summary["http_requests_4xx_total"]}',
            f'http_requests_by_status{{status="5xx"}} {summary["http_requests_5xx_total"]}',
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
            f'http_request_duration_ms{{quantile="0.5"}} {summary["http_request_duration_ms_p50"]}',
            f'http_request_duration_ms{{quantile="0.95"}} {summary["http_request_duration_ms_p95"]}',
            f'http_request_duration_ms{{quantile="0.99"}} {summary["http_request_duration_ms_p99"]}',
        ]
        return "\n".join(lines) + "\n"


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/Response logging middleware with request_id propagation.

    Log Output (JSON):
    {
        "timestamp": "...",
        "level": "INFO",
        "message": "Request completed",
        "request_id": "abc-123",
        "extra": {
            "method": "GET",
            "path": "/v1/patients",
            "status_code": 200,
            "duration_ms": 12.4
        }
    }
    """

    # Paths to exclude from detailed logging (reduce noise)
    EXCLUDED_PATHS = {"/health", "/ready", "/metrics", "/metrics/json", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with logging and metrics collection."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        set_request_id(request_id)

        method = request.method
        path = request.url.path
        noisy = path in self.EXCLUDED_PATHS
        start_time = time.perf_counter()

        if not noisy:
            logger.info(
                "Request started",
                extra={
                    "method": method,
                    "path": path,
                    "query": str(request.query_params) if request.query_params else None,
                }
            )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            metrics_collector.record_request(500, duration_ms)
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            clear_request_id()
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics_collector.record_request(response.status_code, duration_ms)

        if not noisy:
            log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                log_level,
                "Request completed",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

        clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
