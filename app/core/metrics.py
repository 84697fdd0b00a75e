"""Prometheus metrics for the application."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("app", "GEO Audit application info")
APP_INFO.info({"version": "1.0.0", "name": "geo_audit"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

AUDIT_RUNS = Counter(
    "geo_audit_runs_total",
    "Total GEO audit runs",
    ["status"],  # ok | fetch_error | error
)

AUDIT_PERCENTAGE = Histogram(
    "geo_audit_percentage",
    "Distribution of overall GEO audit percentages",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

PROVIDER_CALLS = Counter(
    "metrics_provider_calls_total",
    "Metrics provider sub-request outcomes",
    ["facet", "status"],  # facet: rank_overview | on_page | ranked_keywords
)

EMAILS_SENT = Counter(
    "report_emails_total",
    "Report emails by delivery outcome",
    ["status"],
)


# --- Middleware ---

# Collapse query-carrying report URLs so arbitrary targets don't explode cardinality
_PATH_PREFIXES = ("/report",)


def _normalize_path(path: str) -> str:
    """Map dynamic paths to a fixed label."""
    for prefix in _PATH_PREFIXES:
        if path.startswith(prefix):
            return prefix
    return path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = _normalize_path(request.url.path)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
