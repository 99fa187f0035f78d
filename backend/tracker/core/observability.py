"""
Prometheus instrumentation for the Tracker Insights API.

Exposes request counters and latency by route template, plus two tracker
counters: failed store reads and dashboard date fallbacks.
"""

from __future__ import annotations

import time

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

UNMATCHED_ROUTE = "unmatched"

http_requests_total = Counter(
    "http_server_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

http_request_duration_seconds = Histogram(
    "http_server_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

http_exceptions_total = Counter(
    "http_server_exceptions_total",
    "Total unhandled exceptions",
    ["method", "route", "exception_type"],
)

tracker_store_read_failures_total = Counter(
    "tracker_store_read_failures_total",
    "Store reads that raised while building a tracker response",
    ["store"],
)

tracker_date_fallbacks_total = Counter(
    "tracker_date_fallbacks_total",
    "Dashboard reads that fell back from today to the latest active day",
)


def _route_label(request: Request) -> str:
    # Route templates keep label cardinality bounded; unknown paths share one label.
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for all requests."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            route = _route_label(request)
            http_exceptions_total.labels(
                method=request.method,
                route=route,
                exception_type=type(exc).__name__,
            ).inc()
            http_requests_total.labels(method=request.method, route=route, status=500).inc()
            http_request_duration_seconds.labels(method=request.method, route=route).observe(
                time.perf_counter() - start_time
            )
            raise

        route = _route_label(request)
        http_requests_total.labels(method=request.method, route=route, status=response.status_code).inc()
        http_request_duration_seconds.labels(method=request.method, route=route).observe(
            time.perf_counter() - start_time
        )
        return response


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint handler."""
    return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_store_failure(store: str) -> None:
    tracker_store_read_failures_total.labels(store=store).inc()


def record_date_fallback() -> None:
    tracker_date_fallbacks_total.inc()
