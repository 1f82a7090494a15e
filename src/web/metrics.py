"""Prometheus request metrics."""

import time

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_COUNT = Counter(
    "jmrl_pool_requests_total",
    "HTTP requests handled by the pool",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "jmrl_pool_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "path"],
)


def _route_path(request: Request) -> str:
    # label by route template so /api/resource/{bib_id} is one series
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    path = _route_path(request)
    REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
    REQUEST_LATENCY.labels(request.method, path).observe(time.perf_counter() - start)
    return response


def metrics_endpoint() -> Response:
    """Expose metrics in the Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
