"""Prometheus HTTP request metrics middleware for FastAPI.

Tracks:
- ``ethwallet_http_requests_total`` (counter) — requests by method, route, status
- ``ethwallet_http_request_duration_seconds`` (histogram) — duration by method, route

Requests are labelled with the matched route template (``/api/v1/accounts``)
rather than the raw URL.  Unmatched paths share the ``unmatched`` label.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

if TYPE_CHECKING:
    from collections.abc import Callable

    from prometheus_client import CollectorRegistry
    from starlette.requests import Request
    from starlette.responses import Response

_UNMATCHED = "unmatched"
_SKIPPED_PATHS = frozenset({"/metrics"})


def _route_template(request: Request) -> str:
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return getattr(route, "path", _UNMATCHED)
    return _UNMATCHED


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that records request count and duration."""

    def __init__(self, app: object, *, registry: CollectorRegistry) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._requests = Counter(
            "ethwallet_http_requests_total",
            "Total HTTP requests",
            ("method", "route", "status_code"),
            registry=registry,
        )
        self._duration = Histogram(
            "ethwallet_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ("method", "route"),
            registry=registry,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[type-arg]
        if request.url.path in _SKIPPED_PATHS:
            return await call_next(request)

        route = _route_template(request)
        start = time.monotonic()
        response: Response = await call_next(request)

        self._requests.labels(
            method=request.method,
            route=route,
            status_code=str(response.status_code),
        ).inc()
        self._duration.labels(method=request.method, route=route).observe(
            time.monotonic() - start
        )
        return response
