"""
Storefront Edge API — Request Logging Middleware
=================================================

What:  One access log line per request: method, path, status, duration,
       request ID and the Cache-Control the response was given.
Why:   Edge responses are served mostly from the CDN; seeing which policy a
       response left with makes cache misbehaviour easy to spot.
How:   Wraps call_next, measures with perf_counter, logs to
       `storefront.access` at a level chosen by status class.

Log line:
    GET /api/products 200 12.3ms [a1b2c3d4] cache="public, max-age=300, ..."

Request and response bodies are never logged (orders carry customer data).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from storefront.middleware.request_id import request_id_var

logger = logging.getLogger("storefront.access")

# Probe endpoints that would otherwise flood the access log
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request ID correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        status = response.status_code
        cache_control = response.headers.get("Cache-Control", "-")

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] cache=%r",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            cache_control,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
