"""
Request middleware for logging, timing, and request ID tracking.
"""

import time
import uuid

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from lesson_booking.core.logging import get_logger
from lesson_booking.core.metrics import request_latency

logger = get_logger(__name__)


class PreflightCORSMiddleware(CORSMiddleware):
    """
    CORS preflights always get an empty 200.

    Starlette answers with "OK" (or a 400 for a disallowed origin); browser
    clients of this API expect no body. A disallowed origin still gets no
    Access-Control-Allow-Origin header, so the browser blocks the request.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        checked = super().preflight_response(request_headers)
        headers = {
            key: value
            for key, value in checked.headers.items()
            if key.lower() not in ("content-length", "content-type")
        }
        if checked.status_code != 200:
            logger.info("cors_preflight_disallowed", origin=request_headers.get("origin"))
        return Response(status_code=200, headers=headers)


def _route_label(request: Request) -> str:
    # Template path keeps the metric's label set bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that:
    1. Assigns a request ID (or reuses an incoming X-Request-ID)
    2. Binds request context to structlog for correlation
    3. Logs status code and duration, and observes request_latency_seconds
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                "request_failed",
                error=str(e),
                duration_ms=duration_ms,
            )
            raise

        elapsed = time.perf_counter() - start_time
        duration_ms = round(elapsed * 1000, 2)
        request_latency.labels(path=_route_label(request)).observe(elapsed)

        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response
