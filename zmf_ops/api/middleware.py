"""Per-request correlation, access logging and HTTP metrics."""

import time

from fastapi import Request
from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ..core.observability import (
    REQUEST_COUNT,
    REQUEST_DURATION,
    bind_request_context,
    get_logger,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
WORKER_HEADER = "X-Worker-ID"


def _endpoint_label(request: Request) -> str:
    # Route templates keep task and batch ids out of metric labels
    route = request.scope.get("route")
    if isinstance(route, APIRoute):
        return route.path
    return request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Binds the request context, logs each request and records its metrics."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = bind_request_context(
            request.headers.get(CORRELATION_HEADER),
            request.headers.get(WORKER_HEADER),
        )
        started = time.perf_counter()
        logger.info("Request started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = self._observe(request, 500, started)
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_seconds=elapsed,
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise

        elapsed = self._observe(request, response.status_code, started)
        response.headers[CORRELATION_HEADER] = correlation_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=elapsed,
        )
        return response

    @staticmethod
    def _observe(request: Request, status_code: int, started: float) -> float:
        elapsed = time.perf_counter() - started
        endpoint = _endpoint_label(request)
        REQUEST_COUNT.labels(
            method=request.method, endpoint=endpoint, status=str(status_code)
        ).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(elapsed)
        return elapsed
