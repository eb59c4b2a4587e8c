# ==== CORRELATION ID MIDDLEWARE ==== #

"""
Correlation ID middleware for request tracing in Boxship.

This module propagates or generates a correlation ID per request, wraps
the request in a span and records request latency.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from boxship.observability.metrics import http_request_latency_seconds
from boxship.observability.tracing import get_tracer


# ==== MODULE INITIALIZATION ==== #

tracer = get_tracer(__name__)

CORRELATION_HEADER = "X-Correlation-Id"


# ==== CORRELATION MIDDLEWARE CLASS ==== #

class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation IDs to requests and responses.

    The ID is stored on ``request.state`` for error handlers and echoed
    back in the response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with correlation ID tracking and latency metrics.

        Args:
            request (Request): Incoming HTTP request
            call_next (Callable): Next middleware/handler in chain

        Returns:
            Response: HTTP response with correlation ID header
        """
        # --► CORRELATION ID MANAGEMENT
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        start_time = time.perf_counter()

        # --► DISTRIBUTED TRACING
        with tracer.start_as_current_span("http_request") as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.url", str(request.url))
            span.set_attribute("correlation_id", correlation_id)

            response = await call_next(request)

            response.headers[CORRELATION_HEADER] = correlation_id

            # --► METRICS COLLECTION
            route = request.scope.get("route")
            path = getattr(route, "path", "unmatched")
            http_request_latency_seconds.labels(
                method=request.method,
                path=path,
                status_code=str(response.status_code)
            ).observe(time.perf_counter() - start_time)

            span.set_attribute("http.status_code", response.status_code)

            return response
