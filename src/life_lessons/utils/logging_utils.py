"""
Logging utilities shared by the application entry point and middleware.

Provides the request logging middleware plus helpers for lifecycle and error events.
"""

import time
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from life_lessons.managers.logging_manager import get_logger

logger = get_logger()
request_logger = get_logger(name="requests", prefix="[REQUEST]")
lifecycle_logger = get_logger(name="lifecycle", prefix="[LIFECYCLE]")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one line per request with method, path, status and duration.

    A request id is taken from the incoming `X-Request-ID` header, or generated, and echoed
    back on the response so client and server logs can be correlated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:16]
        request.state.request_id = request_id
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            duration = time.time() - start_time
            request_logger.error(
                "%s %s failed after %.3fs (request_id=%s)",
                request.method,
                request.url.path,
                duration,
                request_id,
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        request_logger.info(
            "%s %s -> %d in %.3fs (request_id=%s)",
            request.method,
            request.url.path,
            response.status_code,
            duration,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def log_application_lifecycle(event: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Log an application lifecycle event (startup phase, shutdown, configuration)."""
    lifecycle_logger.info("%s: %s", event, details or {})


def log_error_with_context(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception together with the operation context it happened in."""
    logger.error(
        "%s: %s | context=%s",
        type(error).__name__,
        error,
        context or {},
        exc_info=error,
    )
