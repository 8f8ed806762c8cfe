"""
Request timeout middleware.

Bounds every request by `REQUEST_TIMEOUT_SECONDS`. A request that runs longer is
answered with **504** `{"message": "Request timed out"}` and its handler is cancelled.
"""

import asyncio
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from life_lessons.config import settings
from life_lessons.managers.logging_manager import get_logger

logger = get_logger(prefix="[Timeout Middleware]")

# Scrape and probe endpoints are never cut off
EXEMPT_PATHS = {"/metrics"}


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Answers with 504 when a request outlives the configured timeout."""

    def __init__(self, app: ASGIApp, timeout_seconds: Optional[float] = None):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds or settings.REQUEST_TIMEOUT_SECONDS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                "Request %s %s timed out after %.1fs", request.method, request.url.path, self.timeout_seconds
            )
            return JSONResponse(status_code=504, content={"message": "Request timed out"})
