"""
Request logging middleware.

Rejected requests (401/403) are logged at warning level so denied
permission checks stand out from normal traffic.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REJECTED_STATUSES = {401, 403}


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        log = logger.bind(method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception:
            log.exception(
                "Request failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        if response.status_code in REJECTED_STATUSES:
            log.warning("Request rejected", status_code=response.status_code, duration_ms=duration_ms)
        else:
            log.info("Request completed", status_code=response.status_code, duration_ms=duration_ms)

        return response
