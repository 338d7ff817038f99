"""Middleware package."""

from pms.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from pms.api.middleware.logging import LoggingMiddleware

__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "LoggingMiddleware",
]
