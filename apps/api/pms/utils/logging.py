"""
Logging setup.

Services log through structlog with keyword context:

    logger = structlog.get_logger()
    logger.warning("Failed to extend role", role=role, parent=parent)

Request-scoped fields (request_id from RequestIdMiddleware, user_id and
client_id from the current-user dependency) are bound with
``structlog.contextvars`` and merged into every event.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Log level name
        fmt: "json" for machine-readable output, "text" for the console
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Third-party libraries (casbin, uvicorn) log through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
