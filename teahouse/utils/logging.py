"""Structured logging setup.

structlog loggers and plain `logging.getLogger(__name__)` loggers render
through the same formatter, and everything goes to stderr: stdout carries
the stdio wire protocol.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from teahouse.config.loader import get_settings

# Context variable for request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Maps configured level names onto stdlib levels
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context."""
    if request_id is None:
        request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    return request_id


def add_request_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add request ID to log records."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and the root logger. Arguments default to settings."""
    settings = get_settings()
    level_no = LOG_LEVELS.get((level or settings.log_level).lower(), logging.INFO)
    log_format = log_format or settings.log_format

    shared_processors = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_request_id,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter_processors = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_format == "json":
        formatter_processors.append(structlog.processors.format_exc_info)
    formatter_processors.append(_renderer(log_format))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=formatter_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level_no)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)
