"""Structured logging configuration with quote IDs for tracing.

This module provides structured JSON logging with:
- Quote IDs tying together every log line produced for one transfer quote
- Contextual fields (source chain, destination chain, token)
- Consistent log formatting
"""
from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

# Context variables for quote tracking
quote_id_var: ContextVar[Optional[str]] = ContextVar("quote_id", default=None)
route_var: ContextVar[Optional[str]] = ContextVar("route", default=None)
token_var: ContextVar[Optional[str]] = ContextVar("token", default=None)

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "quote_id",
        "route",
        "token",
    )
)


class QuoteContextFilter(logging.Filter):
    """Logging filter that adds the quote context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.quote_id = quote_id_var.get()
        record.route = route_var.get()
        record.token = token_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attr in ("quote_id", "route", "token"):
            value = getattr(record, attr, None)
            if value:
                log_data[attr] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed through logger.info(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure structured logging for the toolkit.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON structured logging (True) or simple format (False)
        log_file: Optional file path for logging output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - "
            "[%(quote_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(QuoteContextFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(QuoteContextFilter())
        root_logger.addHandler(file_handler)


def get_quote_id() -> Optional[str]:
    """Get the current quote ID from context."""
    return quote_id_var.get()


def set_quote_id(quote_id: str) -> None:
    """Set quote ID in context."""
    quote_id_var.set(quote_id)


def generate_quote_id() -> str:
    """Generate a new quote ID."""
    return f"qt_{uuid.uuid4().hex[:16]}"


def set_route_context(source: str, destination: str, token: Optional[str] = None) -> None:
    """Set route and token in logging context."""
    route_var.set(f"{source}->{destination}")
    if token:
        token_var.set(token)


def clear_context() -> None:
    """Clear all context variables."""
    quote_id_var.set(None)
    route_var.set(None)
    token_var.set(None)


__all__ = [
    "QuoteContextFilter",
    "StructuredFormatter",
    "setup_logging",
    "get_quote_id",
    "set_quote_id",
    "generate_quote_id",
    "set_route_context",
    "clear_context",
]
