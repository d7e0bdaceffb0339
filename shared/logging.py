"""
Shared logging configuration for the platform plugin client.

Client loggers are plain structlog loggers. A plugin process calls
``configure_logging`` once; every event then carries the trace ids of the
active span and the install the client is working for.
"""

import sys
import structlog
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional
from contextvars import ContextVar

from opentelemetry import trace

# Install the current storage or job work belongs to
install_id_var: ContextVar[Optional[str]] = ContextVar('install_id', default=None)


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured JSON logging for a plugin process."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            add_trace_context,
            add_install_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
    structlog.get_logger(service_name).debug("Logging configured", log_level=log_level)


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the top-level logger namespace as the service name."""
    logger_name = event_dict.get("logger", "")
    if "." in logger_name:
        event_dict["service"] = logger_name.split(".")[0]

    return event_dict


def add_trace_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add trace context to log events."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context.trace_id != 0:
            event_dict["trace_id"] = f"{span_context.trace_id:032x}"
        if span_context.span_id != 0:
            event_dict["span_id"] = f"{span_context.span_id:016x}"

    return event_dict


def add_install_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the bound plugin install to log events."""
    install_id = install_id_var.get()
    if install_id and "install_id" not in event_dict:
        event_dict["install_id"] = install_id

    return event_dict


@contextmanager
def bind_install(install_id: Optional[str]) -> Iterator[Optional[str]]:
    """
    Bind ``install_id`` to log events emitted inside the block.

    ``None`` keeps whatever install an outer block bound. The previous value
    is restored on exit.
    """
    if install_id is None:
        yield install_id_var.get()
        return

    token = install_id_var.set(install_id)
    try:
        yield install_id
    finally:
        install_id_var.reset(token)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
