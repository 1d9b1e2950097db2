"""
Structured logging configuration using structlog.

Provides:
- Structured logging with JSON output (production) or console (development)
- A session correlation ID context variable added to every log entry
- Utilities for setting/clearing the correlation context
"""
import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional

import structlog

from mockup_agents.core.config import Settings


# =============================================================================
# CORRELATION ID CONTEXT VARIABLES
# =============================================================================
# The session controller binds its session id here around every transition so
# that logs from the normalizer, client and interpreter can be tied together.

session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)
view_key_var: ContextVar[Optional[str]] = ContextVar("view_key", default=None)


def set_correlation_context(
    session_id: Optional[str] = None,
    view_key: Optional[str] = None,
) -> None:
    """
    Set correlation IDs in context for automatic log propagation.

    Args:
        session_id: Session controller identifier
        view_key: View currently being generated
    """
    if session_id is not None:
        session_id_var.set(session_id)
    if view_key is not None:
        view_key_var.set(view_key)


def clear_correlation_context() -> None:
    """Clear all correlation context variables."""
    session_id_var.set(None)
    view_key_var.set(None)


def add_correlation_ids(
    logger: Any,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Structlog processor that adds correlation IDs to all log entries."""
    if session_id_var.get():
        event_dict["session_id"] = session_id_var.get()
    if view_key_var.get():
        event_dict["view_key"] = view_key_var.get()
    return event_dict


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structured logging."""
    settings = settings or Settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        add_correlation_ids,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.enable_structured_logging:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)
