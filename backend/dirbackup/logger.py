import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

import structlog


# Context variable to store the source/destination pair of the running backup
_backup_context: ContextVar[Optional[dict]] = ContextVar("backup_context", default=None)


def configure_logger(level: str = "WARNING", log_format: str = "json"):
    """Configure structlog once at program startup."""

    def add_context(logger, method_name, event_dict):
        """Add source/destination from context to log dict."""
        context = _backup_context.get()
        if context:
            for key, value in context.items():
                event_dict.setdefault(key, value)
        return event_dict

    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            add_context,  # Add backup context first
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout is reserved for status lines
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
    )
    logging.root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def get_logger(name: str = __name__):
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)


@contextmanager
def backup_context(source: str, destination: str):
    """Context manager for tagging every log event of one backup run.

    Usage:
        with backup_context(source="/srv/data", destination="/backups"):
            logger.info("backup_started")  # source and destination included
    """
    token = _backup_context.set({"source": str(source), "destination": str(destination)})
    try:
        yield
    finally:
        _backup_context.reset(token)
