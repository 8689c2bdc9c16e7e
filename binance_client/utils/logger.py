"""
Structured logging utilities using structlog.

Provides JSON-formatted logging for production and
human-readable logging for development.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog


def setup_logger(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    log_format: str = "json",
    service_name: str = "binance-client"
) -> structlog.BoundLogger:
    """
    Configure and return a structured logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (stdout if None)
        log_format: "json" for production, "console" for development
        service_name: Name of the service for log context

    Returns:
        Configured structlog logger instance
    """
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_filename = f"binance_client_{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.log"
        log_file = open(log_path / log_filename, "a")
    else:
        log_file = sys.stdout

    # Configure processors based on format
    if log_format == "json":
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]
    else:  # console format for development
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=log_file is sys.stdout)
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=log_file),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(service=service_name)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a logger instance with optional name context.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


# Event type constants for structured logging
class EventType:
    """Standard event types for client logging."""

    # REST events
    REQUEST_SENT = "REQUEST_SENT"
    REQUEST_FAILED = "REQUEST_FAILED"
    RESPONSE_RECEIVED = "RESPONSE_RECEIVED"
    API_ERROR = "API_ERROR"
    DECODE_ERROR = "DECODE_ERROR"

    # Connection events
    WEBSOCKET_CONNECTED = "WEBSOCKET_CONNECTED"
    WEBSOCKET_DISCONNECTED = "WEBSOCKET_DISCONNECTED"
    WEBSOCKET_HANDSHAKE_FAILED = "WEBSOCKET_HANDSHAKE_FAILED"
    WEBSOCKET_CLOSED_BY_SERVER = "WEBSOCKET_CLOSED_BY_SERVER"

    # Listen key events
    LISTEN_KEY_CREATED = "LISTEN_KEY_CREATED"
    LISTEN_KEY_KEPT_ALIVE = "LISTEN_KEY_KEPT_ALIVE"
    LISTEN_KEY_CLOSED = "LISTEN_KEY_CLOSED"


def mask_listen_key(listen_key: Optional[str]) -> Optional[str]:
    """Truncate a listen key for logs."""
    if not listen_key:
        return listen_key
    return f"{listen_key[:6]}..."


def log_request_event(
    logger: structlog.BoundLogger,
    event_type: str,
    method: str,
    path: str,
    **kwargs
) -> None:
    """
    Log a REST request event with standard fields.

    Query strings are never logged since signed ones carry the signature.

    Args:
        logger: Logger instance
        event_type: Event type from EventType class
        method: HTTP method
        path: Endpoint path (without query)
        **kwargs: Additional event-specific fields
    """
    level = logger.warning if event_type in (EventType.REQUEST_FAILED, EventType.API_ERROR) else logger.debug
    level(
        event_type,
        event_type=event_type,
        method=method,
        path=path,
        **kwargs
    )


def log_connection_event(
    logger: structlog.BoundLogger,
    event_type: str,
    url: str,
    **kwargs
) -> None:
    """
    Log a WebSocket connection event.

    Args:
        logger: Logger instance
        event_type: Event type from EventType class
        url: Stream URL
        **kwargs: Additional context
    """
    logger.info(
        event_type,
        event_type=event_type,
        url=url,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs
    )
