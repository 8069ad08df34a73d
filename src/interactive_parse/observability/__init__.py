"""Public observability primitives: structlog events into a JSON-lines session log."""

from interactive_parse.observability.logging import (
    DEFAULT_LOGGER_NAME,
    LoggingConfig,
    StructuredLoggingHandle,
    configure_structlog,
    ensure_structlog,
    get_active_logging_handle,
    new_session_id,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "DEFAULT_LOGGER_NAME",
    "LoggingConfig",
    "StructuredLoggingHandle",
    "configure_structlog",
    "ensure_structlog",
    "get_active_logging_handle",
    "new_session_id",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
