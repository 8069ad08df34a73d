"""Structured logging: structlog events rendered as JSON lines into a session file.

Prompts own the terminal, so no handler installed here ever writes to
stdout or stderr. Events travel structlog -> stdlib ``logging`` -> a queue
-> a file handler whose ``ProcessorFormatter`` renders one JSON object per
line.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import queue
import threading
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final

import structlog

DEFAULT_LOGGER_NAME: Final[str] = "interactive_parse"
DEFAULT_LOG_FILENAME: Final[str] = "session.jsonl"
_DEFAULT_QUEUE_SIZE: Final[int] = 4096
_DEFAULT_LOG_DIR: Final[str] = ".interactive_parse/logs"

_ACTIVE_HANDLE_LOCK = threading.Lock()
_ACTIVE_HANDLE: StructuredLoggingHandle | None = None
_ATEXIT_REGISTERED = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for one session's JSON-lines log sink."""

    session_id: str
    base_log_dir: Path | str = Path(_DEFAULT_LOG_DIR)
    logger_name: str = DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    queue_size: int = _DEFAULT_QUEUE_SIZE
    log_filename: str = DEFAULT_LOG_FILENAME


class _DropCounter:
    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    def value(self) -> int:
        with self._lock:
            return self._value


class _PassThroughQueueHandler(logging.handlers.QueueHandler):
    """Queue handler that leaves formatting to the sink and drops on overflow."""

    def __init__(self, log_queue: queue.Queue[Any], drop_counter: _DropCounter) -> None:
        super().__init__(log_queue)
        self._drop_counter = drop_counter

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The sink's ProcessorFormatter needs the original event dict.
        return record

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self._drop_counter.increment()


class StructuredLoggingHandle:
    """Runtime handle for an active logging setup."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        session_id: str,
        log_path: Path,
        log_queue: queue.Queue[Any],
        queue_handler: _PassThroughQueueHandler,
        file_handler: logging.Handler,
        listener: logging.handlers.QueueListener,
        drop_counter: _DropCounter,
    ) -> None:
        self.logger = logger
        self.session_id = session_id
        self.log_path = log_path
        self._queue = log_queue
        self._queue_handler = queue_handler
        self._file_handler = file_handler
        self._listener = listener
        self._drop_counter = drop_counter
        self._shutdown_lock = threading.Lock()
        self._is_shutdown = False

    @property
    def dropped_records(self) -> int:
        return self._drop_counter.value()

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def flush(self, *, timeout_seconds: float = 2.0) -> None:
        deadline = time.monotonic() + max(timeout_seconds, 0.0)
        while self._queue.unfinished_tasks > 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        self._file_handler.flush()

    def shutdown(self, *, timeout_seconds: float = 2.0) -> None:
        with self._shutdown_lock:
            if self._is_shutdown:
                return
            self.flush(timeout_seconds=timeout_seconds)
            self._listener.stop()
            self.logger.removeHandler(self._queue_handler)
            self._queue_handler.close()
            self._file_handler.flush()
            self._file_handler.close()
            self._is_shutdown = True


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    session_id: str | None = None,
    log_dir: Path | str | None = None,
) -> StructuredLoggingHandle:
    """Configure logging from an ``[observability]`` config section.

    ``log_dir`` overrides the configured directory. The session id defaults
    to a UTC timestamp plus a short random suffix.
    """

    cfg = dict(observability_config or {})
    raw_level = cfg.get("log_level", "INFO")
    level: int | str = raw_level if isinstance(raw_level, (int, str)) else "INFO"
    raw_dir: object = log_dir if log_dir is not None else cfg.get("log_dir", _DEFAULT_LOG_DIR)
    base_log_dir: Path | str = raw_dir if isinstance(raw_dir, (Path, str)) else _DEFAULT_LOG_DIR

    return setup_structured_logging(
        LoggingConfig(
            session_id=session_id if session_id is not None else new_session_id(),
            base_log_dir=base_log_dir,
            level=level,
        )
    )


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Install the queue-backed JSON-lines file sink and route structlog into it."""

    _shutdown_previous_active_handle()

    session_id = _validate_non_empty(config.session_id, "session_id")
    logger_name = _validate_non_empty(config.logger_name, "logger_name")
    log_filename = _validate_non_empty(config.log_filename, "log_filename")
    if Path(log_filename).name != log_filename:
        raise ValueError("log_filename must not include path separators")
    if config.queue_size <= 0:
        raise ValueError("queue_size must be > 0")
    level = _parse_log_level(config.level)

    session_dir = Path(config.base_log_dir) / session_id
    session_dir.mkdir(parents=True, exist_ok=True)
    log_path = session_dir / log_filename

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(_json_formatter())

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    log_queue: queue.Queue[Any] = queue.Queue(maxsize=config.queue_size)
    drop_counter = _DropCounter()
    queue_handler = _PassThroughQueueHandler(log_queue, drop_counter)
    queue_handler.setLevel(level)
    listener = logging.handlers.QueueListener(log_queue, file_handler, respect_handler_level=True)
    listener.start()
    logger.addHandler(queue_handler)

    configure_structlog()
    structlog.contextvars.bind_contextvars(session_id=session_id)

    handle = StructuredLoggingHandle(
        logger=logger,
        session_id=session_id,
        log_path=log_path,
        log_queue=log_queue,
        queue_handler=queue_handler,
        file_handler=file_handler,
        listener=listener,
        drop_counter=drop_counter,
    )
    with _ACTIVE_HANDLE_LOCK:
        global _ACTIVE_HANDLE
        _ACTIVE_HANDLE = handle

    _register_atexit_shutdown()
    return handle


def configure_structlog() -> None:
    """Route structlog through stdlib logging so handlers decide where events go."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def ensure_structlog() -> None:
    """Configure structlog for library use unless the application already did.

    structlog's default configuration prints to stdout, which would corrupt
    the prompt line accounting.
    """

    if not structlog.is_configured():
        configure_structlog()


def shutdown_logging(
    handle: StructuredLoggingHandle | None = None,
    *,
    timeout_seconds: float = 2.0,
) -> None:
    """Stop the listener and close the session file."""

    resolved = handle if handle is not None else get_active_logging_handle()
    if resolved is None:
        return
    resolved.shutdown(timeout_seconds=timeout_seconds)
    structlog.contextvars.unbind_contextvars("session_id")

    with _ACTIVE_HANDLE_LOCK:
        global _ACTIVE_HANDLE
        if _ACTIVE_HANDLE is resolved:
            _ACTIVE_HANDLE = None


def get_active_logging_handle() -> StructuredLoggingHandle | None:
    with _ACTIVE_HANDLE_LOCK:
        return _ACTIVE_HANDLE


def new_session_id() -> str:
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{stamp}-{uuid.uuid4().hex[:8]}"


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
        ],
    )


def _shutdown_previous_active_handle() -> None:
    existing = get_active_logging_handle()
    if existing is not None:
        shutdown_logging(existing)


def _register_atexit_shutdown() -> None:
    global _ATEXIT_REGISTERED
    if _ATEXIT_REGISTERED:
        return
    atexit.register(shutdown_logging)
    _ATEXIT_REGISTERED = True


def _validate_non_empty(value: str, field: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{field} must not be empty")
    return normalized


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    parsed = logging.getLevelName(value.strip().upper())
    if not isinstance(parsed, int):
        raise ValueError(f"unknown log level {value!r}")
    return parsed


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
