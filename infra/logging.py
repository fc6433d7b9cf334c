"""
RL4 Centralized Logging
-----------------------
Structured logging with op_id propagation for traceable router operations.

Design:
- Every initialize/resolve/validate call can run inside an OperationContext
- op_id propagates through: Router -> Scanner -> Store
- Console output through Rich, file output as JSON lines
- Severity discipline: INFO=state, WARNING=recoverable, ERROR=abort

Logging is configured explicitly. Nothing is installed on import; callers
own the lifecycle through configure_logging() and shutdown_logging().

Usage:
    from infra.logging import configure_logging, get_logger, OperationContext

    configure_logging(level=logging.INFO, log_dir=".reasoning/logs")
    logger = get_logger("commands.router")

    with OperationContext() as op_id:
        logger.info("Resolving intent")
"""

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "rl4"

# Context variable for op_id - thread-safe and async-safe
_op_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "op_id", default=None
)


def generate_op_id() -> str:
    """Generate a unique operation ID."""
    return f"op_{uuid.uuid4().hex[:12]}"


def get_op_id() -> Optional[str]:
    """Get the current operation ID from context."""
    return _op_id_var.get()


def set_op_id(op_id: str) -> contextvars.Token:
    """Set the current operation ID in context."""
    return _op_id_var.set(op_id)


def reset_op_id(token: contextvars.Token) -> None:
    """Reset the operation ID to its previous value."""
    _op_id_var.reset(token)


class OperationContext:
    """
    Context manager for operation scoping.

    Usage:
        with OperationContext() as op_id:
            # All logs within this block carry op_id
            logger.info("Scanning...")
    """

    def __init__(self, op_id: Optional[str] = None):
        self._op_id = op_id or generate_op_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_op_id(self._op_id)
        return self._op_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            reset_op_id(self._token)
            self._token = None


class OperationIdFilter(logging.Filter):
    """Logging filter that adds op_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "op_id", None) is None:
            record.op_id = get_op_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with router fields lifted from `extra`."""

    EXTRA_FIELDS = (
        "intent", "matches", "registry_path", "total_commands",
        "stale", "file", "missing", "elapsed_ms",
    )

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "op_id": getattr(record, "op_id", "-"),
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key)) for key in self.EXTRA_FIELDS if hasattr(record, key)
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class JSONLinesFileHandler(RotatingFileHandler):
    """Size-rotated JSON-lines log file (rl4.log, rl4.log.1, ...)."""

    MAX_BYTES = 5 * 1024 * 1024
    BACKUP_COUNT = 3

    def __init__(
        self,
        path: Union[str, Path],
        max_bytes: int = MAX_BYTES,
        backup_count: int = BACKUP_COUNT,
    ):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            str(path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        self.setFormatter(JSONFormatter())


_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = True,
) -> None:
    """
    Install RL4 handlers on the 'rl4' logger. A second call is a no-op
    until shutdown_logging().

    Args:
        level: Console and logger level
        log_dir: Directory for rl4.log; no file output when None
        console: Rich output on stderr
        file: JSON-lines output into log_dir (DEBUG and up)
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized:
        return

    rl4_logger = logging.getLogger(ROOT_LOGGER_NAME)
    rl4_logger.handlers.clear()
    rl4_logger.propagate = False
    handlers: List[logging.Handler] = []

    if console:
        rich_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        rich_handler.setLevel(level)
        handlers.append(rich_handler)

    if file and log_dir:
        _log_file_path = Path(log_dir) / "rl4.log"
        file_handler = JSONLinesFileHandler(_log_file_path)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    op_filter = OperationIdFilter()
    for handler in handlers:
        handler.addFilter(op_filter)
        rl4_logger.addHandler(handler)

    # Logger level is the most verbose handler level
    rl4_logger.setLevel(min([level] + [h.level for h in handlers if h.level]))

    _logging_initialized = True


def shutdown_logging() -> None:
    """Flush and detach every handler installed by configure_logging()."""
    global _logging_initialized, _log_file_path

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True

    _logging_initialized = False
    _log_file_path = None


def get_log_file_path() -> Optional[Path]:
    """Path of the active JSON log file, if file logging is enabled."""
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger within the RL4 namespace.

    Args:
        name: Logger name (prefixed with 'rl4.' if not already)
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def with_operation_context(func: Callable) -> Callable:
    """
    Decorator to run a function inside a fresh OperationContext.

    An op_id already present in the context is reused.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        with OperationContext(get_op_id()):
            return func(*args, **kwargs)
    return wrapper
