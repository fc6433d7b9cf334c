"""
Error Handling Module
---------------------
Typed errors with classification and user-facing reporting.

Resolution never raises. Initialization failures are surfaced through
the exceptions below so callers can tell "no data to search" apart from
"the search found nothing".
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Deque, Dict, List, Optional
import asyncio
import logging
import traceback


class RouterError(Exception):
    """Base class for router failures surfaced to callers."""


class ScanError(RouterError):
    """The scanner could not enumerate or read source files."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ScanTimeoutError(ScanError):
    """Registry regeneration exceeded the configured time limit."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Registry regeneration timed out after {timeout_seconds:.1f}s")


class PersistenceError(RouterError):
    """The registry document could not be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ConfigError(RouterError):
    """A configuration value is missing or has the wrong type."""


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    SCAN_FAILURE = auto()         # Source tree could not be scanned
    PERSISTENCE_FAILURE = auto()  # Registry document could not be written
    TIMEOUT_ERROR = auto()        # Regeneration exceeded its time limit
    VALIDATION_ERROR = auto()     # Input validation failed
    CONFIG_ERROR = auto()         # Bad configuration
    SYSTEM_ERROR = auto()         # Internal system error


# Categories that mean the router cannot be fixed by simply retrying
_FATAL_CATEGORIES = frozenset({ErrorCategory.SYSTEM_ERROR, ErrorCategory.CONFIG_ERROR})


@dataclass
class ErrorReport:
    """A classified failure, ready to log and to show to a user."""
    category: ErrorCategory
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stack_trace: Optional[str] = None

    @property
    def recoverable(self) -> bool:
        return self.category not in _FATAL_CATEGORIES

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        category: ErrorCategory,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ErrorReport":
        trace = traceback.format_exception(type(exception), exception, exception.__traceback__)
        return cls(
            category=category,
            message=str(exception),
            details=dict(details or {}),
            stack_trace="".join(trace),
        )

    def __repr__(self) -> str:
        return f"ErrorReport({self.category.name}: {self.message})"


def classify_exception(exception: Exception) -> ErrorReport:
    """Convert any exception to a classified ErrorReport."""
    details: Dict[str, Any] = {"type": type(exception).__name__}

    if isinstance(exception, (ScanTimeoutError, asyncio.TimeoutError, TimeoutError)):
        category = ErrorCategory.TIMEOUT_ERROR
    elif isinstance(exception, ScanError):
        category = ErrorCategory.SCAN_FAILURE
        details["path"] = exception.path
    elif isinstance(exception, PersistenceError):
        category = ErrorCategory.PERSISTENCE_FAILURE
        details["path"] = exception.path
    elif isinstance(exception, ConfigError):
        category = ErrorCategory.CONFIG_ERROR
    elif isinstance(exception, ValueError):
        category = ErrorCategory.VALIDATION_ERROR
    else:
        category = ErrorCategory.SYSTEM_ERROR

    return ErrorReport.from_exception(exception, category, details)


LOG_LEVELS: Dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION_ERROR: logging.WARNING,
    ErrorCategory.SCAN_FAILURE: logging.ERROR,
    ErrorCategory.PERSISTENCE_FAILURE: logging.ERROR,
    ErrorCategory.TIMEOUT_ERROR: logging.ERROR,
    ErrorCategory.CONFIG_ERROR: logging.ERROR,
    ErrorCategory.SYSTEM_ERROR: logging.CRITICAL,
}


# {message} is the exception text
USER_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.SCAN_FAILURE: "Could not scan the workspace: {message}",
    ErrorCategory.PERSISTENCE_FAILURE: "Could not save the command registry: {message}",
    ErrorCategory.TIMEOUT_ERROR: "Building the command registry took too long.",
    ErrorCategory.VALIDATION_ERROR: "Invalid input: {message}",
    ErrorCategory.CONFIG_ERROR: "Configuration problem: {message}",
    ErrorCategory.SYSTEM_ERROR: "Something went wrong internally.",
}


class ErrorHandler:
    """
    Turns router failures into log records and user messages.

    Keeps the most recent reports for diagnostics.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_history: int = 100):
        self._logger = logger or logging.getLogger("rl4.errors")
        self._reports: Deque[ErrorReport] = deque(maxlen=max_history)

    def handle(self, report: ErrorReport) -> str:
        """Log and record a report; return the message for the user."""
        level = LOG_LEVELS.get(report.category, logging.ERROR)
        self._logger.log(
            level,
            f"{report.category.name}: {report.message}",
            extra={"details": report.details},
        )
        if level >= logging.ERROR and report.stack_trace:
            self._logger.debug(f"Stack trace:\n{report.stack_trace}")

        self._reports.append(report)
        return USER_MESSAGES[report.category].format(message=report.message)

    def handle_exception(self, exception: BaseException) -> str:
        return self.handle(classify_exception(exception))

    def get_error_stats(self) -> Dict[str, int]:
        """Report counts per category name."""
        return dict(Counter(report.category.name for report in self._reports))

    @property
    def history(self) -> List[ErrorReport]:
        return list(self._reports)

    def clear_history(self) -> None:
        self._reports.clear()
