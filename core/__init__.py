# Core module - Router lifecycle state and error taxonomy
# Shared by the command router, the validators and the CLI

from .state_machine import StateMachine, State, StateTransition
from .errors import (
    ErrorHandler, ErrorReport, ErrorCategory, classify_exception,
    RouterError, ScanError, ScanTimeoutError, PersistenceError, ConfigError,
)

__all__ = [
    "StateMachine", "State", "StateTransition",
    "ErrorHandler", "ErrorReport", "ErrorCategory", "classify_exception",
    "RouterError", "ScanError", "ScanTimeoutError", "PersistenceError", "ConfigError",
]
