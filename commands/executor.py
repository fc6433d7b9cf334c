"""
Command Executor
----------------
Turns a resolved command entry into an execution record.

The executor does not import or run workspace code. It checks that the
entry's source file exists, records the execution intent, and maps
intents to editor commands that the host can run itself.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from .intents import editor_command_for
from .registry import CommandEntry
from .scanner import DEFAULT_SOURCE_DIR


class ExecutionStatus(Enum):
    """Status of a command execution request."""
    SUCCESS = auto()
    FILE_NOT_FOUND = auto()
    EXECUTION_ERROR = auto()


@dataclass
class ExecutionResult:
    """Result of a command execution request."""
    status: ExecutionStatus
    message: str
    function: Optional[str] = None
    file: Optional[str] = None
    error: Optional[str] = None
    note: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def success(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.name,
            "message": self.message,
            "function": self.function,
            "file": self.file,
            "error": self.error,
            "note": self.note,
            "timestamp": self.timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"ExecutionResult({status} {self.function})"


class CommandExecutor:
    """
    Executes command entries found by the router.

    Only standalone modules could be run directly; for everything else the
    executor reports the command it found and the host decides what to do.
    """

    def __init__(
        self,
        workspace_root: Union[str, Path],
        source_dir: str = DEFAULT_SOURCE_DIR,
        logger: Optional[logging.Logger] = None,
    ):
        self.workspace_root = Path(workspace_root)
        self.source_dir = source_dir
        self._logger = logger or logging.getLogger("rl4.commands.executor")

    def execute_command(self, entry: CommandEntry) -> ExecutionResult:
        """Validate and record the execution of a command entry."""
        if not entry.file:
            return ExecutionResult(
                status=ExecutionStatus.EXECUTION_ERROR,
                function=entry.function,
                error="Entry has no source file",
                message=f"Cannot execute {entry.function}: no source file recorded",
            )

        full_path = self.workspace_root / self.source_dir / entry.file

        try:
            exists = full_path.is_file()
        except OSError as e:
            return ExecutionResult(
                status=ExecutionStatus.EXECUTION_ERROR,
                function=entry.function,
                file=entry.file,
                error=str(e),
                message=f"Error while executing {entry.function}: {e}",
            )

        if not exists:
            return ExecutionResult(
                status=ExecutionStatus.FILE_NOT_FOUND,
                function=entry.function,
                file=entry.file,
                error=f"File not found: {entry.file}",
                message=f"Cannot execute: file {entry.file} does not exist",
            )

        self._logger.info(
            f"Execution intent: {entry.function} in {entry.file}",
            extra={"file": entry.file},
        )

        return ExecutionResult(
            status=ExecutionStatus.SUCCESS,
            function=entry.function,
            file=entry.file,
            message=f"Command found: {entry.function} ({entry.file})",
            note="Direct execution is only available for standalone modules",
        )

    def map_intent_to_editor_command(self, intent: str) -> Optional[str]:
        """Editor command bound to an intent, or None."""
        return editor_command_for(intent)

    def format_result(self, result: ExecutionResult) -> str:
        """Format an execution result for display."""
        return result.message
