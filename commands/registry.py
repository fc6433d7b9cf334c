"""
Command Registry
----------------
Immutable data model for the index of callable workspace commands.

A CommandRegistry is one generation of the index. It is built by a full
rescan (or loaded from disk) and replaced wholesale, never patched.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple


class EntryType(str, Enum):
    """How a command was declared in source."""
    FUNCTION = "function"   # export function name(...)
    ARROW = "arrow"         # export const name = (...) =>
    METHOD = "method"       # public method(...) inside an exported class


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a 'Z' suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601 timestamp. Naive values are taken as UTC.

    Raises:
        ValueError: If the text is not a valid ISO-8601 timestamp
    """
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"Invalid timestamp: {text!r}")

    value = text.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class CommandEntry:
    """
    One discoverable unit of workspace functionality.

    Only `function` and `description` take part in matching. The rest is
    carried for callers (executor, CLI) and is opaque to the router.
    """
    function: str
    description: Optional[str] = None
    file: Optional[str] = None
    type: Optional[EntryType] = None
    is_async: bool = False
    class_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.function, str) or not self.function:
            raise ValueError("CommandEntry.function must be a non-empty string")
        if self.type is not None and not isinstance(self.type, EntryType):
            object.__setattr__(self, "type", EntryType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted record shape (camelCase keys)."""
        data: Dict[str, Any] = {"function": self.function}
        if self.file is not None:
            data["file"] = self.file
        if self.type is not None:
            data["type"] = self.type.value
        data["async"] = self.is_async
        if self.class_name is not None:
            data["className"] = self.class_name
        if self.description is not None:
            data["description"] = self.description
        return data

    def __repr__(self) -> str:
        return f"CommandEntry(function={self.function}, file={self.file})"


@dataclass(frozen=True)
class CommandRegistry:
    """
    A timestamped snapshot of all discovered command entries.

    `total_commands` is the count recorded at creation time. It is kept
    as loaded and never re-derived from `commands`.
    """
    generated_at: str
    total_commands: int
    commands: Tuple[CommandEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.commands, tuple):
            object.__setattr__(self, "commands", tuple(self.commands))

    @classmethod
    def create(
        cls,
        entries: Iterable[CommandEntry],
        now: Optional[datetime] = None,
    ) -> "CommandRegistry":
        """Build a new generation from a full rescan."""
        commands = tuple(entries)
        moment = now or datetime.now(timezone.utc)
        return cls(
            generated_at=format_timestamp(moment),
            total_commands=len(commands),
            commands=commands,
        )

    @property
    def generated_at_datetime(self) -> datetime:
        """`generated_at` as an aware datetime. Raises ValueError if unparseable."""
        return parse_timestamp(self.generated_at)

    @property
    def is_empty(self) -> bool:
        return len(self.commands) == 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted document shape."""
        return {
            "generatedAt": self.generated_at,
            "totalCommands": self.total_commands,
            "commands": [entry.to_dict() for entry in self.commands],
        }

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[CommandEntry]:
        return iter(self.commands)

    def __repr__(self) -> str:
        return (
            f"CommandRegistry(generated_at={self.generated_at}, "
            f"total_commands={self.total_commands})"
        )
