"""
Registry Store
--------------
Durable JSON persistence for the command registry.

Rules:
- load() never raises: a missing, unreadable or malformed document is
  reported as absent so the router regenerates it
- save() is atomic: write to a temp file in the same directory, fsync,
  then os.replace() over the target
- write failures raise PersistenceError
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union
import asyncio
import json
import logging
import os
import tempfile

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import PersistenceError
from .registry import CommandEntry, CommandRegistry, EntryType


class CommandRecord(BaseModel):
    """Schema of one persisted command."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    function: str = Field(min_length=1)
    file: Optional[str] = None
    type: Optional[EntryType] = None
    is_async: bool = Field(default=False, alias="async")
    class_name: Optional[str] = Field(default=None, alias="className")
    description: Optional[str] = None

    def to_entry(self) -> CommandEntry:
        return CommandEntry(
            function=self.function,
            description=self.description,
            file=self.file,
            type=self.type,
            is_async=self.is_async,
            class_name=self.class_name,
        )


class RegistryDocument(BaseModel):
    """Schema of the persisted registry document."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    generated_at: str = Field(alias="generatedAt")
    total_commands: int = Field(alias="totalCommands", ge=0)
    commands: List[CommandRecord] = Field(default_factory=list)

    @field_validator("generated_at")
    @classmethod
    def _timestamp_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("generatedAt must not be empty")
        return value

    def to_registry(self) -> CommandRegistry:
        return CommandRegistry(
            generated_at=self.generated_at,
            total_commands=self.total_commands,
            commands=tuple(record.to_entry() for record in self.commands),
        )


class RegistryStore:
    """
    Persistent registry storage.

    The store owns the durable copy. The router owns the in-memory one.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("rl4.commands.store")

    def load(self, path: Union[str, Path]) -> Optional[CommandRegistry]:
        """Load a registry, or None if it is missing or unusable."""
        path = Path(path)

        if not path.exists():
            self._logger.debug(f"No registry at {path}")
            return None

        try:
            raw = path.read_text(encoding="utf-8")
            document = RegistryDocument.model_validate(json.loads(raw))
        except (OSError, UnicodeDecodeError) as e:
            self._logger.warning(f"Cannot read registry {path}: {e}")
            return None
        except json.JSONDecodeError as e:
            self._logger.warning(f"Corrupt registry {path}: {e}")
            return None
        except ValidationError as e:
            self._logger.warning(
                f"Registry {path} does not match schema ({e.error_count()} errors)"
            )
            return None

        registry = document.to_registry()
        self._logger.info(
            f"Loaded registry with {len(registry)} commands from {path}",
            extra={"registry_path": str(path), "total_commands": registry.total_commands},
        )
        return registry

    async def save(
        self,
        entries: Sequence[CommandEntry],
        path: Union[str, Path],
    ) -> CommandRegistry:
        """Build a registry stamped now and persist it atomically."""
        registry = CommandRegistry.create(entries)
        await asyncio.to_thread(self.write, registry, path)
        return registry

    def write(self, registry: CommandRegistry, path: Union[str, Path]) -> None:
        """
        Atomically write an existing registry.

        Raises:
            PersistenceError: If the document cannot be written
        """
        path = Path(path)
        payload = json.dumps(registry.to_dict(), indent=2, ensure_ascii=False)

        tmp_name: Optional[str] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise PersistenceError(f"Cannot write registry {path}: {e}", path=str(path)) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass

        self._logger.info(
            f"Saved registry with {registry.total_commands} commands to {path}",
            extra={"registry_path": str(path), "total_commands": registry.total_commands},
        )
