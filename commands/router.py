"""
Intent Router
-------------
Maps intents to functions that already exist in the workspace.

Lifecycle:
    router = IntentRouter(workspace_root)
    await router.initialize()          # load, or rebuild if stale
    router.find_commands("analyze", "scan the codebase")

initialize() is the only operation that suspends. find_commands() is
pure, never raises, and returns [] before the first initialize().

The in-memory registry is an immutable value. A rebuild builds and
persists the new generation first, then swaps the reference, so readers
see either the old or the new registry, never a mix.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union
import asyncio
import logging
import time

from core.errors import PersistenceError, ScanError, ScanTimeoutError
from core.state_machine import State, StateMachine
from infra.config import RouterConfig
from infra.logging import OperationContext, get_op_id
from .registry import CommandEntry, CommandRegistry
from .resolver import rank_commands
from .scanner import CodeScanner
from .staleness import FRESHNESS_WINDOW, is_registry_stale
from .store import RegistryStore

DEFAULT_REGISTRY_PATH = Path(".reasoning") / "commands.json"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IntentRouter:
    """
    Registry lifecycle manager and intent resolver.

    Responsibilities:
    - Load the persisted registry, rebuild it when missing or stale
    - Hold the current registry generation in memory
    - Rank registry entries against an intent

    Forbidden:
    - Mutating a registry in place
    - Swallowing scanner or store write failures
    """

    def __init__(
        self,
        workspace_root: Union[str, Path],
        scanner: Optional[CodeScanner] = None,
        store: Optional[RegistryStore] = None,
        registry_path: Union[str, Path, None] = None,
        max_age: timedelta = FRESHNESS_WINDOW,
        scan_timeout_seconds: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.workspace_root = Path(workspace_root)
        self._logger = logger or logging.getLogger("rl4.commands.router")
        self._scanner = scanner or CodeScanner(logger=self._logger.getChild("scanner"))
        self._store = store or RegistryStore(logger=self._logger.getChild("store"))

        path = Path(registry_path) if registry_path else DEFAULT_REGISTRY_PATH
        self.registry_path = path if path.is_absolute() else self.workspace_root / path

        self._max_age = max_age
        self._scan_timeout = scan_timeout_seconds
        self._clock = clock
        self._state_machine = StateMachine(logger=self._logger.getChild("state"))
        self._registry: Optional[CommandRegistry] = None

    @classmethod
    def from_config(
        cls,
        workspace_root: Union[str, Path],
        config: RouterConfig,
        logger: Optional[logging.Logger] = None,
    ) -> "IntentRouter":
        """Build a router from a RouterConfig."""
        logger = logger or logging.getLogger("rl4.commands.router")
        return cls(
            workspace_root,
            scanner=CodeScanner(source_dir=config.source_dir, logger=logger.getChild("scanner")),
            registry_path=config.registry_path,
            max_age=timedelta(hours=config.max_age_hours),
            scan_timeout_seconds=config.scan_timeout_seconds,
            logger=logger,
        )

    @property
    def state(self) -> State:
        return self._state_machine.state

    @property
    def is_ready(self) -> bool:
        return self._state_machine.state is State.READY

    @property
    def registry(self) -> Optional[CommandRegistry]:
        """The current in-memory registry generation."""
        return self._registry

    @property
    def history(self):
        return self._state_machine.history

    async def initialize(self) -> None:
        """
        Load the persisted registry, rebuilding it if absent or stale.

        Raises:
            ScanError: The scanner failed (nothing is adopted)
            PersistenceError: The new registry could not be saved
        """
        with OperationContext(get_op_id()):
            loaded = await asyncio.to_thread(self._store.load, self.registry_path)

            if is_registry_stale(loaded, now=self._clock(), max_age=self._max_age):
                reason = "registry missing" if loaded is None else "registry stale"
                self._logger.info(
                    f"Regenerating command registry ({reason})",
                    extra={"registry_path": str(self.registry_path), "stale": True},
                )
                registry = await self._regenerate()
            else:
                reason = "registry loaded"
                registry = loaded

            self._adopt(registry, reason)

    async def refresh(self) -> None:
        """Rebuild the registry regardless of its age."""
        with OperationContext(get_op_id()):
            registry = await self._regenerate()
            self._adopt(registry, "registry rebuilt on request")

    async def _regenerate(self) -> CommandRegistry:
        if self._scan_timeout is None:
            return await self._build()

        try:
            return await asyncio.wait_for(self._build(), timeout=self._scan_timeout)
        except asyncio.TimeoutError as e:
            raise ScanTimeoutError(self._scan_timeout) from e

    async def _build(self) -> CommandRegistry:
        started = time.perf_counter()

        try:
            entries = await self._scanner.scan(self.workspace_root)
        except ScanError:
            raise
        except OSError as e:
            raise ScanError(f"Scan failed: {e}", path=str(self.workspace_root)) from e

        try:
            registry = await self._store.save(entries, self.registry_path)
        except PersistenceError:
            raise
        except OSError as e:
            raise PersistenceError(
                f"Cannot persist registry: {e}", path=str(self.registry_path)
            ) from e

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._logger.info(
            f"Registry generated: {registry.total_commands} commands in {elapsed_ms:.0f}ms",
            extra={"total_commands": registry.total_commands, "elapsed_ms": elapsed_ms},
        )
        return registry

    def _adopt(self, registry: CommandRegistry, reason: str) -> None:
        # Single reference assignment; the registry is already complete
        self._registry = registry
        self._state_machine.transition(State.READY, reason, total_commands=registry.total_commands)

    def find_commands(self, intent: str, input_text: Optional[str] = None) -> List[CommandEntry]:
        """
        Commands matching an intent, best first.

        Returns [] when no registry is loaded or the intent is not a string.
        An unknown label, including "", is matched as its own keyword.
        """
        registry = self._registry
        if registry is None:
            self._logger.debug("find_commands called before initialize()")
            return []

        if not isinstance(intent, str):
            return []

        if input_text is not None and not isinstance(input_text, str):
            input_text = str(input_text)

        matches = rank_commands(registry.commands, intent, input_text)
        self._logger.debug(
            f"Intent '{intent}' matched {len(matches)} commands",
            extra={"intent": intent, "matches": len(matches)},
        )
        return matches

    def get_all_commands(self) -> List[CommandEntry]:
        """All commands of the current registry (for help/debugging)."""
        registry = self._registry
        return list(registry.commands) if registry is not None else []
