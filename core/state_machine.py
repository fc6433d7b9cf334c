"""
State Machine
-------------
Router lifecycle with validated, logged transitions.

    UNINITIALIZED --initialize()--> READY --initialize()/refresh()--> READY

Each READY entry records which registry generation was adopted. There is
no way back to UNINITIALIZED.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple
import logging


class State(Enum):
    """Lifecycle states of an IntentRouter."""
    UNINITIALIZED = auto()  # No in-memory registry
    READY = auto()          # A trusted registry is loaded


VALID_TRANSITIONS: Dict[State, FrozenSet[State]] = {
    State.UNINITIALIZED: frozenset({State.READY}),
    State.READY: frozenset({State.READY}),
}


@dataclass(frozen=True)
class StateTransition:
    """One adopted registry generation."""
    from_state: State
    to_state: State
    reason: str
    timestamp: datetime
    total_commands: Optional[int] = None

    def __str__(self) -> str:
        count = "-" if self.total_commands is None else str(self.total_commands)
        return (
            f"{self.timestamp:%H:%M:%S} {self.from_state.name} -> {self.to_state.name} "
            f"[{count} commands] {self.reason}"
        )


Listener = Callable[[StateTransition], None]


class StateMachine:
    """
    Lifecycle tracker owned by one router.

    Responsibilities:
    - Reject transitions not in VALID_TRANSITIONS
    - Keep an ordered record of adopted generations
    - Notify subscribers after each transition
    """

    def __init__(
        self,
        initial_state: State = State.UNINITIALIZED,
        logger: Optional[logging.Logger] = None,
    ):
        self._state = initial_state
        self._transitions: List[StateTransition] = []
        self._subscribers: List[Listener] = []
        self._logger = logger or logging.getLogger("rl4.state")

    @property
    def state(self) -> State:
        return self._state

    @property
    def history(self) -> Tuple[StateTransition, ...]:
        return tuple(self._transitions)

    def can_transition(self, to_state: State) -> bool:
        return to_state in VALID_TRANSITIONS.get(self._state, frozenset())

    def transition(
        self,
        to_state: State,
        reason: str,
        total_commands: Optional[int] = None,
    ) -> StateTransition:
        """
        Move to `to_state` and record why.

        Raises:
            ValueError: If the lifecycle does not allow the move
        """
        if not self.can_transition(to_state):
            allowed = sorted(s.name for s in VALID_TRANSITIONS.get(self._state, frozenset()))
            raise ValueError(
                f"Invalid transition: {self._state.name} -> {to_state.name}. "
                f"Valid targets: {allowed}"
            )

        record = StateTransition(
            from_state=self._state,
            to_state=to_state,
            reason=reason,
            timestamp=datetime.now(timezone.utc),
            total_commands=total_commands,
        )
        self._state = to_state
        self._transitions.append(record)
        self._logger.info(f"Router {to_state.name.lower()} ({reason})")

        for subscriber in list(self._subscribers):
            try:
                subscriber(record)
            except Exception as e:
                self._logger.warning(f"Lifecycle subscriber failed: {e}")

        return record

    def subscribe(self, callback: Listener) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Listener) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def describe(self, limit: int = 10) -> str:
        """Recent transitions, one per line."""
        if not self._transitions:
            return "Router never initialized."
        return "\n".join(str(t) for t in self._transitions[-limit:])
