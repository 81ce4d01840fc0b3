from __future__ import annotations

from enum import Enum
from threading import Lock

from .errors import InvalidTransition
from .log import get_logger

log = get_logger(__name__)


class ServiceState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    SERVING = "SERVING"
    DRAINING = "DRAINING"
    STOPPED = "STOPPED"


_TRANSITIONS: dict[ServiceState, frozenset[ServiceState]] = {
    ServiceState.UNINITIALIZED: frozenset({ServiceState.SERVING, ServiceState.STOPPED}),
    ServiceState.SERVING: frozenset({ServiceState.DRAINING}),
    ServiceState.DRAINING: frozenset({ServiceState.STOPPED}),
    ServiceState.STOPPED: frozenset(),
}


class Lifecycle:
    """Service state machine: UNINITIALIZED -> SERVING -> DRAINING -> STOPPED."""

    def __init__(self) -> None:
        self.lock = Lock()
        self._state = ServiceState.UNINITIALIZED

    @property
    def state(self) -> ServiceState:
        with self.lock:
            return self._state

    @property
    def serving(self) -> bool:
        return self.state is ServiceState.SERVING

    def transition(self, target: ServiceState) -> ServiceState:
        """Move to ``target``. Returns the previous state."""
        with self.lock:
            prev = self._state
            if target not in _TRANSITIONS[prev]:
                raise InvalidTransition(f"Cannot move from {prev.value} to {target.value}")
            self._state = target
        log.info("Service state changed", previous=prev.value, state=target.value)
        return prev

    def start_serving(self) -> None:
        self.transition(ServiceState.SERVING)

    def drain(self) -> None:
        self.transition(ServiceState.DRAINING)

    def stop(self) -> None:
        """Stop from any live state; stopping twice is a no-op."""
        state = self.state
        if state is ServiceState.STOPPED:
            return
        if state is ServiceState.SERVING:
            self.drain()
        self.transition(ServiceState.STOPPED)
