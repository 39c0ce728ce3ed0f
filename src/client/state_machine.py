"""Explicit reconnect state machine with backoff bookkeeping."""

from __future__ import annotations

import logging

from src.errors import InvalidTransition
from src.state.supervisor_state import SupervisorState
from src.state.supervisor_event import SupervisorEvent
from src.config.reconnect import (
    RELAY_CLIENT_BACKOFF_FACTOR,
    RELAY_CLIENT_RECONNECT_DELAY_S,
    RELAY_CLIENT_RECONNECT_MAX_DELAY_S,
)

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[tuple[SupervisorState, SupervisorEvent], SupervisorState] = {
    (SupervisorState.DISCONNECTED, SupervisorEvent.DIAL): SupervisorState.RECONNECTING,
    (SupervisorState.RECONNECTING, SupervisorEvent.OPENED): SupervisorState.CONNECTED,
    (SupervisorState.RECONNECTING, SupervisorEvent.FAILED): SupervisorState.DISCONNECTED,
    (SupervisorState.CONNECTED, SupervisorEvent.LOST): SupervisorState.DISCONNECTED,
    (SupervisorState.DISCONNECTED, SupervisorEvent.STOP): SupervisorState.STOPPED,
    (SupervisorState.RECONNECTING, SupervisorEvent.STOP): SupervisorState.STOPPED,
    (SupervisorState.CONNECTED, SupervisorEvent.STOP): SupervisorState.STOPPED,
    (SupervisorState.STOPPED, SupervisorEvent.STOP): SupervisorState.STOPPED,
}


class ReconnectStateMachine:
    """Track connection state and the delay before the next dial.

    `attempt` counts dials since the last successful open. The delay after a
    failed or lost connection is `base * factor ** (attempt - 1)`, capped at
    `max_delay_s`; with factor 1.0 every retry waits exactly `base_delay_s`.
    """

    def __init__(
        self,
        *,
        base_delay_s: float = RELAY_CLIENT_RECONNECT_DELAY_S,
        max_delay_s: float = RELAY_CLIENT_RECONNECT_MAX_DELAY_S,
        factor: float = RELAY_CLIENT_BACKOFF_FACTOR,
    ) -> None:
        self._base_delay_s = max(0.0, float(base_delay_s))
        self._max_delay_s = max(self._base_delay_s, float(max_delay_s))
        self._factor = max(1.0, float(factor))
        self._state = SupervisorState.DISCONNECTED
        self._attempt = 0

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def attempt(self) -> int:
        return self._attempt

    def fire(self, event: SupervisorEvent) -> SupervisorState:
        target = _TRANSITIONS.get((self._state, event))
        if target is None:
            raise InvalidTransition(f"cannot apply '{event.value}' in state '{self._state.value}'")

        if event is SupervisorEvent.DIAL:
            self._attempt += 1
        elif event is SupervisorEvent.OPENED:
            self._attempt = 0

        if target is not self._state:
            logger.debug("reconnect state %s -> %s on %s", self._state.value, target.value, event.value)
        self._state = target
        return target

    def next_delay(self) -> float:
        exponent = max(0, self._attempt - 1)
        return min(self._max_delay_s, self._base_delay_s * (self._factor**exponent))


__all__ = ["ReconnectStateMachine"]
