from __future__ import annotations

import pytest

from src.errors import InvalidTransition
from src.client.state_machine import ReconnectStateMachine
from src.state.supervisor_state import SupervisorState
from src.state.supervisor_event import SupervisorEvent


def test_happy_path_transitions() -> None:
    fsm = ReconnectStateMachine(base_delay_s=5.0)
    assert fsm.state is SupervisorState.DISCONNECTED
    assert fsm.fire(SupervisorEvent.DIAL) is SupervisorState.RECONNECTING
    assert fsm.fire(SupervisorEvent.OPENED) is SupervisorState.CONNECTED
    assert fsm.fire(SupervisorEvent.LOST) is SupervisorState.DISCONNECTED
    assert fsm.fire(SupervisorEvent.STOP) is SupervisorState.STOPPED
    assert fsm.fire(SupervisorEvent.STOP) is SupervisorState.STOPPED


@pytest.mark.parametrize(
    "events",
    [
        [SupervisorEvent.OPENED],
        [SupervisorEvent.LOST],
        [SupervisorEvent.DIAL, SupervisorEvent.DIAL],
        [SupervisorEvent.DIAL, SupervisorEvent.LOST],
        [SupervisorEvent.STOP, SupervisorEvent.DIAL],
    ],
)
def test_invalid_transitions_raise(events: list[SupervisorEvent]) -> None:
    fsm = ReconnectStateMachine()
    with pytest.raises(InvalidTransition):
        for event in events:
            fsm.fire(event)


def test_default_factor_gives_fixed_delay() -> None:
    fsm = ReconnectStateMachine(base_delay_s=5.0, max_delay_s=60.0, factor=1.0)
    delays = []
    for _ in range(4):
        fsm.fire(SupervisorEvent.DIAL)
        fsm.fire(SupervisorEvent.FAILED)
        delays.append(fsm.next_delay())
    assert delays == [5.0, 5.0, 5.0, 5.0]


def test_exponential_backoff_is_capped_and_resets_on_open() -> None:
    fsm = ReconnectStateMachine(base_delay_s=1.0, max_delay_s=5.0, factor=2.0)
    delays = []
    for _ in range(5):
        fsm.fire(SupervisorEvent.DIAL)
        fsm.fire(SupervisorEvent.FAILED)
        delays.append(fsm.next_delay())
    assert delays == [1.0, 2.0, 4.0, 5.0, 5.0]

    fsm.fire(SupervisorEvent.DIAL)
    fsm.fire(SupervisorEvent.OPENED)
    assert fsm.attempt == 0
    fsm.fire(SupervisorEvent.LOST)
    assert fsm.next_delay() == 1.0
