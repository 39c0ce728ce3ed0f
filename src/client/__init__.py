"""Reconnecting relay client used by capture clients and admin consoles."""

from src.state.supervisor_state import SupervisorState
from src.state.supervisor_event import SupervisorEvent

from .supervisor import ReconnectSupervisor
from .state_machine import ReconnectStateMachine
from .frames import new_client_session_id, build_admin_handshake, build_client_handshake

__all__ = [
    "ReconnectStateMachine",
    "ReconnectSupervisor",
    "SupervisorEvent",
    "SupervisorState",
    "build_admin_handshake",
    "build_client_handshake",
    "new_client_session_id",
]
