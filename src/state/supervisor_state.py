"""Reconnect supervisor states."""

from __future__ import annotations

from enum import Enum


class SupervisorState(str, Enum):
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    CONNECTED = "connected"
    STOPPED = "stopped"


__all__ = ["SupervisorState"]
