"""Events that drive the reconnect supervisor."""

from __future__ import annotations

from enum import Enum


class SupervisorEvent(str, Enum):
    DIAL = "dial"
    OPENED = "opened"
    FAILED = "failed"
    LOST = "lost"
    STOP = "stop"


__all__ = ["SupervisorEvent"]
