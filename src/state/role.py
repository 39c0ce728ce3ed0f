"""Connection roles."""

from __future__ import annotations

from enum import Enum

from src.config.websocket import WS_ROLE_ADMIN, WS_ROLE_CLIENT


class Role(str, Enum):
    UNKNOWN = "unknown"
    CLIENT = WS_ROLE_CLIENT
    ADMIN = WS_ROLE_ADMIN


__all__ = ["Role"]
