"""Client-side reconnect defaults (env-resolved constants only)."""

from __future__ import annotations

import os

from src.config.websocket import WS_CLOSE_UNAUTHORIZED_CODE


def _get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except Exception:
        return float(default)


def _get_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except Exception:
        return int(default)


# Fixed 5s retry unless a backoff factor above 1 is configured.
RELAY_CLIENT_RECONNECT_DELAY_S: float = max(0.0, _get_float("RELAY_CLIENT_RECONNECT_DELAY_S", 5.0))
RELAY_CLIENT_RECONNECT_MAX_DELAY_S: float = max(
    RELAY_CLIENT_RECONNECT_DELAY_S, _get_float("RELAY_CLIENT_RECONNECT_MAX_DELAY_S", 60.0)
)
RELAY_CLIENT_BACKOFF_FACTOR: float = max(1.0, _get_float("RELAY_CLIENT_BACKOFF_FACTOR", 1.0))

# Frames produced while disconnected; beyond this they are dropped.
RELAY_CLIENT_QUEUE_MAX: int = max(0, _get_int("RELAY_CLIENT_QUEUE_MAX", 8))

# Application-level ping keeps the server idle watchdog satisfied. 0 disables.
RELAY_CLIENT_PING_INTERVAL_S: float = max(0.0, _get_float("RELAY_CLIENT_PING_INTERVAL_S", 30.0))

# Disable protocol-level ping/pong; liveness is driven by application pings.
RELAY_CLIENT_WS_PING_INTERVAL_S: float | None = None
RELAY_CLIENT_WS_PING_TIMEOUT_S: float | None = None

RELAY_CLIENT_MAX_MESSAGE_BYTES: int = 32 * 1024 * 1024

# Server closes that redialing cannot fix; the supervisor stops instead.
RELAY_CLIENT_TERMINAL_CLOSE_CODES: frozenset[int] = frozenset({WS_CLOSE_UNAUTHORIZED_CODE})

__all__ = [
    "RELAY_CLIENT_BACKOFF_FACTOR",
    "RELAY_CLIENT_MAX_MESSAGE_BYTES",
    "RELAY_CLIENT_PING_INTERVAL_S",
    "RELAY_CLIENT_QUEUE_MAX",
    "RELAY_CLIENT_RECONNECT_DELAY_S",
    "RELAY_CLIENT_RECONNECT_MAX_DELAY_S",
    "RELAY_CLIENT_TERMINAL_CLOSE_CODES",
    "RELAY_CLIENT_WS_PING_INTERVAL_S",
    "RELAY_CLIENT_WS_PING_TIMEOUT_S",
]
