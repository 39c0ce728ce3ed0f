"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AuthSettings:
    admin_tokens: frozenset[str]


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int
    ws_message_window_seconds: float
    ws_max_messages_per_window: int
    ws_capture_window_seconds: float
    ws_max_captures_per_window: int
    max_capture_payload_bytes: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float
    watchdog_tick_s: float
    outbound_queue_max: int


@dataclass(frozen=True, slots=True)
class LedgerSettings:
    max_age_s: float
    sweep_interval_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    auth: AuthSettings
    limits: LimitsSettings
    websocket: WebSocketSettings
    ledger: LedgerSettings


__all__ = [
    "AppSettings",
    "AuthSettings",
    "LedgerSettings",
    "LimitsSettings",
    "WebSocketSettings",
]
