"""Load runtime settings.

Env var names and defaults live in `src/config/*`; this module resolves them at
call time into the structured dataclasses the rest of the server consumes, so
tests can monkeypatch the environment before building the app.
"""

from __future__ import annotations

import os

from src.config.secrets import ENV_RELAY_ADMIN_TOKENS
from src.config.ledger import (
    ENV_LEDGER_MAX_AGE_S,
    DEFAULT_LEDGER_MAX_AGE_S,
    ENV_LEDGER_SWEEP_INTERVAL_S,
    DEFAULT_LEDGER_SWEEP_INTERVAL_S,
)
from src.state.settings import (
    AppSettings,
    AuthSettings,
    LedgerSettings,
    LimitsSettings,
    WebSocketSettings,
)
from src.config.websocket import (
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    ENV_WS_OUTBOUND_QUEUE_MAX,
    DEFAULT_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_OUTBOUND_QUEUE_MAX,
)
from src.config.limits import (
    ENV_MAX_CAPTURE_PAYLOAD_BYTES,
    ENV_WS_CAPTURE_WINDOW_SECONDS,
    ENV_WS_MESSAGE_WINDOW_SECONDS,
    ENV_MAX_CONCURRENT_CONNECTIONS,
    ENV_WS_MAX_CAPTURES_PER_WINDOW,
    ENV_WS_MAX_MESSAGES_PER_WINDOW,
    DEFAULT_MAX_CAPTURE_PAYLOAD_BYTES,
    DEFAULT_WS_CAPTURE_WINDOW_SECONDS,
    DEFAULT_WS_MESSAGE_WINDOW_SECONDS,
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
    DEFAULT_WS_MAX_CAPTURES_PER_WINDOW,
    DEFAULT_WS_MAX_MESSAGES_PER_WINDOW,
)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _tokens_env(name: str) -> frozenset[str]:
    raw = os.getenv(name) or ""
    return frozenset(tok.strip() for tok in raw.split(",") if tok.strip())


def _load_auth_settings() -> AuthSettings:
    return AuthSettings(admin_tokens=_tokens_env(ENV_RELAY_ADMIN_TOKENS))


def _load_limits_settings() -> LimitsSettings:
    msg_window = _float_env(ENV_WS_MESSAGE_WINDOW_SECONDS, DEFAULT_WS_MESSAGE_WINDOW_SECONDS)
    capture_window = _float_env(ENV_WS_CAPTURE_WINDOW_SECONDS, DEFAULT_WS_CAPTURE_WINDOW_SECONDS)
    if capture_window <= 0:
        capture_window = msg_window

    return LimitsSettings(
        max_concurrent_connections=_int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS),
        ws_message_window_seconds=msg_window,
        ws_max_messages_per_window=_int_env(ENV_WS_MAX_MESSAGES_PER_WINDOW, DEFAULT_WS_MAX_MESSAGES_PER_WINDOW),
        ws_capture_window_seconds=capture_window,
        ws_max_captures_per_window=_int_env(ENV_WS_MAX_CAPTURES_PER_WINDOW, DEFAULT_WS_MAX_CAPTURES_PER_WINDOW),
        max_capture_payload_bytes=_int_env(ENV_MAX_CAPTURE_PAYLOAD_BYTES, DEFAULT_MAX_CAPTURE_PAYLOAD_BYTES),
    )


def _load_websocket_settings() -> WebSocketSettings:
    return WebSocketSettings(
        idle_timeout_s=_float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S),
        watchdog_tick_s=_float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S),
        outbound_queue_max=_int_env(ENV_WS_OUTBOUND_QUEUE_MAX, DEFAULT_WS_OUTBOUND_QUEUE_MAX),
    )


def _load_ledger_settings() -> LedgerSettings:
    return LedgerSettings(
        max_age_s=_float_env(ENV_LEDGER_MAX_AGE_S, DEFAULT_LEDGER_MAX_AGE_S),
        sweep_interval_s=_float_env(ENV_LEDGER_SWEEP_INTERVAL_S, DEFAULT_LEDGER_SWEEP_INTERVAL_S),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        auth=_load_auth_settings(),
        limits=_load_limits_settings(),
        websocket=_load_websocket_settings(),
        ledger=_load_ledger_settings(),
    )


__all__ = ["load_settings"]
