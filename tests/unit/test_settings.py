from __future__ import annotations

import pytest

from src.runtime.settings import load_settings
from src.config.limits import DEFAULT_MAX_CONCURRENT_CONNECTIONS


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RELAY_ADMIN_TOKENS", "MAX_CONCURRENT_CONNECTIONS", "WS_CAPTURE_WINDOW_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.auth.admin_tokens == frozenset()
    assert settings.limits.max_concurrent_connections == DEFAULT_MAX_CONCURRENT_CONNECTIONS
    assert settings.limits.max_capture_payload_bytes == 16 * 1024 * 1024
    assert settings.ledger.max_age_s == 3600.0


def test_load_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RELAY_ADMIN_TOKENS", "alpha, beta,,")
    monkeypatch.setenv("MAX_CONCURRENT_CONNECTIONS", "3")
    monkeypatch.setenv("WS_OUTBOUND_QUEUE_MAX", "not-a-number")
    monkeypatch.setenv("WS_MESSAGE_WINDOW_SECONDS", "30")
    monkeypatch.setenv("WS_CAPTURE_WINDOW_SECONDS", "0")

    settings = load_settings()

    assert settings.auth.admin_tokens == frozenset({"alpha", "beta"})
    assert settings.limits.max_concurrent_connections == 3
    assert settings.websocket.outbound_queue_max == 256
    assert settings.limits.ws_capture_window_seconds == 30.0
