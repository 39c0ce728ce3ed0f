from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Host-level relay config must not leak into tests that build settings from the environment.
_RELAY_ENV_VARS = (
    "RELAY_ADMIN_TOKENS",
    "MAX_CONCURRENT_CONNECTIONS",
    "WS_IDLE_TIMEOUT_S",
    "WS_WATCHDOG_TICK_S",
    "WS_OUTBOUND_QUEUE_MAX",
    "MAX_CAPTURE_PAYLOAD_BYTES",
    "LEDGER_MAX_AGE_S",
    "LEDGER_SWEEP_INTERVAL_S",
)


def pytest_configure() -> None:
    # Keep `import src...` working when running `pytest` from the repo root.
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


@pytest.fixture(autouse=True)
def _isolated_relay_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
