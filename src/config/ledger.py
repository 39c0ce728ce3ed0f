"""Pending-request ledger configuration."""

from __future__ import annotations

ENV_LEDGER_MAX_AGE_S = "LEDGER_MAX_AGE_S"
ENV_LEDGER_SWEEP_INTERVAL_S = "LEDGER_SWEEP_INTERVAL_S"

# Requests are only reclaimed once they are this old AND their client is gone.
DEFAULT_LEDGER_MAX_AGE_S = 3600.0
DEFAULT_LEDGER_SWEEP_INTERVAL_S = 60.0

__all__ = [
    "ENV_LEDGER_MAX_AGE_S",
    "ENV_LEDGER_SWEEP_INTERVAL_S",
    "DEFAULT_LEDGER_MAX_AGE_S",
    "DEFAULT_LEDGER_SWEEP_INTERVAL_S",
]
