"""Secrets and authentication configuration."""

from __future__ import annotations

ENV_RELAY_ADMIN_TOKENS = "RELAY_ADMIN_TOKENS"

__all__ = ["ENV_RELAY_ADMIN_TOKENS"]
