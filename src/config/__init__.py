"""Configuration module exports (env-resolved constants only)."""

from .websocket import WS_ENDPOINT_PATH
from .limits import DEFAULT_MAX_CONCURRENT_CONNECTIONS

__all__ = [
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "WS_ENDPOINT_PATH",
]
