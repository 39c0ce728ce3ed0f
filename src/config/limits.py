"""Admission control, rate limit and payload bound configuration."""

from __future__ import annotations

ENV_MAX_CONCURRENT_CONNECTIONS = "MAX_CONCURRENT_CONNECTIONS"
ENV_WS_MESSAGE_WINDOW_SECONDS = "WS_MESSAGE_WINDOW_SECONDS"
ENV_WS_MAX_MESSAGES_PER_WINDOW = "WS_MAX_MESSAGES_PER_WINDOW"
ENV_WS_CAPTURE_WINDOW_SECONDS = "WS_CAPTURE_WINDOW_SECONDS"
ENV_WS_MAX_CAPTURES_PER_WINDOW = "WS_MAX_CAPTURES_PER_WINDOW"
ENV_MAX_CAPTURE_PAYLOAD_BYTES = "MAX_CAPTURE_PAYLOAD_BYTES"

DEFAULT_MAX_CONCURRENT_CONNECTIONS = 500

# Admins poll stats and answer in bursts; clients mostly ping.
DEFAULT_WS_MESSAGE_WINDOW_SECONDS = 60.0
DEFAULT_WS_MAX_MESSAGES_PER_WINDOW = 600

# A capture is a full-page PNG data URL, so keep the per-connection rate low.
DEFAULT_WS_CAPTURE_WINDOW_SECONDS = 60.0
DEFAULT_WS_MAX_CAPTURES_PER_WINDOW = 30

DEFAULT_MAX_CAPTURE_PAYLOAD_BYTES = 16 * 1024 * 1024

__all__ = [
    "ENV_MAX_CONCURRENT_CONNECTIONS",
    "ENV_WS_MESSAGE_WINDOW_SECONDS",
    "ENV_WS_MAX_MESSAGES_PER_WINDOW",
    "ENV_WS_CAPTURE_WINDOW_SECONDS",
    "ENV_WS_MAX_CAPTURES_PER_WINDOW",
    "ENV_MAX_CAPTURE_PAYLOAD_BYTES",
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "DEFAULT_WS_MESSAGE_WINDOW_SECONDS",
    "DEFAULT_WS_MAX_MESSAGES_PER_WINDOW",
    "DEFAULT_WS_CAPTURE_WINDOW_SECONDS",
    "DEFAULT_WS_MAX_CAPTURES_PER_WINDOW",
    "DEFAULT_MAX_CAPTURE_PAYLOAD_BYTES",
]
