"""Rate limiting utilities for WebSocket frame handling."""

from __future__ import annotations

import math

from src.relay.router import Router
from src.errors import RateLimitError
from src.handlers.limits import SlidingWindowRateLimiter
from src.config.websocket import WS_TYPE_PING, WS_TYPE_PONG, WS_TYPE_CAPTURE, WS_ERROR_RATE_LIMITED


def select_rate_limiter(
    msg_type: str,
    message_limiter: SlidingWindowRateLimiter,
    capture_limiter: SlidingWindowRateLimiter,
) -> SlidingWindowRateLimiter | None:
    if msg_type == WS_TYPE_CAPTURE:
        return capture_limiter
    if msg_type in {WS_TYPE_PING, WS_TYPE_PONG}:
        return None
    return message_limiter


def consume_limiter(router: Router, connection_id: str, limiter: SlidingWindowRateLimiter) -> bool:
    try:
        limiter.consume()
    except RateLimitError as exc:
        retry_in_s = int(max(1, math.ceil(float(exc.retry_in)))) if exc.retry_in else 1
        router.send_error(
            connection_id,
            WS_ERROR_RATE_LIMITED,
            f"{limiter.label} rate limit: at most {limiter.limit} per {int(limiter.window_seconds)} seconds; "
            f"retry in {retry_in_s} seconds",
            retryIn=retry_in_s,
            limit=limiter.limit,
            windowSeconds=int(limiter.window_seconds),
            kind=limiter.label,
        )
        return False
    return True


__all__ = ["consume_limiter", "select_rate_limiter"]
