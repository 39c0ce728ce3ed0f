from __future__ import annotations

from typing import Any

import pytest

from src.errors import RateLimitError
from src.handlers.limits import SlidingWindowRateLimiter
from src.handlers.websocket.limits import consume_limiter, select_rate_limiter


class _Clock:
    def __init__(self) -> None:
        self.t = 0.0

    def __call__(self) -> float:
        return self.t


class _ErrorSink:
    def __init__(self) -> None:
        self.errors: list[tuple[str, str, str, dict[str, Any]]] = []

    def send_error(self, connection_id: str, reason: str, message: str, **details: Any) -> bool:
        self.errors.append((connection_id, reason, message, details))
        return True


def test_rate_limiter_rejects_when_saturated() -> None:
    clock = _Clock()
    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=10, now_fn=clock)
    limiter.consume()
    clock.t = 4.0
    limiter.consume()

    with pytest.raises(RateLimitError) as exc:
        limiter.consume()
    assert exc.value.limit == 2
    assert exc.value.window_seconds == 10
    assert exc.value.retry_in == pytest.approx(6.0)


def test_rate_limiter_window_slides() -> None:
    clock = _Clock()
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=5, now_fn=clock)
    limiter.consume()
    clock.t = 4.9
    with pytest.raises(RateLimitError):
        limiter.consume()
    clock.t = 5.0
    limiter.consume()
    with pytest.raises(RateLimitError):
        limiter.consume()


def test_rate_limiter_disabled_when_limit_is_zero() -> None:
    limiter = SlidingWindowRateLimiter(limit=0, window_seconds=10)
    for _ in range(100):
        limiter.consume()


def test_rate_limiter_disabled_when_window_is_zero() -> None:
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=0)
    for _ in range(100):
        limiter.consume()


def test_select_rate_limiter_by_frame_type() -> None:
    messages = SlidingWindowRateLimiter(limit=1, window_seconds=1)
    captures = SlidingWindowRateLimiter(limit=1, window_seconds=1, label="capture")
    assert select_rate_limiter("capture", messages, captures) is captures
    assert select_rate_limiter("answer", messages, captures) is messages
    assert select_rate_limiter("handshake", messages, captures) is messages
    assert select_rate_limiter("ping", messages, captures) is None
    assert select_rate_limiter("pong", messages, captures) is None


def test_consume_limiter_reports_rate_limited_error() -> None:
    clock = _Clock()
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60, label="capture", now_fn=clock)
    sink = _ErrorSink()

    assert consume_limiter(sink, "conn-1", limiter) is True
    clock.t = 0.5
    assert consume_limiter(sink, "conn-1", limiter) is False

    ((cid, reason, message, details),) = sink.errors
    assert cid == "conn-1"
    assert reason == "rate_limited"
    assert "capture" in message
    assert details["retryIn"] == 60
    assert details["kind"] == "capture"
