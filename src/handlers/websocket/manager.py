"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib
from functools import partial

from fastapi import WebSocket

from src.state.runtime import RuntimeDeps
from src.relay.channel import Channel
from src.handlers.limits import SlidingWindowRateLimiter
from src.config.websocket import WS_CLOSE_BUSY_CODE, WS_CLOSE_NORMAL_CODE, WS_ERROR_SERVER_AT_CAPACITY

from .errors import reject_connection
from .lifecycle import WebSocketLifecycle
from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


def _create_rate_limiters(runtime_deps: RuntimeDeps) -> tuple[SlidingWindowRateLimiter, SlidingWindowRateLimiter]:
    limits = runtime_deps.settings.limits
    message_limiter = SlidingWindowRateLimiter(
        limit=limits.ws_max_messages_per_window,
        window_seconds=limits.ws_message_window_seconds,
        label="message",
    )
    capture_limiter = SlidingWindowRateLimiter(
        limit=limits.ws_max_captures_per_window,
        window_seconds=limits.ws_capture_window_seconds,
        label="capture",
    )
    return message_limiter, capture_limiter


async def _prepare_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> bool:
    if not await runtime_deps.connections.connect(ws):
        await reject_connection(
            ws,
            reason=WS_ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return False

    try:
        await ws.accept()
    except Exception:
        with contextlib.suppress(Exception):
            await runtime_deps.connections.disconnect(ws)
        raise
    return True


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    if not await _prepare_connection(ws, runtime_deps):
        return

    router = runtime_deps.router
    channel = Channel(ws, max_queue=runtime_deps.settings.websocket.outbound_queue_max)
    connection_id = router.registry.register(channel)
    channel.start(on_failure=partial(router.handle_channel_failure, connection_id))

    lifecycle = WebSocketLifecycle(
        ws,
        connection_id=connection_id,
        idle_timeout_s=runtime_deps.settings.websocket.idle_timeout_s,
        watchdog_tick_s=runtime_deps.settings.websocket.watchdog_tick_s,
    )
    try:
        lifecycle.start()
        message_limiter, capture_limiter = _create_rate_limiters(runtime_deps)

        logger.info(
            "WebSocket connection %s accepted. Active: %s",
            connection_id,
            runtime_deps.connections.get_connection_count(),
        )
        await run_message_loop(ws, connection_id, channel, lifecycle, message_limiter, capture_limiter, runtime_deps)
    finally:
        with contextlib.suppress(Exception):
            await lifecycle.stop()
        router.handle_close(connection_id)
        with contextlib.suppress(Exception):
            await channel.stop()
        await channel.close(code=WS_CLOSE_NORMAL_CODE)
        with contextlib.suppress(Exception):
            await runtime_deps.connections.disconnect(ws)
        logger.info(
            "WebSocket connection %s closed. Active: %s",
            connection_id,
            runtime_deps.connections.get_connection_count(),
        )


__all__ = ["handle_websocket_connection"]
