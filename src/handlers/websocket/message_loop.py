"""WebSocket receive loop for the relay endpoint (/ws)."""

from __future__ import annotations

import asyncio
import logging
import contextlib

from fastapi import WebSocket, WebSocketDisconnect

from src.errors import MalformedFrame
from src.state.runtime import RuntimeDeps
from src.relay.channel import Channel
from src.handlers.limits import SlidingWindowRateLimiter
from src.config.websocket import (
    WS_KEY_ROLE,
    WS_KEY_TYPE,
    WS_ROLE_ADMIN,
    WS_TYPE_HANDSHAKE,
    WS_ERROR_UNAUTHORIZED,
    WS_CLOSE_UNAUTHORIZED_CODE,
)

from .parser import parse_client_frame
from .lifecycle import WebSocketLifecycle
from .auth import authorize_admin_handshake
from .limits import consume_limiter, select_rate_limiter

logger = logging.getLogger(__name__)


async def _recv_with_watchdog(ws: WebSocket, lifecycle: WebSocketLifecycle) -> tuple[str | bytes | None, bool]:
    try:
        message = await asyncio.wait_for(ws.receive(), timeout=lifecycle.watchdog_tick_s * 2)
    except TimeoutError:
        return None, lifecycle.should_close()

    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
    text = message.get("text")
    if text is not None:
        return text, False
    return message.get("bytes"), False


async def _reject_unauthorized_admin(runtime_deps: RuntimeDeps, channel: Channel, connection_id: str) -> None:
    runtime_deps.router.send_error(connection_id, WS_ERROR_UNAUTHORIZED, "admin token missing or invalid")
    with contextlib.suppress(Exception):
        await asyncio.wait_for(channel.drain(), timeout=runtime_deps.settings.websocket.watchdog_tick_s)
    await channel.close(code=WS_CLOSE_UNAUTHORIZED_CODE, reason="unauthorized")


async def run_message_loop(
    ws: WebSocket,
    connection_id: str,
    channel: Channel,
    lifecycle: WebSocketLifecycle,
    message_limiter: SlidingWindowRateLimiter,
    capture_limiter: SlidingWindowRateLimiter,
    runtime_deps: RuntimeDeps,
) -> None:
    router = runtime_deps.router
    try:
        while channel.is_open:
            raw, should_exit = await _recv_with_watchdog(ws, lifecycle)
            if should_exit:
                return
            if raw is None:
                continue

            lifecycle.touch()

            try:
                frame = parse_client_frame(raw)
            except MalformedFrame as exc:
                logger.info("dropping malformed frame from %s: %s", connection_id, exc)
                continue

            msg_type = frame[WS_KEY_TYPE]
            limiter = select_rate_limiter(msg_type, message_limiter, capture_limiter)
            if limiter is not None and not consume_limiter(router, connection_id, limiter):
                continue

            if (
                msg_type == WS_TYPE_HANDSHAKE
                and frame[WS_KEY_ROLE] == WS_ROLE_ADMIN
                and not authorize_admin_handshake(ws, frame, runtime_deps.authorizer)
            ):
                logger.warning("rejected admin handshake on %s", connection_id)
                await _reject_unauthorized_admin(runtime_deps, channel, connection_id)
                return

            try:
                await router.handle_frame(connection_id, frame)
            except Exception:
                logger.exception("unhandled error routing %s frame from %s", msg_type, connection_id)
    except WebSocketDisconnect:
        return


__all__ = ["run_message_loop"]
