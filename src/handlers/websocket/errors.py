"""Frames sent straight to a socket that has no relay channel yet."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from src.relay.frames import build_error_frame

logger = logging.getLogger(__name__)


async def safe_send_frame(ws: WebSocket, frame: dict[str, Any]) -> bool:
    try:
        await ws.send_text(orjson.dumps(frame).decode("utf-8"))
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def reject_connection(
    ws: WebSocket,
    *,
    reason: str,
    message: str,
    close_code: int,
) -> None:
    """Accept only long enough to explain the refusal, then close with `close_code`."""
    logger.info("refusing WebSocket connection: %s", reason)
    try:
        await ws.accept()
    except Exception:
        logger.debug("accept failed while refusing connection", exc_info=True)
        return
    await safe_send_frame(ws, build_error_frame(reason, message))
    try:
        await ws.close(code=close_code, reason=reason)
    except Exception:
        logger.debug("close failed while refusing connection", exc_info=True)


__all__ = ["reject_connection", "safe_send_frame"]
