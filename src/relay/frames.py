"""Builders for server-to-party frames."""

from __future__ import annotations

from typing import Any

from src.state.relay import CaptureRequest
from src.config.websocket import (
    WS_KEY_BODY,
    WS_KEY_TYPE,
    WS_KEY_REASON,
    WS_TYPE_ERROR,
    WS_KEY_MESSAGE,
    WS_KEY_PAYLOAD,
    WS_TYPE_ANSWER,
    WS_TYPE_CAPTURE,
    WS_KEY_REQUEST_ID,
    WS_KEY_CLIENT_SESSION_ID,
)


def build_frame(msg_type: str, **fields: Any) -> dict[str, Any]:
    frame: dict[str, Any] = {WS_KEY_TYPE: msg_type}
    frame.update({k: v for k, v in fields.items() if v is not None})
    return frame


def build_error_frame(reason: str, message: str, *, request_id: str | None = None, **details: Any) -> dict[str, Any]:
    frame: dict[str, Any] = {WS_KEY_TYPE: WS_TYPE_ERROR, WS_KEY_REASON: reason, WS_KEY_MESSAGE: message}
    if request_id is not None:
        frame[WS_KEY_REQUEST_ID] = request_id
    frame.update(details)
    return frame


def build_capture_frame(entry: CaptureRequest, *, replayed: bool = False) -> dict[str, Any]:
    frame: dict[str, Any] = {
        WS_KEY_TYPE: WS_TYPE_CAPTURE,
        WS_KEY_REQUEST_ID: entry.request_id,
        WS_KEY_CLIENT_SESSION_ID: entry.origin_client_session_id,
        WS_KEY_PAYLOAD: entry.payload,
        "createdAt": entry.created_at,
    }
    if entry.storage_ref is not None:
        frame["storageRef"] = entry.storage_ref
    if replayed:
        frame["replayed"] = True
    return frame


def build_answer_frame(request_id: str, body: str) -> dict[str, Any]:
    return {WS_KEY_TYPE: WS_TYPE_ANSWER, WS_KEY_REQUEST_ID: request_id, WS_KEY_BODY: body}


__all__ = ["build_answer_frame", "build_capture_frame", "build_error_frame", "build_frame"]
