"""Builders for party-to-server frames and client session ids."""

from __future__ import annotations

import time
import string
import secrets
from typing import Any

from src.relay.frames import build_frame
from src.config.websocket import (
    WS_KEY_ROLE,
    WS_KEY_TYPE,
    WS_KEY_TOKEN,
    WS_TYPE_PING,
    WS_ROLE_ADMIN,
    WS_TYPE_STATS,
    WS_ROLE_CLIENT,
    WS_TYPE_ANSWER,
    WS_TYPE_NOTICE,
    WS_KEY_ADMIN_ID,
    WS_TYPE_CAPTURE,
    WS_TYPE_PENDING,
    WS_TYPE_HANDSHAKE,
    WS_KEY_CLIENT_SESSION_ID,
)

_SESSION_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_SESSION_SUFFIX_LEN = 9


def new_client_session_id(now_ms: int | None = None) -> str:
    """Return a fresh id of the form `client-<epoch ms>-<9 base36 chars>`."""
    ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    suffix = "".join(secrets.choice(_SESSION_SUFFIX_ALPHABET) for _ in range(_SESSION_SUFFIX_LEN))
    return f"client-{ms}-{suffix}"


def build_client_handshake(client_session_id: str) -> dict[str, Any]:
    return {
        WS_KEY_TYPE: WS_TYPE_HANDSHAKE,
        WS_KEY_ROLE: WS_ROLE_CLIENT,
        WS_KEY_CLIENT_SESSION_ID: client_session_id,
    }


def build_admin_handshake(*, token: str | None = None, admin_id: str | None = None) -> dict[str, Any]:
    frame: dict[str, Any] = {WS_KEY_TYPE: WS_TYPE_HANDSHAKE, WS_KEY_ROLE: WS_ROLE_ADMIN}
    if token:
        frame[WS_KEY_TOKEN] = token
    if admin_id:
        frame[WS_KEY_ADMIN_ID] = admin_id
    return frame


def build_capture_request(client_session_id: str, payload: str) -> dict[str, Any]:
    return build_frame(WS_TYPE_CAPTURE, clientSessionId=client_session_id, payload=payload)


def build_answer(request_id: str, body: str) -> dict[str, Any]:
    return build_frame(WS_TYPE_ANSWER, requestId=request_id, body=body)


def build_notice(body: str, client_session_id: str | None = None) -> dict[str, Any]:
    return build_frame(WS_TYPE_NOTICE, body=body, clientSessionId=client_session_id)


def build_stats_request() -> dict[str, Any]:
    return build_frame(WS_TYPE_STATS)


def build_pending_request() -> dict[str, Any]:
    return build_frame(WS_TYPE_PENDING)


def build_ping() -> dict[str, Any]:
    return build_frame(WS_TYPE_PING)


__all__ = [
    "build_admin_handshake",
    "build_answer",
    "build_capture_request",
    "build_client_handshake",
    "build_notice",
    "build_pending_request",
    "build_ping",
    "build_stats_request",
    "new_client_session_id",
]
