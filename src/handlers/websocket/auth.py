"""Admin token extraction for WebSocket handshakes."""

from __future__ import annotations

from typing import Any

from fastapi import WebSocket

from src.relay.collaborators import AdminAuthorizer
from src.config.websocket import WS_KEY_TOKEN, WS_ADMIN_TOKEN_QUERY, WS_ADMIN_TOKEN_HEADER


def get_admin_token(ws: WebSocket, frame: dict[str, Any]) -> str:
    # The handshake frame wins; query/header cover clients that cannot set it.
    token = (frame.get(WS_KEY_TOKEN) or "").strip()
    if token:
        return token
    token = (ws.query_params.get(WS_ADMIN_TOKEN_QUERY) or "").strip()
    if token:
        return token
    return (ws.headers.get(WS_ADMIN_TOKEN_HEADER) or "").strip()


def authorize_admin_handshake(ws: WebSocket, frame: dict[str, Any], authorizer: AdminAuthorizer) -> bool:
    return authorizer(get_admin_token(ws, frame) or None)


__all__ = ["authorize_admin_handshake", "get_admin_token"]
