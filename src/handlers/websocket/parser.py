"""Inbound frame parsing/validation."""

from __future__ import annotations

from typing import Any

import orjson

from src.errors import MalformedFrame
from src.config.websocket import (
    WS_KEY_BODY,
    WS_KEY_ROLE,
    WS_KEY_TYPE,
    WS_KEY_TOKEN,
    WS_TYPE_PING,
    WS_TYPE_PONG,
    WS_ROLE_ADMIN,
    WS_TYPE_STATS,
    WS_KEY_PAYLOAD,
    WS_ROLE_CLIENT,
    WS_TYPE_ANSWER,
    WS_TYPE_NOTICE,
    WS_KEY_ADMIN_ID,
    WS_TYPE_CAPTURE,
    WS_TYPE_PENDING,
    WS_KEY_REQUEST_ID,
    WS_TYPE_HANDSHAKE,
    WS_KEY_CLIENT_SESSION_ID,
)

_BARE_TYPES = {WS_TYPE_PING, WS_TYPE_PONG, WS_TYPE_STATS, WS_TYPE_PENDING}


def _required_str(msg: dict[str, Any], key: str) -> str:
    value = msg.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedFrame(f"frame missing non-empty '{key}'")
    return value.strip()


def _optional_str(msg: dict[str, Any], key: str) -> str | None:
    value = msg.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedFrame(f"frame '{key}' must be a string")
    return value.strip() or None


def _parse_handshake(msg: dict[str, Any]) -> dict[str, Any]:
    role = _required_str(msg, WS_KEY_ROLE).lower()
    if role == WS_ROLE_CLIENT:
        return {
            WS_KEY_TYPE: WS_TYPE_HANDSHAKE,
            WS_KEY_ROLE: role,
            WS_KEY_CLIENT_SESSION_ID: _required_str(msg, WS_KEY_CLIENT_SESSION_ID),
        }
    if role == WS_ROLE_ADMIN:
        return {
            WS_KEY_TYPE: WS_TYPE_HANDSHAKE,
            WS_KEY_ROLE: role,
            WS_KEY_TOKEN: _optional_str(msg, WS_KEY_TOKEN),
            WS_KEY_ADMIN_ID: _optional_str(msg, WS_KEY_ADMIN_ID),
        }
    raise MalformedFrame(f"unknown role '{role}'")


def _parse_capture(msg: dict[str, Any]) -> dict[str, Any]:
    payload = msg.get(WS_KEY_PAYLOAD)
    if not isinstance(payload, str) or not payload:
        raise MalformedFrame(f"frame missing non-empty '{WS_KEY_PAYLOAD}'")
    return {
        WS_KEY_TYPE: WS_TYPE_CAPTURE,
        WS_KEY_CLIENT_SESSION_ID: _required_str(msg, WS_KEY_CLIENT_SESSION_ID),
        WS_KEY_PAYLOAD: payload,
    }


def _body(msg: dict[str, Any]) -> str:
    # Operator text is forwarded verbatim, so no stripping here.
    body = msg.get(WS_KEY_BODY)
    if not isinstance(body, str):
        raise MalformedFrame(f"frame missing string '{WS_KEY_BODY}'")
    return body


def _parse_answer(msg: dict[str, Any]) -> dict[str, Any]:
    return {
        WS_KEY_TYPE: WS_TYPE_ANSWER,
        WS_KEY_REQUEST_ID: _required_str(msg, WS_KEY_REQUEST_ID),
        WS_KEY_BODY: _body(msg),
    }


def _parse_notice(msg: dict[str, Any]) -> dict[str, Any]:
    return {
        WS_KEY_TYPE: WS_TYPE_NOTICE,
        WS_KEY_BODY: _body(msg),
        WS_KEY_CLIENT_SESSION_ID: _optional_str(msg, WS_KEY_CLIENT_SESSION_ID),
    }


_PARSERS = {
    WS_TYPE_HANDSHAKE: _parse_handshake,
    WS_TYPE_CAPTURE: _parse_capture,
    WS_TYPE_ANSWER: _parse_answer,
    WS_TYPE_NOTICE: _parse_notice,
}


def parse_client_frame(raw: str | bytes) -> dict[str, Any]:
    """Validate one inbound frame and return it normalized.

    A frame without `type` but with `role` is a handshake. Raises
    MalformedFrame for anything the relay cannot act on.
    """
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise MalformedFrame(f"invalid JSON: {exc}") from exc

    if not isinstance(msg, dict):
        raise MalformedFrame("frame must be a JSON object")

    msg_type = msg.get(WS_KEY_TYPE)
    if msg_type is None and WS_KEY_ROLE in msg:
        msg_type = WS_TYPE_HANDSHAKE
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise MalformedFrame("frame missing non-empty 'type'")
    msg_type = msg_type.strip()

    if msg_type in _BARE_TYPES:
        return {WS_KEY_TYPE: msg_type}
    parser = _PARSERS.get(msg_type)
    if parser is None:
        raise MalformedFrame(f"frame type '{msg_type}' is not supported")
    return parser(msg)


__all__ = ["parse_client_frame"]
