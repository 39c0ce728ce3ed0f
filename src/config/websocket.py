"""WebSocket protocol configuration and constants."""

from __future__ import annotations

WS_ENDPOINT_PATH = "/ws"

# Frame keys
WS_KEY_TYPE = "type"
WS_KEY_ROLE = "role"
WS_KEY_CLIENT_SESSION_ID = "clientSessionId"
WS_KEY_REQUEST_ID = "requestId"
WS_KEY_PAYLOAD = "payload"
WS_KEY_BODY = "body"
WS_KEY_REASON = "reason"
WS_KEY_MESSAGE = "message"
WS_KEY_TOKEN = "token"
WS_KEY_ADMIN_ID = "adminId"

# Roles
WS_ROLE_CLIENT = "client"
WS_ROLE_ADMIN = "admin"

# Frame types
WS_TYPE_HANDSHAKE = "handshake"
WS_TYPE_READY = "ready"
WS_TYPE_CAPTURE = "capture"
WS_TYPE_CAPTURED = "captured"
WS_TYPE_ANSWER = "answer"
WS_TYPE_ANSWERED = "answered"
WS_TYPE_NOTICE = "notice"
WS_TYPE_STATS = "stats"
WS_TYPE_PENDING = "pending"
WS_TYPE_PING = "ping"
WS_TYPE_PONG = "pong"
WS_TYPE_ERROR = "error"

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_CHANNEL_FAILURE_CODE = 1011
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_UNAUTHORIZED_CODE = 4001
WS_CLOSE_BUSY_CODE = 4002

WS_CLOSE_IDLE_REASON = "idle timeout"

# Header/query names for admin tokens
WS_ADMIN_TOKEN_QUERY = "token"
WS_ADMIN_TOKEN_HEADER = "x-admin-token"

# Idle watchdog
ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
ENV_WS_OUTBOUND_QUEUE_MAX = "WS_OUTBOUND_QUEUE_MAX"

DEFAULT_WS_IDLE_TIMEOUT_S = 600.0
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
DEFAULT_WS_OUTBOUND_QUEUE_MAX = 256

# Errors (reason values)
WS_ERROR_UNKNOWN_REQUEST_ID = "unknown_request_id"
WS_ERROR_NO_SUCH_RECIPIENT = "no_such_recipient"
WS_ERROR_NOT_IDENTIFIED = "not_identified"
WS_ERROR_FORBIDDEN = "forbidden"
WS_ERROR_SESSION_MISMATCH = "session_mismatch"
WS_ERROR_ROLE_CONFLICT = "role_conflict"
WS_ERROR_PAYLOAD_TOO_LARGE = "payload_too_large"
WS_ERROR_MALFORMED_FRAME = "malformed_frame"
WS_ERROR_CHANNEL_FAILURE = "channel_failure"
WS_ERROR_UNAUTHORIZED = "unauthorized"
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"
WS_ERROR_RATE_LIMITED = "rate_limited"
WS_ERROR_INTERNAL = "internal_error"

__all__ = [
    "WS_ENDPOINT_PATH",
    "WS_KEY_TYPE",
    "WS_KEY_ROLE",
    "WS_KEY_CLIENT_SESSION_ID",
    "WS_KEY_REQUEST_ID",
    "WS_KEY_PAYLOAD",
    "WS_KEY_BODY",
    "WS_KEY_REASON",
    "WS_KEY_MESSAGE",
    "WS_KEY_TOKEN",
    "WS_KEY_ADMIN_ID",
    "WS_ROLE_CLIENT",
    "WS_ROLE_ADMIN",
    "WS_TYPE_HANDSHAKE",
    "WS_TYPE_READY",
    "WS_TYPE_CAPTURE",
    "WS_TYPE_CAPTURED",
    "WS_TYPE_ANSWER",
    "WS_TYPE_ANSWERED",
    "WS_TYPE_NOTICE",
    "WS_TYPE_STATS",
    "WS_TYPE_PENDING",
    "WS_TYPE_PING",
    "WS_TYPE_PONG",
    "WS_TYPE_ERROR",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_CHANNEL_FAILURE_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_UNAUTHORIZED_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_ADMIN_TOKEN_QUERY",
    "WS_ADMIN_TOKEN_HEADER",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_WATCHDOG_TICK_S",
    "ENV_WS_OUTBOUND_QUEUE_MAX",
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "DEFAULT_WS_OUTBOUND_QUEUE_MAX",
    "WS_ERROR_UNKNOWN_REQUEST_ID",
    "WS_ERROR_NO_SUCH_RECIPIENT",
    "WS_ERROR_NOT_IDENTIFIED",
    "WS_ERROR_FORBIDDEN",
    "WS_ERROR_SESSION_MISMATCH",
    "WS_ERROR_ROLE_CONFLICT",
    "WS_ERROR_PAYLOAD_TOO_LARGE",
    "WS_ERROR_MALFORMED_FRAME",
    "WS_ERROR_CHANNEL_FAILURE",
    "WS_ERROR_UNAUTHORIZED",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_ERROR_RATE_LIMITED",
    "WS_ERROR_INTERNAL",
]
