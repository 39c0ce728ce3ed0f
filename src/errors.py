"""Shared error types for the capture relay."""

from __future__ import annotations

from dataclasses import dataclass

from src.config.websocket import (
    WS_ERROR_INTERNAL,
    WS_ERROR_ROLE_CONFLICT,
    WS_ERROR_CHANNEL_FAILURE,
    WS_ERROR_MALFORMED_FRAME,
    WS_ERROR_NO_SUCH_RECIPIENT,
    WS_ERROR_UNKNOWN_REQUEST_ID,
)


@dataclass(frozen=True, slots=True)
class RateLimitError(Exception):
    """Raised when a sliding-window rate limiter is saturated."""

    retry_in: float
    limit: int
    window_seconds: float


class RelayError(Exception):
    """Base for failures that are reported to the party that caused them."""

    reason: str = WS_ERROR_INTERNAL

    def __init__(self, message: str, *, request_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.request_id = request_id


class MalformedFrame(RelayError, ValueError):
    reason = WS_ERROR_MALFORMED_FRAME


class UnknownRequestId(RelayError):
    reason = WS_ERROR_UNKNOWN_REQUEST_ID


class NoSuchRecipient(RelayError):
    reason = WS_ERROR_NO_SUCH_RECIPIENT


class ChannelFailure(RelayError):
    reason = WS_ERROR_CHANNEL_FAILURE


class RoleConflict(RelayError):
    reason = WS_ERROR_ROLE_CONFLICT


class InvalidTransition(RuntimeError):
    """Raised when the reconnect state machine receives an event its state does not accept."""


__all__ = [
    "ChannelFailure",
    "InvalidTransition",
    "MalformedFrame",
    "NoSuchRecipient",
    "RateLimitError",
    "RelayError",
    "RoleConflict",
    "UnknownRequestId",
]
